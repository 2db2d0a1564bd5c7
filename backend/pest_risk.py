"""
Green Eye - Rule-based pest risk scoring.
Four thresholded factors (humidity, vegetation index, VOC, soil moisture) and an
overall level from their mean score. Pure functions, no I/O.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


RISK_SCORES: Dict[RiskLevel, int] = {
    RiskLevel.LOW: 1,
    RiskLevel.MEDIUM: 2,
    RiskLevel.HIGH: 3,
}

OVERALL_LOW_MAX = 1.5
OVERALL_MEDIUM_MAX = 2.5


@dataclass(frozen=True)
class PestRiskQuery:
    humidity: float          # %
    vegetation_index: float  # typically -1..1
    voc: float               # sensor units (ppm)
    soil_moisture: float     # %


@dataclass(frozen=True)
class PestRiskResult:
    overall_risk: RiskLevel
    humidity_risk: RiskLevel
    ndvi_risk: RiskLevel
    voc_risk: RiskLevel
    soil_moisture_risk: RiskLevel

    def to_dict(self) -> Dict[str, str]:
        return {
            "overallRisk": self.overall_risk.value,
            "humidityRisk": self.humidity_risk.value,
            "ndviRisk": self.ndvi_risk.value,
            "vocRisk": self.voc_risk.value,
            "soilMoistureRisk": self.soil_moisture_risk.value,
        }


def humidity_risk(humidity: float) -> RiskLevel:
    if humidity > 80:
        return RiskLevel.HIGH
    if humidity > 60:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def ndvi_risk(vegetation_index: float) -> RiskLevel:
    """Sparse or stressed vegetation is more exposed."""
    if vegetation_index < 0.4:
        return RiskLevel.HIGH
    if vegetation_index < 0.6:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def voc_risk(voc: float) -> RiskLevel:
    if voc > 300:
        return RiskLevel.HIGH
    if voc > 200:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def soil_moisture_risk(soil_moisture: float) -> RiskLevel:
    """Wet soil and dry soil are both Medium; 40-60% is Low. Never High."""
    if soil_moisture > 60:
        return RiskLevel.MEDIUM
    if soil_moisture > 40:
        return RiskLevel.LOW
    return RiskLevel.MEDIUM


def overall_risk(*factors: RiskLevel) -> RiskLevel:
    """Mean of Low=1 / Medium=2 / High=3: <=1.5 Low, <=2.5 Medium, else High."""
    average = sum(RISK_SCORES[f] for f in factors) / len(factors)
    if average <= OVERALL_LOW_MAX:
        return RiskLevel.LOW
    if average <= OVERALL_MEDIUM_MAX:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def classify_pest_risk(query: PestRiskQuery) -> PestRiskResult:
    """
    Classify each factor and the overall pest risk.
    Returns: PestRiskResult (same input always gives the same result)
    """
    h = humidity_risk(query.humidity)
    n = ndvi_risk(query.vegetation_index)
    v = voc_risk(query.voc)
    s = soil_moisture_risk(query.soil_moisture)
    return PestRiskResult(
        overall_risk=overall_risk(h, n, v, s),
        humidity_risk=h,
        ndvi_risk=n,
        voc_risk=v,
        soil_moisture_risk=s,
    )
