"""
Green Eye - Smart agriculture monitoring backend.
FastAPI service: KNN crop recommendations, pest risk, vegetation index proxy,
plus pass-through telemetry, weather, plant disease and email alert endpoints.
"""
import logging
from enum import Enum
from typing import List, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from alerts import AlertDeliveryError, send_alert
from config import LOG_LEVEL
from crop_recommender import (
    DEFAULT_NEIGHBOURS,
    CropRecommender,
    RecommendationQuery,
    load_crop_dataset,
)
from image_processor import prepare_leaf_image
from pest_risk import PestRiskQuery, RiskLevel, classify_pest_risk
from plant_health import detect_plant_disease
from telemetry import DEFAULT_HISTORY_RESULTS, get_latest_reading, get_reading_history
from vegetation import (
    ADC_10BIT_FULL_SCALE,
    HEALTH_NOTE,
    vegetation_grid,
    vegetation_health,
    vegetation_index,
)
from weather import get_weather

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 5 * 1024 * 1024

app = FastAPI(title="Green Eye API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def load_reference_data():
    """Load the crop dataset once; every request shares the same recommender."""
    app.state.recommender = CropRecommender(load_crop_dataset())


def get_recommender(request: Request) -> CropRecommender:
    recommender = getattr(request.app.state, "recommender", None)
    if recommender is None:
        raise HTTPException(status_code=503, detail="Crop dataset not loaded")
    return recommender


# --- Request/Response models ---
class SoilType(str, Enum):
    LOAMY = "Loamy"
    SANDY = "Sandy"
    CLAY = "Clay"
    SILTY = "Silty"


class CropRecommendationRequest(BaseModel):
    temperature: float
    humidity: float
    soilPh: float
    rainfall: float
    soilType: SoilType

    def to_query(self) -> RecommendationQuery:
        return RecommendationQuery(
            temperature=self.temperature,
            humidity=self.humidity,
            soil_ph=self.soilPh,
            rainfall=self.rainfall,
            soil_type=self.soilType.value,
        )


class CropRecommendation(BaseModel):
    cropName: str
    suitability: float


class PestRiskResponse(BaseModel):
    overallRisk: RiskLevel
    humidityRisk: RiskLevel
    ndviRisk: RiskLevel
    vocRisk: RiskLevel
    soilMoistureRisk: RiskLevel


class NdviResponse(BaseModel):
    value: float
    fullScale: float
    health: str
    note: str
    grid: List[List[float]]


class DiseaseDetection(BaseModel):
    diseaseName: str
    confidence: float
    symptoms: str
    treatment: str
    isBlurry: bool = False


class AlertRequest(BaseModel):
    email: str = ""
    subject: str = ""
    message: str = ""


def _number(value: Optional[str]) -> float:
    """Query string -> float; missing or unreadable values are 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if number == number else 0.0


@app.post("/crop-recommendation", response_model=List[CropRecommendation])
def crop_recommendation(
    req: CropRecommendationRequest,
    k: int = Query(DEFAULT_NEIGHBOURS, ge=1, description="Nearest neighbours to consider"),
    recommender: CropRecommender = Depends(get_recommender),
):
    """Top 3 crops for the given conditions, best first."""
    suggestions = recommender.recommend(req.to_query(), k=k)
    return [CropRecommendation(cropName=s.crop_name, suitability=s.suitability) for s in suggestions]


@app.get("/pest-risk", response_model=PestRiskResponse)
def pest_risk(
    humidity: Optional[str] = Query(None, description="Relative humidity %"),
    ndvi: Optional[str] = Query(None, description="Vegetation index (-1 to 1)"),
    voc: Optional[str] = Query(None, description="VOC sensor reading"),
    soilMoisture: Optional[str] = Query(None, description="Soil moisture %"),
):
    """Four-factor pest risk plus overall level."""
    result = classify_pest_risk(PestRiskQuery(
        humidity=_number(humidity),
        vegetation_index=_number(ndvi),
        voc=_number(voc),
        soil_moisture=_number(soilMoisture),
    ))
    return result.to_dict()


@app.get("/ndvi", response_model=NdviResponse)
def ndvi(
    lightVal: Optional[float] = Query(None, description="Raw photoresistor reading"),
    fullScale: float = Query(ADC_10BIT_FULL_SCALE, description="Sensor full scale (1024 for 10-bit, 255 for 8-bit)"),
):
    """Vegetation index proxy from the light sensor, with a heatmap grid."""
    if lightVal is None:
        raise HTTPException(status_code=400, detail="Light value is required")
    value = vegetation_index(lightVal, fullScale)
    return NdviResponse(
        value=value,
        fullScale=fullScale,
        health=vegetation_health(value),
        note=HEALTH_NOTE,
        grid=vegetation_grid(value),
    )


@app.get("/sensors")
def sensors():
    """Latest telemetry reading (fallback values if the channel is unreachable)."""
    return get_latest_reading()


@app.get("/sensors/history")
def sensors_history(results: int = Query(DEFAULT_HISTORY_RESULTS, ge=1, le=8000)):
    return get_reading_history(results)


@app.get("/weather")
def weather(
    lat: Optional[float] = Query(None, description="Latitude"),
    lon: Optional[float] = Query(None, description="Longitude"),
):
    """Current weather and whether rain is expected in the next 24 h."""
    return get_weather(lat, lon)


@app.post("/plant-disease", response_model=DiseaseDetection)
def plant_disease(image: Optional[UploadFile] = File(None)):
    """Detect plant disease from an uploaded leaf image."""
    if image is None:
        raise HTTPException(status_code=400, detail="Image file is required")
    if not image.content_type or not image.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Invalid image: file must be an image")

    contents = image.file.read(MAX_UPLOAD_BYTES + 1)
    if not contents:
        raise HTTPException(status_code=400, detail="Invalid image: empty file")
    if len(contents) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail="Invalid image: file exceeds 5 MB")

    try:
        prepared = prepare_leaf_image(contents)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if prepared.is_blurry:
        logger.info(f"Blurry upload (sharpness {prepared.sharpness}); results may be unreliable")
    result = detect_plant_disease(prepared.jpeg_bytes, "image/jpeg")
    return DiseaseDetection(**result, isBlurry=prepared.is_blurry)


@app.post("/send-alert")
def send_alert_email(req: AlertRequest):
    if not req.email.strip() or not req.subject.strip() or not req.message.strip():
        raise HTTPException(status_code=400, detail="Email, message, and subject are required")
    if "@" not in req.email:
        raise HTTPException(status_code=400, detail="Invalid email address")
    try:
        send_alert(req.email.strip(), req.subject, req.message)
    except AlertDeliveryError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "message": "Alert sent successfully"}


@app.get("/health")
def health(request: Request):
    recommender = getattr(request.app.state, "recommender", None)
    return {
        "status": "active",
        "version": app.version,
        "crop_dataset": {
            "source": recommender.dataset.source if recommender else None,
            "samples": len(recommender.dataset) if recommender else 0,
        },
        "features": [
            "crop_recommendation",
            "pest_risk",
            "ndvi",
            "sensors",
            "weather",
            "plant_disease",
            "alerts",
        ],
    }
