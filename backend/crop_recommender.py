"""
Green Eye - Crop Recommendation Engine
k-nearest-neighbours over an agronomic reference dataset (N, P, K, temperature,
humidity, pH, rainfall, crop label). The dataset is loaded once at startup and
handed to CropRecommender; queries never touch the file again.
"""

import csv
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import numpy as np

from config import CROP_DATA_PATH

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("N", "P", "K", "temperature", "humidity", "ph", "rainfall", "label")

# Per-dimension scale factors for temperature, humidity, pH and rainfall, roughly
# each dimension's typical spread so none dominates the distance.
DISTANCE_SCALES = np.array([10.0, 100.0, 14.0, 500.0])

DEFAULT_NEIGHBOURS = 10
MAX_SUGGESTIONS = 3


@dataclass(frozen=True)
class ReferenceSample:
    """One row of the crop recommendation dataset."""
    nitrogen: float
    phosphorus: float
    potassium: float
    temperature: float  # Celsius
    humidity: float     # Percentage
    soil_ph: float      # 0-14
    rainfall: float     # mm
    crop_label: str     # lower-cased


@dataclass(frozen=True)
class RecommendationQuery:
    temperature: float
    humidity: float
    soil_ph: float
    rainfall: float
    soil_type: str = "Loamy"  # accepted, not used by the distance


@dataclass(frozen=True)
class CropSuggestion:
    crop_name: str
    suitability: float  # 0-100


# Used when the dataset file is missing or malformed: staple crops only.
FALLBACK_SAMPLES = (
    ReferenceSample(90, 42, 43, 20.8, 82.0, 6.5, 202.9, "rice"),
    ReferenceSample(71, 54, 16, 22.6, 63.7, 5.7, 87.8, "maize"),
    ReferenceSample(19, 50, 12, 22.1, 58.2, 6.4, 226.7, "wheat"),
)

# Returned only when there is no reference data at all.
FALLBACK_SUGGESTIONS = (
    CropSuggestion("Rice", 85.0),
    CropSuggestion("Wheat", 78.0),
    CropSuggestion("Maize", 72.0),
)


class CropDataset:
    """
    Read-only set of reference samples plus the feature matrix used for distances.

    Attributes:
        samples: tuple of ReferenceSample, in file order
        source: file path the samples came from, or "fallback"
    """

    def __init__(self, samples: Sequence[ReferenceSample], source: str = "memory"):
        self.samples = tuple(samples)
        self.source = source
        self.labels = tuple(s.crop_label for s in self.samples)
        features = np.array(
            [[s.temperature, s.humidity, s.soil_ph, s.rainfall] for s in self.samples],
            dtype=float,
        ).reshape(-1, 4)
        features.setflags(write=False)
        self.features = features

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def crops(self) -> List[str]:
        """Distinct crop labels in first-occurrence order."""
        return list(dict.fromkeys(self.labels))

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"


def _parse_row(row: Dict[str, str]) -> ReferenceSample:
    label = (row["label"] or "").strip().lower()
    if not label:
        raise ValueError("empty crop label")
    values = [float(row[c]) for c in CSV_COLUMNS[:-1]]
    if not all(math.isfinite(v) for v in values):
        raise ValueError("non-finite value")
    return ReferenceSample(*values, crop_label=label)


def read_crop_csv(path: Union[str, Path]) -> List[ReferenceSample]:
    """
    Parse the reference CSV. Any bad row raises ValueError naming the line;
    rows are never zero-filled.
    """
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        header = [h.strip() for h in (reader.fieldnames or [])]
        missing = [c for c in CSV_COLUMNS if c not in header]
        if missing:
            raise ValueError(f"missing columns: {', '.join(missing)}")
        reader.fieldnames = header

        samples = []
        for row in reader:
            try:
                samples.append(_parse_row(row))
            except (TypeError, ValueError, AttributeError) as e:
                raise ValueError(f"line {reader.line_num}: {e}") from e
    return samples


def load_crop_dataset(path: Optional[Union[str, Path]] = None) -> CropDataset:
    """
    Load the reference dataset, falling back to the embedded staple crops when the
    file cannot be read or parsed (or holds no rows).
    """
    path = Path(path) if path is not None else CROP_DATA_PATH
    try:
        samples = read_crop_csv(path)
    except (OSError, ValueError, csv.Error) as e:
        logger.warning(f"Crop dataset unavailable at {path} ({e}); using fallback samples")
        return CropDataset(FALLBACK_SAMPLES, source="fallback")

    if not samples:
        logger.warning(f"Crop dataset at {path} has no rows; using fallback samples")
        return CropDataset(FALLBACK_SAMPLES, source="fallback")

    dataset = CropDataset(samples, source=str(path))
    logger.info(f"Loaded {len(dataset)} reference samples ({len(dataset.crops)} crops) from {path}")
    return dataset


def _suitability(distances: List[float]) -> float:
    """100 minus mean distance x 100, floored at 0. Non-finite means score 0."""
    mean = sum(distances) / len(distances)
    if not math.isfinite(mean):
        return 0.0
    return max(0.0, 100.0 - mean * 100.0)


class CropRecommender:
    """
    KNN crop recommender over a loaded CropDataset.

    Example:
        >>> recommender = CropRecommender(load_crop_dataset())
        >>> recommender.recommend(RecommendationQuery(20.8, 82.0, 6.5, 202.9))
    """

    def __init__(self, dataset: CropDataset):
        self.dataset = dataset

    def distances(self, query: RecommendationQuery) -> np.ndarray:
        """
        Normalised Euclidean distance from the query to every sample.
        NaN or overflowing distances become +inf so those samples rank last.
        """
        point = np.array([query.temperature, query.humidity, query.soil_ph, query.rainfall], dtype=float)
        with np.errstate(all="ignore"):
            scaled = (point - self.dataset.features) / DISTANCE_SCALES
            dist = np.sqrt(np.sum(scaled * scaled, axis=1))
        dist[~np.isfinite(dist)] = np.inf
        return dist

    def recommend(self, query: RecommendationQuery, k: int = DEFAULT_NEIGHBOURS) -> List[CropSuggestion]:
        """
        Rank crops for the query.

        Args:
            query: environmental profile
            k: neighbours to consider; values below 1 count as 1 and values above
               the dataset size use the whole dataset

        Returns:
            Up to 3 CropSuggestion, highest suitability first
        """
        if len(self.dataset) == 0:
            return list(FALLBACK_SUGGESTIONS)

        k = min(max(1, int(k)), len(self.dataset))
        dist = self.distances(query)
        nearest = np.argsort(dist, kind="stable")[:k]

        # Group by label, first occurrence order
        groups: Dict[str, List[float]] = {}
        for idx in nearest:
            groups.setdefault(self.dataset.labels[idx], []).append(float(dist[idx]))

        suggestions = [
            CropSuggestion(crop_name=label.capitalize(), suitability=_suitability(ds))
            for label, ds in groups.items()
        ]
        # list.sort is stable, so equal scores keep grouping order
        suggestions.sort(key=lambda s: s.suitability, reverse=True)
        return suggestions[:MAX_SUGGESTIONS]
