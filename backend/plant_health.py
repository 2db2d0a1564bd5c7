"""
Green Eye - plant.id health assessment client.
Uploads a prepared leaf image and reports the most likely disease.
"""
import base64
import logging
from typing import Any, Dict

import requests

from config import HTTP_TIMEOUT, PLANT_ID_API_KEY

logger = logging.getLogger(__name__)

PLANT_ID_URL = "https://plant.id/api/v3/health_assessment"
PLANT_ID_TIMEOUT = max(HTTP_TIMEOUT, 30.0)

HEALTHY_RESULT = {
    "diseaseName": "No Disease Detected",
    "confidence": 0.95,
    "symptoms": "Plant appears healthy based on the analysis",
    "treatment": "Continue regular plant care and monitoring",
}
ERROR_RESULT = {
    "diseaseName": "Analysis Error",
    "confidence": 0.0,
    "symptoms": "Unable to analyze the image. Please ensure the image is clear and shows plant leaves.",
    "treatment": "Please try uploading a different image or check your internet connection",
}


def _first_treatment(details: Dict[str, Any]) -> str:
    treatment = details.get("treatment") or {}
    for kind in ("biological", "chemical"):
        options = treatment.get(kind) or []
        if options:
            return options[0]
    return "Treatment information not available"


def parse_assessment(result: Dict[str, Any]) -> Dict[str, Any]:
    """Map a plant.id response to {diseaseName, confidence, symptoms, treatment}."""
    assessment = result.get("health_assessment") or result.get("result", {}).get("disease") or {}
    diseases = assessment.get("diseases") or assessment.get("suggestions") or []
    if not diseases:
        return dict(HEALTHY_RESULT)

    disease = diseases[0]
    details = disease.get("disease_details") or disease.get("details") or {}
    return {
        "diseaseName": disease.get("name") or "Unknown Disease",
        "confidence": disease.get("probability") or 0.5,
        "symptoms": details.get("description") or "Symptoms not available",
        "treatment": _first_treatment(details),
    }


def detect_plant_disease(image_bytes: bytes, mimetype: str = "image/jpeg") -> Dict[str, Any]:
    """Send the image to plant.id; returns ERROR_RESULT when the call fails."""
    encoded = base64.b64encode(image_bytes).decode("ascii")
    payload = {
        "images": [f"data:{mimetype};base64,{encoded}"],
        "modifiers": ["crops_fast", "similar_images"],
        "disease_details": ["common_names", "url", "description", "treatment"],
    }
    try:
        response = requests.post(
            PLANT_ID_URL,
            json=payload,
            headers={"Api-Key": PLANT_ID_API_KEY},
            timeout=PLANT_ID_TIMEOUT,
        )
        response.raise_for_status()
        return parse_assessment(response.json())
    except (requests.exceptions.RequestException, ValueError, AttributeError) as e:
        logger.warning(f"Plant disease detection failed: {e}")
        return dict(ERROR_RESULT)
