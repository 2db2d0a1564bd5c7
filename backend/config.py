"""
Green Eye - runtime settings read from the environment.
Every value has a working default so the dashboard runs without any setup.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

CROP_DATA_PATH = Path(os.environ.get("CROP_DATA_PATH") or BASE_DIR / "data" / "crop_recommendation.csv")

THINGSPEAK_CHANNEL_ID = os.environ.get("THINGSPEAK_CHANNEL_ID") or "3028530"
THINGSPEAK_API_KEY = os.environ.get("THINGSPEAK_API_KEY") or ""

WEATHER_API_KEY = os.environ.get("WEATHER_API_KEY") or ""
DEFAULT_LAT, DEFAULT_LON = 37.7749, -122.4194  # San Francisco

PLANT_ID_API_KEY = os.environ.get("PLANT_ID_API_KEY") or ""

EMAILJS_SERVICE_ID = os.environ.get("EMAILJS_SERVICE_ID") or "default_service"
EMAILJS_TEMPLATE_ID = os.environ.get("EMAILJS_TEMPLATE_ID") or "default_template"
EMAILJS_PUBLIC_KEY = os.environ.get("EMAILJS_PUBLIC_KEY") or "default_key"

HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT") or 10)
LOG_LEVEL = os.environ.get("LOG_LEVEL") or "INFO"
