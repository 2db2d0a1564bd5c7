"""
Green Eye - OpenWeatherMap client: current conditions plus a 24 h rain check.
"""
import logging
from typing import Any, Dict, Optional

import requests

from config import DEFAULT_LAT, DEFAULT_LON, HTTP_TIMEOUT, WEATHER_API_KEY

logger = logging.getLogger(__name__)

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
FORECAST_SLOTS = 8  # 8 x 3 h = 24 h
MPS_TO_KMH = 3.6

FALLBACK_WEATHER = {
    "temperature": 24.0,
    "humidity": 65.0,
    "windSpeed": 12.0,
    "pressure": 1013.0,
    "description": "Partly Cloudy",
    "hasRainForecast": False,
    "location": "Unknown Location",
}


def _get(endpoint: str, lat: float, lon: float, **extra) -> Dict[str, Any]:
    params = {"lat": lat, "lon": lon, "appid": WEATHER_API_KEY, "units": "metric", **extra}
    response = requests.get(f"{OPENWEATHER_BASE_URL}/{endpoint}", params=params, timeout=HTTP_TIMEOUT)
    if response.status_code != 200:
        error_data = response.json() if response.text else {}
        raise ValueError(f"Weather API error: {error_data.get('message', f'HTTP {response.status_code}')}")
    return response.json()


def rain_expected(forecast: Dict[str, Any]) -> bool:
    """True if any forecast slot's main condition mentions rain."""
    return any(
        "rain" in (w.get("main") or "").lower()
        for item in forecast.get("list", [])
        for w in item.get("weather", [])
    )


def get_weather(lat: Optional[float] = None, lon: Optional[float] = None) -> Dict[str, Any]:
    """
    Current weather at lat/lon (defaults to DEFAULT_LAT/DEFAULT_LON).
    Returns: {temperature, humidity, windSpeed (km/h), pressure, description,
              hasRainForecast, location}
    """
    lat = DEFAULT_LAT if lat is None else lat
    lon = DEFAULT_LON if lon is None else lon
    try:
        current = _get("weather", lat, lon)
        forecast = _get("forecast", lat, lon, cnt=FORECAST_SLOTS)
        return {
            "temperature": current["main"]["temp"],
            "humidity": current["main"]["humidity"],
            "windSpeed": current.get("wind", {}).get("speed", 0.0) * MPS_TO_KMH,
            "pressure": current["main"].get("pressure"),
            "description": current.get("weather", [{}])[0].get("description") if current.get("weather") else "unknown",
            "hasRainForecast": rain_expected(forecast),
            "location": current.get("name") or "Unknown Location",
        }
    except (requests.exceptions.RequestException, ValueError, KeyError, TypeError, AttributeError) as e:
        logger.warning(f"Weather unavailable for {lat},{lon}: {e}")
        return dict(FALLBACK_WEATHER)
