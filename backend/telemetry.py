"""
Green Eye - ThingSpeak telemetry client.
Channel fields: field1 = servo angle, field2 = VOC, field3 = soil moisture,
field4 = light (photoresistor). Falls back to fixed readings when the API fails.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import requests

from config import HTTP_TIMEOUT, THINGSPEAK_API_KEY, THINGSPEAK_CHANNEL_ID

logger = logging.getLogger(__name__)

THINGSPEAK_BASE_URL = "https://api.thingspeak.com/channels"
DEFAULT_HISTORY_RESULTS = 20

FALLBACK_READING = {"angle": 0.0, "vocVal": 180.0, "soilVal": 42.0, "lightVal": 1250.0}
FALLBACK_HISTORY = {
    "soilData": [40, 42, 38, 45, 43, 41, 39, 44, 42, 40],
    "lightData": [1200, 1250, 1180, 1300, 1275, 1220, 1260, 1240, 1280, 1250],
    "vocData": [170, 180, 165, 190, 185, 175, 172, 188, 180, 175],
    "angleData": [0, 15, 30, 45, 30, 15, 0, -15, -30, 0],
}
FALLBACK_INTERVAL = timedelta(minutes=15)


def _field(value: Any) -> float:
    """ThingSpeak sends fields as strings (or null); unreadable values count as 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if number == number else 0.0


def _clock(ts: str) -> str:
    """ISO timestamp -> HH:MM."""
    try:
        return datetime.fromisoformat(ts.replace("Z", "+00:00")).strftime("%H:%M")
    except (AttributeError, ValueError):
        return ""


def _params(**extra) -> Dict[str, Any]:
    params = dict(extra)
    if THINGSPEAK_API_KEY:
        params["api_key"] = THINGSPEAK_API_KEY
    return params


def get_latest_reading() -> Dict[str, Any]:
    """Most recent channel entry: {angle, vocVal, soilVal, lightVal, timestamp}."""
    url = f"{THINGSPEAK_BASE_URL}/{THINGSPEAK_CHANNEL_ID}/feeds/last.json"
    try:
        response = requests.get(url, params=_params(), timeout=HTTP_TIMEOUT)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("unexpected feed payload")
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning(f"ThingSpeak latest reading unavailable: {e}")
        return {**FALLBACK_READING, "timestamp": datetime.now(timezone.utc).isoformat()}

    return {
        "angle": _field(data.get("field1")),
        "vocVal": _field(data.get("field2")),
        "soilVal": _field(data.get("field3")),
        "lightVal": _field(data.get("field4")),
        "timestamp": data.get("created_at") or datetime.now(timezone.utc).isoformat(),
    }


def _fallback_history() -> Dict[str, List]:
    now = datetime.now()
    count = len(FALLBACK_HISTORY["soilData"])
    timestamps = [
        (now - (count - 1 - i) * FALLBACK_INTERVAL).strftime("%H:%M") for i in range(count)
    ]
    return {"timestamps": timestamps, **{k: list(v) for k, v in FALLBACK_HISTORY.items()}}


def get_reading_history(results: int = DEFAULT_HISTORY_RESULTS) -> Dict[str, List]:
    """
    Last `results` channel entries as parallel series for charting.
    Returns: {timestamps, soilData, lightData, vocData, angleData}
    """
    url = f"{THINGSPEAK_BASE_URL}/{THINGSPEAK_CHANNEL_ID}/feeds.json"
    try:
        response = requests.get(url, params=_params(results=results), timeout=HTTP_TIMEOUT)
        response.raise_for_status()
        feeds = response.json().get("feeds") or []
        if not isinstance(feeds, list) or not all(isinstance(feed, dict) for feed in feeds):
            raise ValueError("unexpected feeds payload")
    except (requests.exceptions.RequestException, ValueError, AttributeError) as e:
        logger.warning(f"ThingSpeak history unavailable: {e}")
        return _fallback_history()

    history: Dict[str, List] = {"timestamps": [], "soilData": [], "lightData": [], "vocData": [], "angleData": []}
    for feed in feeds:
        history["timestamps"].append(_clock(feed.get("created_at", "")))
        history["angleData"].append(_field(feed.get("field1")))
        history["vocData"].append(_field(feed.get("field2")))
        history["soilData"].append(_field(feed.get("field3")))
        history["lightData"].append(_field(feed.get("field4")))
    return history
