import pytest
import requests

import alerts
import plant_health
import telemetry
import weather


def _offline(*args, **kwargs):
    raise requests.exceptions.ConnectionError("network unreachable")


# --- telemetry ---

def test_latest_reading_maps_fields(monkeypatch, fake_response):
    payload = {"created_at": "2025-06-01T10:15:00Z", "field1": "30", "field2": "215.5", "field3": "47", "field4": None}
    monkeypatch.setattr(requests, "get", lambda url, **kw: fake_response(payload))
    assert telemetry.get_latest_reading() == {
        "angle": 30.0,
        "vocVal": 215.5,
        "soilVal": 47.0,
        "lightVal": 0.0,
        "timestamp": "2025-06-01T10:15:00Z",
    }


def test_latest_reading_falls_back(monkeypatch):
    monkeypatch.setattr(requests, "get", _offline)
    reading = telemetry.get_latest_reading()
    assert (reading["angle"], reading["vocVal"], reading["soilVal"], reading["lightVal"]) == (0.0, 180.0, 42.0, 1250.0)
    assert reading["timestamp"]


def test_history_builds_series(monkeypatch, fake_response):
    feeds = [
        {"created_at": "2025-06-01T10:15:00Z", "field1": "0", "field2": "180", "field3": "40", "field4": "900"},
        {"created_at": "2025-06-01T10:30:00Z", "field1": "15", "field2": "x", "field3": "41", "field4": "950"},
    ]
    seen = {}

    def fake_get(url, params=None, timeout=None):
        seen["url"], seen["params"] = url, params
        return fake_response({"feeds": feeds})

    monkeypatch.setattr(requests, "get", fake_get)
    history = telemetry.get_reading_history(2)
    assert seen["url"].endswith("/feeds.json")
    assert seen["params"]["results"] == 2
    assert history == {
        "timestamps": ["10:15", "10:30"],
        "soilData": [40.0, 41.0],
        "lightData": [900.0, 950.0],
        "vocData": [180.0, 0.0],
        "angleData": [0.0, 15.0],
    }


def test_history_falls_back(monkeypatch, fake_response):
    monkeypatch.setattr(requests, "get", lambda url, **kw: fake_response(status_code=503))
    history = telemetry.get_reading_history()
    assert len(history["timestamps"]) == 10
    assert history["soilData"] == telemetry.FALLBACK_HISTORY["soilData"]


@pytest.mark.parametrize("payload", [{"feeds": ["oops"]}, {"feeds": "abc"}, {"feeds": [{"field1": "1"}, 7]}, ["feeds"]])
def test_history_falls_back_on_malformed_feeds(monkeypatch, fake_response, payload):
    monkeypatch.setattr(requests, "get", lambda url, **kw: fake_response(payload))
    history = telemetry.get_reading_history(3)
    assert len(history["timestamps"]) == 10
    assert history["vocData"] == telemetry.FALLBACK_HISTORY["vocData"]


# --- weather ---

def _weather_get(fake_response, forecast_mains):
    current = {
        "name": "Nashik",
        "main": {"temp": 28.4, "humidity": 71, "pressure": 1008},
        "wind": {"speed": 5.0},
        "weather": [{"main": "Clouds", "description": "broken clouds"}],
    }
    forecast = {"list": [{"weather": [{"main": m}]} for m in forecast_mains]}

    def fake_get(url, params=None, timeout=None):
        return fake_response(forecast if url.endswith("/forecast") else current)
    return fake_get


def test_weather_maps_current_and_rain(monkeypatch, fake_response):
    monkeypatch.setattr(requests, "get", _weather_get(fake_response, ["Clouds", "Rain"]))
    data = weather.get_weather(20.0, 73.8)
    assert data["location"] == "Nashik"
    assert data["humidity"] == 71
    assert data["windSpeed"] == pytest.approx(18.0)
    assert data["description"] == "broken clouds"
    assert data["hasRainForecast"] is True


def test_weather_without_rain(monkeypatch, fake_response):
    monkeypatch.setattr(requests, "get", _weather_get(fake_response, ["Clear", "Clouds"]))
    assert weather.get_weather()["hasRainForecast"] is False


def test_weather_falls_back_on_api_error(monkeypatch, fake_response):
    monkeypatch.setattr(requests, "get", lambda url, **kw: fake_response({"message": "Invalid API key"}, status_code=401))
    assert weather.get_weather() == weather.FALLBACK_WEATHER


@pytest.mark.parametrize("current,forecast", [
    ({"main": {"temp": 1, "humidity": 2}, "weather": ["x"]}, {"list": []}),
    ({"main": {"temp": 1, "humidity": 2}, "wind": None, "weather": []}, {"list": []}),
    ({"main": {"temp": 1, "humidity": 2}, "weather": []}, {"list": ["x"]}),
])
def test_weather_falls_back_on_malformed_payload(monkeypatch, fake_response, current, forecast):
    def fake_get(url, params=None, timeout=None):
        return fake_response(forecast if url.endswith("/forecast") else current)

    monkeypatch.setattr(requests, "get", fake_get)
    assert weather.get_weather() == weather.FALLBACK_WEATHER


def test_weather_falls_back_offline(monkeypatch):
    monkeypatch.setattr(requests, "get", _offline)
    assert weather.get_weather(1.0, 2.0)["location"] == "Unknown Location"


# --- plant health ---

def test_assessment_picks_first_disease():
    result = plant_health.parse_assessment({
        "health_assessment": {"diseases": [
            {"name": "Early blight", "probability": 0.72, "disease_details": {
                "description": "Brown concentric rings",
                "treatment": {"chemical": ["Chlorothalonil"], "biological": ["Bacillus subtilis"]},
            }},
            {"name": "Late blight", "probability": 0.1},
        ]},
    })
    assert result == {
        "diseaseName": "Early blight",
        "confidence": 0.72,
        "symptoms": "Brown concentric rings",
        "treatment": "Bacillus subtilis",
    }


def test_assessment_without_diseases_is_healthy():
    assert plant_health.parse_assessment({"health_assessment": {"diseases": []}}) == plant_health.HEALTHY_RESULT


def test_detection_posts_data_url(monkeypatch, fake_response):
    sent = {}

    def fake_post(url, json=None, headers=None, timeout=None):
        sent.update(url=url, json=json)
        return fake_response({"health_assessment": {"diseases": []}})

    monkeypatch.setattr(requests, "post", fake_post)
    result = plant_health.detect_plant_disease(b"\xff\xd8abc", "image/jpeg")
    assert result["diseaseName"] == "No Disease Detected"
    assert sent["url"] == plant_health.PLANT_ID_URL
    assert sent["json"]["images"][0].startswith("data:image/jpeg;base64,")


def test_detection_failure_returns_error_result(monkeypatch):
    monkeypatch.setattr(requests, "post", _offline)
    assert plant_health.detect_plant_disease(b"abc") == plant_health.ERROR_RESULT


# --- alerts ---

def test_send_alert_payload(monkeypatch, fake_response):
    sent = {}

    def fake_post(url, json=None, timeout=None):
        sent.update(json)
        return fake_response({"ok": True})

    monkeypatch.setattr(requests, "post", fake_post)
    alerts.send_alert("farmer@example.com", "Rain expected", "Cover the seedlings")
    assert sent["template_params"] == {
        "to_email": "farmer@example.com",
        "subject": "Rain expected",
        "message": "Cover the seedlings",
        "from_name": alerts.ALERT_SENDER_NAME,
    }


def test_send_alert_rejected(monkeypatch, fake_response):
    monkeypatch.setattr(requests, "post", lambda url, **kw: fake_response(status_code=400, text="bad template"))
    with pytest.raises(alerts.AlertDeliveryError):
        alerts.send_alert("farmer@example.com", "s", "m")


def test_send_alert_offline(monkeypatch):
    monkeypatch.setattr(requests, "post", _offline)
    with pytest.raises(alerts.AlertDeliveryError):
        alerts.send_alert("farmer@example.com", "s", "m")
