import requests
import pytest
from fastapi.testclient import TestClient

from crop_recommender import FALLBACK_SAMPLES, CropDataset, CropRecommender
from main import app, get_recommender


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self._payload = payload
        self.status_code = status_code
        self.text = text if text is not None else ("" if payload is None else "payload")

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"HTTP {self.status_code}")


@pytest.fixture
def fallback_dataset():
    return CropDataset(FALLBACK_SAMPLES, source="fallback")


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def fallback_client(client, fallback_dataset):
    app.dependency_overrides[get_recommender] = lambda: CropRecommender(fallback_dataset)
    return client


@pytest.fixture
def fake_response():
    return FakeResponse
