"""Tests for error handling in the CatalogRec API.

Tests various error scenarios including missing context, failed training
and request validation.
"""

import logging
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from src.api.main import app
from src.api.state import set_worker
from src.worker.catalog import StaticCatalogProvider
from src.worker.events import EventLog
from src.worker.worker import ModelTrainingWorker

# Configure logging for tests
logging.basicConfig(level=logging.WARNING)

# Create test client
client = TestClient(app)

USERS = [
    {"age": 20, "purchases": [{"name": "A"}]},
    {"age": 40, "purchases": []},
]


@pytest.fixture(autouse=True)
def worker(example_catalog) -> Generator[ModelTrainingWorker, None, None]:
    """Install a worker serving the two-product example catalog."""
    worker = ModelTrainingWorker(
        catalog_provider=StaticCatalogProvider(example_catalog),
        emit=EventLog(),
    )
    set_worker(worker)
    yield worker
    set_worker(None)


def test_recommend_before_training_returns_503():
    """Test that recommending without a context returns 503."""
    response = client.post("/recommend", json={"user": USERS[0]})

    assert response.status_code == 503
    data = response.json()
    assert data["error"] == "ContextNotReadyError"
    assert "train" in data["message"]


def test_context_vectors_before_training_returns_503():
    """Test that /context/vectors needs a trained context."""
    response = client.get("/context/vectors")

    assert response.status_code == 503
    assert response.json()["error"] == "ContextNotReadyError"


def test_train_with_empty_users_reports_failure():
    """Test that training on no users fails without publishing."""
    response = client.post("/train", json={"users": []})

    assert response.status_code == 202
    events = client.get("/events").json()
    assert events[-1]["type"] == "trainingFailed"
    assert events[-1]["error_type"] == "EmptyInputError"
    assert client.get("/status").json()["context_loaded"] is False


def test_failed_training_keeps_previous_context(worker):
    """Test that the previous context stays authoritative after a failure."""
    client.post("/train", json={"users": USERS})
    worker.catalog_provider.products = []

    client.post("/train", json={"users": USERS})

    status = client.get("/status").json()
    assert status["version"] == 1
    assert status["context_loaded"] is True
    response = client.post("/recommend", json={"user": USERS[1]})
    assert response.status_code == 200
    assert response.json()["context_version"] == 1


def test_train_missing_users_field_returns_422():
    """Test that the request body must contain users."""
    response = client.post("/train", json={})

    assert response.status_code == 422


def test_train_invalid_age_returns_422():
    """Test that a non-numeric age is a validation error."""
    response = client.post(
        "/train", json={"users": [{"age": "old", "purchases": []}]}
    )

    assert response.status_code == 422


def test_recommend_missing_user_returns_422():
    """Test that the recommend body must contain a user."""
    response = client.post("/recommend", json={"top_n": 3})

    assert response.status_code == 422


def test_recommend_zero_top_n():
    """Test that zero top_n returns an empty list."""
    client.post("/train", json={"users": USERS})

    response = client.post("/recommend", json={"user": USERS[0], "top_n": 0})

    assert response.status_code == 200
    assert response.json()["recommendations"] == []


def test_health_check_not_affected_by_missing_context():
    """Test that /ping works even if nothing was trained."""
    response = client.get("/ping")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
