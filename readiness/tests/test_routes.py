"""
Tests for the readiness REST API.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import pytest
from fastapi.testclient import TestClient

from main import app
from readiness.logic.contracts import ScoringOptions
from settings import get_scoring_options

from sample_data import PROGRAM_CRITICALITY as CRITICALITY
from sample_data import PROGRAM_CURRICULUM as CURRICULUM
from sample_data import RAW_ROWS as ROWS


client = TestClient(app)


@pytest.fixture
def inverted_options():
    app.dependency_overrides[get_scoring_options] = lambda: ScoringOptions(criticality_mode="inverted")
    yield
    app.dependency_overrides.clear()


def test_health():
    assert client.get("/health").json() == {"status": "ok"}

    response = client.get("/readiness/health")
    assert response.status_code == 200
    assert response.json()["engine"] == "readiness"


def test_full_readiness():
    response = client.post("/readiness", json={
        "records": ROWS,
        "curriculum": CURRICULUM,
        "criticality": CRITICALITY,
        "demographics": {"genero": "Mujer", "ciudad": "Viña", "tipoColegio": "Municipal"},
        "student_id": "12345678",
    })
    assert response.status_code == 200

    data = response.json()
    assert data["student_id"] == "12345678"
    assert data["tier"] in ("high", "medium", "low")
    assert len(data["components"]) == 7
    assert data["components"][0]["key"] == "approval_rate"
    assert "detail" in data["components"][0]
    assert data["stats"]["malla_rows"] == 5
    assert data["coverage"]["matched_rows"] == 5
    assert 0 <= data["total_percentage"] <= 100


def test_simple_readiness():
    response = client.post("/readiness", json={
        "records": ROWS,
        "curriculum": CURRICULUM,
        "student_id": "98765432",
        "format": "simple",
    })
    assert response.status_code == 200

    data = response.json()
    assert set(data) == {"student_id", "total_percentage", "tier", "components"}
    assert data["components"]["approval_rate"] == 1.0


def test_options_dependency(inverted_options):
    response = client.post("/readiness", json={
        "records": ROWS,
        "curriculum": CURRICULUM,
        "criticality": CRITICALITY,
        "student_id": "12345678",
        "format": "simple",
    })
    assert response.json()["components"]["criticality"] == 0.5


def test_invalid_requests():
    assert client.post("/readiness", json={"records": "not a list"}).status_code == 422
    assert client.post("/readiness", json={"records": [], "format": "xml"}).status_code == 422
    assert client.post("/readiness", json={}).status_code == 422


def test_enrich_endpoint():
    response = client.post("/readiness/enrich", json={"records": ROWS, "curriculum": CURRICULUM})
    assert response.status_code == 200

    data = response.json()
    assert data["count"] == len(ROWS)
    assert data["coverage"]["matched_rows"] == 6
    assert data["records"][0]["in_curriculum"] is True
    assert data["records"][0]["canonical_code"] == "KIN101"


def test_students_endpoint():
    response = client.post("/readiness/students", json={"records": ROWS})
    assert response.status_code == 200

    data = response.json()
    assert data["count"] == 2
    assert data["students"][0] == {"student_id": "12345678", "plan_id": "default", "record_count": 6}
