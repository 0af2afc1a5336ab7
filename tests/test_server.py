"""Tests for the streambound FastAPI server endpoints."""

import pytest

fastapi = pytest.importorskip("fastapi")

from fastapi.testclient import TestClient
from streambound.server.app import app

client = TestClient(app)


# ═══════════════════════════════════════════════════════════════════════════
# API endpoint tests
# ═══════════════════════════════════════════════════════════════════════════

class TestServerEndpoints:
    def test_health(self):
        r = client.get("/api/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok"}

    def test_operators(self):
        r = client.get("/api/operators")
        assert r.status_code == 200
        names = [op["name"] for op in r.json()["operators"]]
        assert "map" in names and "flatMap" in names

    def test_check(self):
        r = client.post("/api/check", json={"upstream": "map", "downstream": "scan"})
        assert r.status_code == 200
        assert r.json()["can_fuse"] is True

    def test_check_empty_name(self):
        r = client.post("/api/check", json={"upstream": "", "downstream": "map"})
        assert r.status_code == 400
        assert "error" in r.json()

    def test_check_validation_error(self):
        r = client.post("/api/check", json={"upstream": "map"})
        assert r.status_code == 422

    def test_optimize(self):
        r = client.post("/api/optimize", json={"operators": ["map", "flatMap", "filter"]})
        assert r.status_code == 200
        data = r.json()
        assert [s["name"] for s in data["segments"]] == ["map+flatMap", "filter"]
        assert data["usage_bound"] == "∞"

    def test_bound(self):
        r = client.post("/api/bound", json={"bounds": [2, "∞", 0]})
        assert r.status_code == 200
        assert r.json() == {"usage_bound": 0}

    def test_bound_error(self):
        r = client.post("/api/bound", json={"bounds": ["lots"]})
        assert r.status_code == 400
        assert "error" in r.json()
