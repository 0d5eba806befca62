from __future__ import annotations

from unittest.mock import AsyncMock, patch


def test_health_not_configured_is_healthy(client):
    response = client.get("/api/v1/health")
    data = response.json()
    assert data["status"] == "healthy"
    assert data["services"]["personnel_api"] == "not_configured"


def test_health_reports_unreachable_api(client):
    from personnel.services.personnel_repository import personnel_repository

    with (
        patch.object(personnel_repository, "initialized", True),
        patch.object(personnel_repository, "check_connection", AsyncMock(return_value=False)),
    ):
        response = client.get("/api/v1/health")

    data = response.json()
    assert data["status"] == "degraded"
    assert data["services"]["personnel_api"] == "error"


def test_health_reports_reachable_api(client):
    from personnel.services.personnel_repository import personnel_repository

    with (
        patch.object(personnel_repository, "initialized", True),
        patch.object(personnel_repository, "check_connection", AsyncMock(return_value=True)),
    ):
        response = client.get("/api/v1/health")

    assert response.json()["services"]["personnel_api"] == "ok"


def test_readiness_probe(client):
    response = client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["ready"] is True


def test_health_protected_requires_auth(client):
    response = client.get("/api/v1/health/protected")
    assert response.status_code == 401


def test_health_protected_with_auth(authenticated_client):
    response = authenticated_client.get("/api/v1/health/protected")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "user" in data
