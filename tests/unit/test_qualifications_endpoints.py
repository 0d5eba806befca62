from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from personnel.core.dependencies import get_catalog
from personnel.core.result import Err, Ok
from personnel.main import app
from personnel.models.employee import Qualification
from personnel.services.notification_service import notification_center
from personnel.services.qualification_catalog import QualificationCatalog
from tests.conftest import make_employee


@pytest.fixture
def catalog(repository):
    catalog = QualificationCatalog(repository)
    app.dependency_overrides[get_catalog] = lambda: catalog
    return catalog


def test_list_requires_auth(client):
    assert client.get("/api/v1/qualifications").status_code == 401


def test_list_and_search(authenticated_client, repository, catalog, sample_qualifications):
    repository.list_qualifications.return_value = Ok(sample_qualifications)

    response = authenticated_client.get("/api/v1/qualifications")
    assert [q["skill"] for q in response.json()] == ["Java", "Python", "SQL"]

    response = authenticated_client.get("/api/v1/qualifications", params={"search": "q"})
    assert [q["skill"] for q in response.json()] == ["SQL"]


def test_list_failure(authenticated_client, repository, catalog):
    repository.list_qualifications.return_value = Err("Der Server ist aktuell nicht erreichbar.", status=503)

    response = authenticated_client.get("/api/v1/qualifications")

    assert response.status_code == 502
    assert response.json()["detail"] == "Der Server ist aktuell nicht erreichbar."


def test_create(authenticated_client, repository, catalog):
    repository.create_qualification.return_value = Ok(Qualification(id=4, skill="Rust"))

    response = authenticated_client.post("/api/v1/qualifications", json={"label": " Rust "})

    assert response.status_code == 201
    assert response.json() == {"id": 4, "skill": "Rust"}
    repository.create_qualification.assert_awaited_once()
    assert repository.create_qualification.await_args.args[0] == "Rust"


def test_create_conflict(authenticated_client, repository, catalog):
    repository.create_qualification.return_value = Err("Diese Qualifikation existiert bereits.", status=409)

    response = authenticated_client.post("/api/v1/qualifications", json={"label": "Java"})

    assert response.status_code == 409


def test_create_rejects_empty_body(authenticated_client, catalog):
    response = authenticated_client.post("/api/v1/qualifications", json={"label": ""})
    assert response.status_code == 422


def test_ensure_existing(authenticated_client, repository, catalog, sample_qualifications):
    repository.list_qualifications.return_value = Ok(sample_qualifications)

    response = authenticated_client.post("/api/v1/qualifications/ensure", json={"label": "python"})

    assert response.status_code == 200
    assert response.json() == {"qualification": {"id": 2, "skill": "Python"}, "created": False}
    repository.create_qualification.assert_not_awaited()


def test_ensure_blank_label(authenticated_client, catalog):
    response = authenticated_client.post("/api/v1/qualifications/ensure", json={"label": "   "})
    assert response.status_code == 400


def test_rename(authenticated_client, repository, catalog):
    repository.update_qualification.return_value = Ok(Qualification(id=1, skill="Java EE"))

    response = authenticated_client.put("/api/v1/qualifications/1", json={"label": "Java EE"})

    assert response.status_code == 200
    assert response.json()["skill"] == "Java EE"


def test_delete_unknown_qualification(authenticated_client, catalog):
    response = authenticated_client.delete("/api/v1/qualifications/42")
    assert response.status_code == 404


def test_delete_cascade_reports_failed_detaches(authenticated_client, repository, catalog):
    sql = Qualification(id=3, skill="SQL")
    repository.list_qualifications.return_value = Ok([sql])
    repository.list_employees.return_value = Ok(
        [
            make_employee("A", "Anna", "Schmidt", qualifikationen=["SQL"]),
            make_employee("B", "Bernd", "Müller", qualifikationen=["SQL"]),
        ]
    )

    async def detach(employee_id, qualification_id, _auth):
        if employee_id == "A":
            return Err("Der Server ist aktuell nicht erreichbar.", status=503)
        return Ok(None)

    repository.detach_qualification = AsyncMock(side_effect=detach)
    notification_center.drain()

    response = authenticated_client.delete("/api/v1/qualifications/3")

    assert response.status_code == 200
    data = response.json()
    assert data["detached_employee_ids"] == ["B"]
    assert list(data["failed_detaches"]) == ["A"]
    repository.delete_qualification.assert_awaited_once()
    tones = [n.tone for n in notification_center.drain()]
    assert tones == ["error", "success"]
