from __future__ import annotations

import time
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from starlette.testclient import TestClient

from personnel.core.dependencies import get_auth_state, get_repository
from personnel.core.result import Ok
from personnel.main import app
from personnel.models.auth import AuthState
from personnel.models.employee import Employee, Qualification
from personnel.services.overview_engine import EmployeeOverview
from personnel.services.personnel_repository import PersonnelRepository
from personnel.services.state_store import MemoryStore

TEST_SECRET = "test-secret"


@pytest.fixture(autouse=True)
def _app_settings(tmp_path):
    from personnel.core.config import settings

    original_url = settings.PERSONNEL_API_URL
    original_state_file = settings.OVERVIEW_STATE_FILE
    settings.PERSONNEL_API_URL = ""
    settings.OVERVIEW_STATE_FILE = str(tmp_path / "ui-state.json")
    yield
    settings.PERSONNEL_API_URL = original_url
    settings.OVERVIEW_STATE_FILE = original_state_file


def _make_token(
    *,
    oid: str = "test-oid-123",
    name: str = "Test User",
    email: str = "test@example.de",
    roles: list[str] | None = None,
    expired: bool = False,
) -> str:
    now = int(time.time())
    claims = {
        "oid": oid,
        "name": name,
        "preferred_username": email,
        "roles": roles or [],
        "exp": now - 3600 if expired else now + 3600,
        "iat": now - 60,
    }
    return jwt.encode(claims, TEST_SECRET, algorithm="HS256")


def make_employee(
    employee_id: str,
    vorname: str,
    nachname: str,
    standort: str = "Berlin",
    qualifikationen: list[str] | None = None,
) -> Employee:
    return Employee(
        id=employee_id,
        vorname=vorname,
        nachname=nachname,
        telefonnummer="030 123456",
        standort=standort,
        street="Hauptstraße 1",
        postcode="10115",
        qualifikationen=qualifikationen or [],
    )


def make_repository(**overrides) -> MagicMock:
    repository = MagicMock(spec=PersonnelRepository)
    repository.list_employees = AsyncMock(return_value=Ok([]))
    repository.get_employee = AsyncMock()
    repository.create_employee = AsyncMock()
    repository.update_employee = AsyncMock()
    repository.delete_employee = AsyncMock(return_value=Ok(None))
    repository.detach_qualification = AsyncMock(return_value=Ok(None))
    repository.list_qualifications = AsyncMock(return_value=Ok([]))
    repository.create_qualification = AsyncMock()
    repository.update_qualification = AsyncMock()
    repository.delete_qualification = AsyncMock(return_value=Ok(None))
    for name, value in overrides.items():
        setattr(repository, name, value)
    return repository


@pytest.fixture
def auth():
    return AuthState(is_authenticated=True, credential="test-token")


@pytest.fixture
def anonymous():
    return AuthState(is_authenticated=False)


@pytest.fixture
def sample_employees():
    return [
        make_employee("1", "Anna", "Schmidt", "Berlin", ["Java", "SQL"]),
        make_employee("2", "Bernd", "Müller", "Hamburg", ["Python"]),
        make_employee("3", "Clara", "Özdemir", "Berlin", ["java"]),
        make_employee("4", "Dieter", "Ahrens", "München", []),
    ]


@pytest.fixture
def sample_qualifications():
    return [Qualification(id=1, skill="Java"), Qualification(id=2, skill="Python"), Qualification(id=3, skill="SQL")]


@pytest.fixture
def repository():
    return make_repository()


@pytest.fixture
def overview():
    engine = EmployeeOverview(MemoryStore(), debounce_ms=10)
    yield engine
    engine.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def authenticated_client(auth, repository):
    app.dependency_overrides[get_auth_state] = lambda: auth
    app.dependency_overrides[get_repository] = lambda: repository
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def anyio_backend():
    return "asyncio"
