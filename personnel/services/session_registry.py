"""Per-user overview engines and qualification catalogs.

Each caller gets its own ``EmployeeOverview`` (filters, sort, page and the
cached employee list) and its own ``QualificationCatalog``, keyed by
``session_id``. Persisted overview state shares one store; every session
writes under its own key.
"""

from __future__ import annotations

import logging

from personnel.core.auth import session_id
from personnel.models.auth import AuthState
from personnel.services import overview_model as model
from personnel.services.overview_engine import EmployeeOverview
from personnel.services.personnel_repository import PersonnelRepository
from personnel.services.qualification_catalog import QualificationCatalog
from personnel.services.state_store import KeyValueStore

logger = logging.getLogger(__name__)


def session_state_key(session: str) -> str:
    return f"{model.OVERVIEW_STATE_KEY}:{session}"


class SessionRegistry:
    def __init__(self, store: KeyValueStore, *, debounce_ms: int = model.FILTER_DEBOUNCE_MS) -> None:
        self.store = store
        self.debounce_ms = debounce_ms
        self.overviews: dict[str, EmployeeOverview] = {}
        self.catalogs: dict[str, QualificationCatalog] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def overview_for(self, auth: AuthState) -> EmployeeOverview:
        session = session_id(auth)
        overview = self.overviews.get(session)
        if overview is None:
            logger.debug("Creating overview for session %s", session)
            overview = EmployeeOverview(
                self.store,
                debounce_ms=self.debounce_ms,
                state_key=session_state_key(session),
            )
            self.overviews[session] = overview
        return overview

    def catalog_for(self, auth: AuthState, repository: PersonnelRepository) -> QualificationCatalog:
        session = session_id(auth)
        catalog = self.catalogs.get(session)
        if catalog is None:
            catalog = QualificationCatalog(repository)
            self.catalogs[session] = catalog
        return catalog

    def close(self) -> None:
        for overview in self.overviews.values():
            overview.close()
        for catalog in self.catalogs.values():
            catalog.close()
        self.overviews.clear()
        self.catalogs.clear()
        self._closed = True
