"""
Project operations used by the public listing and the admin panel.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, Optional, TypeVar

from lightberry.db import (
    EDITABLE_FIELDS,
    ProjectNotFoundError,
    ProjectRecord,
    ProjectStore,
)
from lightberry.fallback import (
    DEFAULT_TIMEOUT_SECONDS,
    OperationOutcome,
    OperationResult,
    run_safely,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

REQUIRED_FIELDS = ("title", "description", "visit_url")
STORE_UNAVAILABLE = "Store client could not be created"


class ProjectValidationError(ValueError):
    """Raised before any store call when a submission is incomplete."""

    def __init__(self, message: str, fields: list[str]):
        super().__init__(message)
        self.fields = fields


class DataMode(str, enum.Enum):
    DEMO = "demo"
    OFFLINE = "offline"
    LIVE = "live"


DATA_MODE_MESSAGES = {
    DataMode.DEMO: "Demo Mode: Showing sample projects (store not configured)",
    DataMode.OFFLINE: (
        "Offline Mode: Showing cached projects (database temporarily unavailable)"
    ),
    DataMode.LIVE: "Live Mode: Showing real-time projects from database",
}


def clean_project_fields(fields: dict, *, partial: bool = False) -> dict:
    """
    Trim submitted fields and check the required ones.

    With `partial=True` only the fields present are checked, but a required
    field that is present may not be blank.
    """
    cleaned = {}
    for name in EDITABLE_FIELDS:
        value = fields.get(name)
        if value is None:
            continue
        cleaned[name] = str(value).strip()

    required = (
        [name for name in REQUIRED_FIELDS if name in cleaned]
        if partial
        else list(REQUIRED_FIELDS)
    )
    missing = [name for name in required if not cleaned.get(name)]
    if missing:
        raise ProjectValidationError(
            "Title, description, and visit URL are required", missing
        )
    if not partial:
        cleaned.setdefault("image_url", "")
    return cleaned


class ProjectService:
    """
    Hosted-store access with local fallback.

    When no hosted store is configured, reads and writes go to `local` and
    every result is flagged as fallback data. A configured store whose
    client could not be built (`remote` is None) fails every call instead.
    """

    def __init__(
        self,
        local: ProjectStore,
        remote: Optional[ProjectStore] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        configured: Optional[bool] = None,
    ):
        self.local = local
        self.remote = remote
        self._configured = remote is not None if configured is None else configured
        self.timeout = timeout
        self._last_projects: Optional[list[ProjectRecord]] = None

    @property
    def configured(self) -> bool:
        return self._configured

    def _run(
        self,
        name: str,
        call: Callable[[ProjectStore], T],
        fallback: T,
    ) -> OperationResult[T]:
        if not self._configured:
            try:
                data = call(self.local)
            except ProjectNotFoundError as exc:
                return OperationResult(
                    data=fallback,
                    error=str(exc),
                    is_using_fallback=True,
                    outcome=OperationOutcome.NOT_FOUND,
                )
            return run_safely(lambda: None, data, name=name, configured=False)

        remote = self.remote
        if remote is None:
            logger.warning("%s: %s, using fallback data", name, STORE_UNAVAILABLE)
            return OperationResult(
                data=fallback,
                error=STORE_UNAVAILABLE,
                is_using_fallback=True,
                outcome=OperationOutcome.ERRORED,
            )
        return run_safely(
            lambda: call(remote), fallback, name=name, timeout=self.timeout
        )

    def data_mode(self, result: OperationResult) -> DataMode:
        if not self.configured:
            return DataMode.DEMO
        if result.is_using_fallback:
            return DataMode.OFFLINE
        return DataMode.LIVE

    def list_projects(self) -> OperationResult[list[ProjectRecord]]:
        if self._last_projects is not None:
            fallback = [p.copy() for p in self._last_projects]
        else:
            fallback = self.local.list_projects()
        result = self._run(
            "list_projects", lambda store: store.list_projects(), fallback
        )
        if result.outcome is OperationOutcome.SUCCEEDED:
            self._last_projects = [p.copy() for p in result.data]
        return result

    def _fallback_project(self, project_id: str) -> Optional[ProjectRecord]:
        for project in self._last_projects or []:
            if project.id == project_id:
                return project.copy()
        try:
            return self.local.get_project(project_id)
        except ProjectNotFoundError:
            return None

    def get_project(self, project_id: str) -> OperationResult[Optional[ProjectRecord]]:
        fallback = self._fallback_project(project_id) if self.configured else None
        return self._run(
            "get_project", lambda store: store.get_project(project_id), fallback
        )

    def count_projects(self) -> OperationResult[Optional[int]]:
        return self._run("count_projects", lambda store: store.count_projects(), None)

    def create_project(self, fields: dict) -> OperationResult[Optional[ProjectRecord]]:
        cleaned = clean_project_fields(fields)
        result = self._run(
            "create_project", lambda store: store.create_project(cleaned), None
        )
        self._invalidate(result)
        return result

    def update_project(
        self, project_id: str, fields: dict
    ) -> OperationResult[Optional[ProjectRecord]]:
        if not project_id:
            raise ProjectValidationError("Project ID is required", ["id"])
        cleaned = clean_project_fields(fields, partial=True)
        result = self._run(
            "update_project",
            lambda store: store.update_project(project_id, cleaned),
            None,
        )
        self._invalidate(result)
        return result

    def delete_project(self, project_id: str) -> OperationResult[bool]:
        if not project_id:
            raise ProjectValidationError("Project ID is required", ["id"])

        def delete(store: ProjectStore) -> bool:
            store.delete_project(project_id)
            return True

        result = self._run("delete_project", delete, False)
        self._invalidate(result)
        return result

    def _invalidate(self, result: OperationResult) -> None:
        if result.ok:
            self._last_projects = None
