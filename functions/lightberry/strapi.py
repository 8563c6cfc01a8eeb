"""
Read-only project store backed by a Strapi CMS instance.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import requests

from lightberry.db import ProjectNotFoundError, ProjectRecord, ReadOnlyStoreError

REQUEST_TIMEOUT = 10  # seconds


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def project_from_strapi(item: dict) -> ProjectRecord:
    """Map a Strapi `{id, attributes: {...}}` item onto a project record."""
    attributes = item.get("attributes") or {}
    return ProjectRecord(
        id=str(item["id"]),
        title=attributes.get("title") or "",
        description=attributes.get("description") or "",
        image_url=attributes.get("img") or "",
        visit_url=attributes.get("link") or "",
        created_at=_parse_timestamp(attributes.get("createdAt")),
    )


class StrapiProjectStore:
    """Projects served by `GET {base_url}/api/projects`. Writes are not supported."""

    def __init__(self, base_url: str, timeout: float = REQUEST_TIMEOUT):
        if not base_url:
            raise ValueError("STRAPI_URL is required for StrapiProjectStore")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

    def _get(self, path: str, params: Optional[dict] = None) -> dict:
        response = self.session.get(
            f"{self.base_url}{path}", params=params, timeout=self.timeout
        )
        if response.status_code == 404:
            raise ProjectNotFoundError(path.rsplit("/", 1)[-1])
        if not response.ok:
            raise RuntimeError(f"Strapi API error: {response.status_code}")
        return response.json()

    def list_projects(self) -> list[ProjectRecord]:
        payload = self._get(
            "/api/projects", params={"populate": "*", "sort": "createdAt:desc"}
        )
        return [project_from_strapi(item) for item in payload.get("data") or []]

    def get_project(self, project_id: str) -> ProjectRecord:
        payload = self._get(f"/api/projects/{project_id}", params={"populate": "*"})
        item = payload.get("data")
        if not item:
            raise ProjectNotFoundError(project_id)
        return project_from_strapi(item)

    def count_projects(self) -> int:
        payload = self._get(
            "/api/projects", params={"pagination[pageSize]": 1}
        )
        pagination = (payload.get("meta") or {}).get("pagination") or {}
        return int(pagination.get("total", len(payload.get("data") or [])))

    def create_project(self, fields: dict) -> ProjectRecord:
        raise ReadOnlyStoreError("Strapi store is read-only")

    def update_project(self, project_id: str, fields: dict) -> ProjectRecord:
        raise ReadOnlyStoreError("Strapi store is read-only")

    def delete_project(self, project_id: str) -> None:
        raise ReadOnlyStoreError("Strapi store is read-only")

    def ping(self) -> None:
        response = self.session.head(f"{self.base_url}/api/projects", timeout=self.timeout)
        if response.status_code >= 500:
            raise RuntimeError(f"HTTP {response.status_code}: {response.reason}")
