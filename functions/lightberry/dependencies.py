"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
from typing import Optional

from lightberry.auth import (
    AdminAuthService,
    CredentialProvider,
    DemoCredentialProvider,
    StoreCredentialProvider,
)
from lightberry.config import get_settings, has_store_config
from lightberry.db import InMemoryProjectStore, ProjectStore, SqlProjectStore
from lightberry.projects import ProjectService
from lightberry.sessions import InMemorySessionStore, RedisSessionStore, SessionStore
from lightberry.static_projects import static_projects
from lightberry.strapi import StrapiProjectStore

logger = logging.getLogger(__name__)

_remote_store: ProjectStore | None = None
_local_store: InMemoryProjectStore | None = None
_project_service: ProjectService | None = None
_session_store: SessionStore | None = None
_auth_service: AdminAuthService | None = None


def get_remote_store() -> Optional[ProjectStore]:
    """
    Return the hosted store client, or None when it is not configured or
    cannot be created. Creation is retried on the next call after a failure.
    """
    global _remote_store
    if _remote_store:
        return _remote_store

    settings = get_settings()
    if not has_store_config(settings):
        return None
    try:
        if settings.database_url:
            _remote_store = SqlProjectStore(settings.database_url)
        else:
            _remote_store = StrapiProjectStore(
                settings.strapi_url, timeout=settings.store_timeout_seconds
            )
    except Exception:
        logger.exception("Could not create hosted store client")
        return None
    return _remote_store


def get_local_store() -> InMemoryProjectStore:
    global _local_store
    if _local_store:
        return _local_store
    _local_store = InMemoryProjectStore(seed=static_projects())
    return _local_store


def get_project_service() -> ProjectService:
    """
    Return a singleton service so the last fetched list survives across requests.
    """
    global _project_service
    if _project_service:
        return _project_service

    settings = get_settings()
    remote = get_remote_store()
    service = ProjectService(
        local=get_local_store(),
        remote=remote,
        timeout=settings.store_timeout_seconds,
        configured=has_store_config(settings),
    )
    if remote is None and service.configured:
        # Client could not be built; retry on the next request.
        return service
    _project_service = service
    return _project_service


def get_session_store() -> SessionStore:
    global _session_store
    if _session_store:
        return _session_store

    settings = get_settings()
    if settings.redis_url and not settings.use_in_memory_backends:
        _session_store = RedisSessionStore(
            url=settings.redis_url,
            prefix=settings.redis_session_prefix,
        )
    else:
        _session_store = InMemorySessionStore()
    return _session_store


def _credential_provider() -> CredentialProvider:
    settings = get_settings()
    if settings.auth_mode == "store":
        remote = get_remote_store()
        return StoreCredentialProvider(
            remote if isinstance(remote, SqlProjectStore) else None
        )
    return DemoCredentialProvider(
        settings.demo_admin_email, settings.demo_admin_password
    )


def get_auth_service() -> AdminAuthService:
    global _auth_service
    if _auth_service:
        return _auth_service

    settings = get_settings()
    provider = _credential_provider()
    service = AdminAuthService(
        provider,
        get_session_store(),
        ttl_seconds=settings.session_ttl_seconds,
        timeout=settings.store_timeout_seconds,
    )
    if not provider.configured and has_store_config(settings):
        return service
    _auth_service = service
    return _auth_service


def reset_dependencies() -> None:
    """Drop every cached client so the next request rebuilds from settings."""
    global _remote_store, _local_store, _project_service, _session_store, _auth_service
    _remote_store = None
    _local_store = None
    _project_service = None
    _session_store = None
    _auth_service = None
    get_settings.cache_clear()
