"""
Connection diagnostics for the hosted store.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass
from typing import Optional
from urllib.parse import urlsplit

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from lightberry.config import Settings, has_store_config, missing_store_settings
from lightberry.db import ProjectStore
from lightberry.fallback import OperationOutcome, run_safely

STEP_NAMES = (
    "Environment Variables",
    "URL Validation",
    "Network Connectivity",
    "Store API",
)


class StepStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass
class DiagnosticStep:
    step: str
    status: StepStatus = StepStatus.PENDING
    message: str = "Checking..."

    def as_dict(self) -> dict:
        payload = asdict(self)
        payload["status"] = self.status.value
        return payload


def env_check(settings: Settings) -> dict:
    configured = has_store_config(settings)
    return {
        "database_url": bool(settings.database_url),
        "strapi_url": bool(settings.strapi_url),
        "use_in_memory_backends": settings.use_in_memory_backends,
        "redis_url": bool(settings.redis_url),
        "auth_mode": settings.auth_mode,
        "configured": configured,
        "status": "ready" if configured else "not configured",
        "missing": missing_store_settings(settings),
    }


def validate_store_url(settings: Settings) -> str:
    """Return a short description of the configured URL or raise ValueError."""
    if settings.database_url:
        try:
            url = make_url(settings.database_url)
        except ArgumentError as exc:
            raise ValueError("Invalid URL format") from exc
        return f"{url.get_backend_name()} database URL is valid"

    parts = urlsplit(settings.strapi_url or "")
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValueError("Invalid URL format")
    return "URL format is valid"


def _fail(steps: list[DiagnosticStep], index: int, message: str) -> list[DiagnosticStep]:
    steps[index].status = StepStatus.ERROR
    steps[index].message = message
    for step in steps[index + 1 :]:
        step.status = StepStatus.SKIPPED
        step.message = "Skipped"
    return steps


def run_diagnostics(
    settings: Settings, store: Optional[ProjectStore]
) -> list[DiagnosticStep]:
    """Run the four connection checks in order; stop at the first failure."""
    steps = [DiagnosticStep(step=name) for name in STEP_NAMES]
    timeout = settings.diagnostic_timeout_seconds

    if settings.use_in_memory_backends:
        return _fail(steps, 0, "In-memory backends forced (USE_IN_MEMORY_BACKENDS)")
    if not has_store_config(settings):
        missing = " or ".join(missing_store_settings(settings))
        return _fail(steps, 0, f"Missing: {missing}")
    steps[0].status = StepStatus.SUCCESS
    steps[0].message = "All variables present"

    try:
        steps[1].message = validate_store_url(settings)
    except ValueError as exc:
        return _fail(steps, 1, str(exc))
    steps[1].status = StepStatus.SUCCESS

    if store is None:
        return _fail(steps, 2, "Store client could not be created")
    ping = getattr(store, "ping", None)
    if ping is None:
        steps[2].status = StepStatus.SKIPPED
        steps[2].message = "Store has no network layer"
    else:
        result = run_safely(ping, None, name="ping", timeout=timeout)
        if result.outcome is not OperationOutcome.SUCCEEDED:
            return _fail(steps, 2, result.error or "Cannot reach store")
        steps[2].status = StepStatus.SUCCESS
        steps[2].message = "Can reach store servers"

    result = run_safely(store.count_projects, None, name="count_projects", timeout=timeout)
    if result.outcome is not OperationOutcome.SUCCEEDED:
        return _fail(steps, 3, result.error or "Store API error")
    steps[3].status = StepStatus.SUCCESS
    steps[3].message = f"Connection successful ({result.data} projects)"
    return steps


def connection_test(settings: Settings, store: Optional[ProjectStore]) -> dict:
    """One-line connection status: success, error or not-configured."""
    if not has_store_config(settings):
        return {
            "status": "not-configured",
            "message": "Store environment variables are not configured.",
        }
    if store is None:
        return {"status": "error", "message": "Store client could not be created."}

    result = run_safely(
        store.count_projects,
        None,
        name="connection_test",
        timeout=settings.diagnostic_timeout_seconds,
    )
    if result.outcome is OperationOutcome.SUCCEEDED:
        return {
            "status": "success",
            "message": "Connection successful! Database is accessible.",
        }
    return {"status": "error", "message": f"Connection failed: {result.error}"}
