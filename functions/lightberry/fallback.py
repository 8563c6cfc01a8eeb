"""
Safe wrapper around hosted-store calls.

Every remote call is raced against an upper-bound wait. If the store is
not configured or the call fails, the caller gets its declared fallback
value instead. Nothing raises past `run_safely`.
"""

from __future__ import annotations

import enum
import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from lightberry.db import ProjectNotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 8.0

# Timed-out calls that already started keep running here, unobserved.
_executor = ThreadPoolExecutor(max_workers=8, thread_name_prefix="lightberry-store")


class OperationOutcome(str, enum.Enum):
    SUCCEEDED = "succeeded"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"
    NOT_CONFIGURED = "not_configured"
    NOT_FOUND = "not_found"


@dataclass
class OperationResult(Generic[T]):
    data: T
    error: Optional[str]
    is_using_fallback: bool
    outcome: OperationOutcome

    @property
    def ok(self) -> bool:
        return self.outcome in (
            OperationOutcome.SUCCEEDED,
            OperationOutcome.NOT_CONFIGURED,
        )


def run_safely(
    operation: Callable[[], T],
    fallback: T,
    *,
    name: str = "operation",
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    configured: bool = True,
) -> OperationResult[T]:
    if not configured:
        logger.info("%s: store not configured, using fallback data", name)
        return OperationResult(
            data=fallback,
            error=None,
            is_using_fallback=True,
            outcome=OperationOutcome.NOT_CONFIGURED,
        )

    future = _executor.submit(operation)
    try:
        data = future.result(timeout=timeout)
    except FutureTimeoutError:
        # Drops the call if it never started; a running call is left alone.
        future.cancel()
        message = f"{name} timed out after {timeout:g}s"
        logger.warning("%s, using fallback data", message)
        return OperationResult(
            data=fallback,
            error=message,
            is_using_fallback=True,
            outcome=OperationOutcome.TIMED_OUT,
        )
    except ProjectNotFoundError as exc:
        return OperationResult(
            data=fallback,
            error=str(exc),
            is_using_fallback=True,
            outcome=OperationOutcome.NOT_FOUND,
        )
    except Exception as exc:
        logger.exception("%s failed, using fallback data", name)
        return OperationResult(
            data=fallback,
            error=str(exc) or f"{name} failed",
            is_using_fallback=True,
            outcome=OperationOutcome.ERRORED,
        )

    return OperationResult(
        data=data,
        error=None,
        is_using_fallback=False,
        outcome=OperationOutcome.SUCCEEDED,
    )
