"""Operation poller: bounded polling of one long-running backend job.

PENDING -> SUCCEEDED | FAILED. Only "not done yet" is retried; a failed
status query ends the wait immediately. The wait is bounded by an attempt
budget, and running out of it is reported as OPERATION_TIMEOUT, distinct
from a backend-reported OPERATION_FAILED.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from reelgen.log import get_logger
from reelgen.providers.base import AsyncOperationHandle, OperationState, OperationStatus
from reelgen.providers.errors import (
    DispatchError,
    ErrorKind,
    GenerationError,
    MissingArtifactError,
    OperationFailed,
    OperationTimeout,
)

logger = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 30
DEFAULT_INTERVAL_SECONDS = 10.0

StatusFetcher = Callable[[AsyncOperationHandle], Awaitable[OperationStatus]]


@dataclass
class PollOutcome:
    """Terminal result of waiting on one operation."""

    success: bool
    location: Optional[str] = None
    attempts: int = 0
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None


class OperationPoller:
    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.interval_seconds = interval_seconds

    async def await_completion(
        self,
        handle: AsyncOperationHandle,
        fetch_status: StatusFetcher,
    ) -> PollOutcome:
        """Query ``handle`` until it is terminal or the attempt budget runs out."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                status = await fetch_status(handle)
            except GenerationError as exc:
                return self._failure(handle, attempt, exc)
            except Exception as exc:
                return self._failure(
                    handle, attempt, DispatchError(f"{type(exc).__name__}: {exc}"),
                )

            if status.state == OperationState.SUCCEEDED:
                if status.missing_artifact:
                    return self._failure(handle, attempt, MissingArtifactError(
                        f"operation {handle.name} succeeded without a video location"
                    ))
                logger.info("operation_succeeded", operation=handle.name, attempts=attempt)
                return PollOutcome(success=True, location=status.location, attempts=attempt)

            if status.state == OperationState.FAILED:
                return self._failure(handle, attempt, OperationFailed(
                    f"operation failed: {status.reason or 'unknown reason'}"
                ))

            logger.info(
                "operation_pending",
                operation=handle.name,
                attempt=attempt,
                max_attempts=self.max_attempts,
            )
            if attempt < self.max_attempts:
                await asyncio.sleep(self.interval_seconds)

        return self._failure(handle, self.max_attempts, OperationTimeout(
            f"operation {handle.name} still pending after {self.max_attempts} attempts"
        ))

    def _failure(
        self,
        handle: AsyncOperationHandle,
        attempts: int,
        exc: GenerationError,
    ) -> PollOutcome:
        logger.warning(
            "operation_poll_failed",
            operation=handle.name,
            attempts=attempts,
            error_kind=exc.kind.value,
            error=str(exc),
        )
        return PollOutcome(success=False, attempts=attempts, error=str(exc), error_kind=exc.kind)
