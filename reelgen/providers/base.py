"""Abstract base for all generation provider adapters.

Every backend is reached through one ProviderAdapter subclass. An adapter
accepts a GenerationRequest and produces a ProviderResult carrying either
an inline video URL (synchronous backends) or an AsyncOperationHandle
(long-running backends). Adapters never substitute placeholders; a failed
call comes back as ProviderResult(success=False) with an ErrorKind.
"""

from __future__ import annotations

import abc
import enum
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from reelgen.config import get_provider_config
from reelgen.log import get_logger
from reelgen.models import GenerationRequest, ProviderKind
from reelgen.providers.errors import (
    DispatchError,
    ErrorKind,
    GenerationError,
    ResponseShapeError,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class AsyncOperationHandle:
    """Names a long-running backend job and where to ask about it."""

    name: str
    status_url: str


class OperationState(str, enum.Enum):
    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class OperationStatus:
    state: OperationState
    location: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def pending(cls) -> "OperationStatus":
        return cls(OperationState.PENDING)

    @classmethod
    def succeeded(cls, location: Optional[str]) -> "OperationStatus":
        return cls(OperationState.SUCCEEDED, location=location)

    @classmethod
    def failed(cls, reason: str) -> "OperationStatus":
        return cls(OperationState.FAILED, reason=reason)

    @property
    def missing_artifact(self) -> bool:
        return self.state == OperationState.SUCCEEDED and not self.location


@dataclass
class ProviderResult:
    """Result of dispatching one request to a backend."""

    success: bool
    provider: str = ""
    video_url: Optional[str] = None               # synchronous backends
    handle: Optional[AsyncOperationHandle] = None  # long-running backends
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    elapsed_ms: float = 0.0


class ProviderAdapter(abc.ABC):
    """Every provider adapter must implement these methods."""

    kind: ProviderKind
    default_duration: int = 5

    def __init__(
        self,
        *,
        api_key: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
        config: dict[str, Any] | None = None,
    ):
        self._api_key = api_key
        self._transport = transport
        cfg = config if config is not None else get_provider_config(self.kind.value)
        self._cfg = cfg
        self._model = cfg.get("model", "")
        self._base_url = str(cfg.get("base_url", "")).rstrip("/")
        self._timeout = float(cfg.get("request_timeout_seconds", 30))
        self._nominal_duration = int(
            cfg.get("nominal_duration_seconds", self.default_duration)
        )

    def nominal_duration(self) -> int:
        """Seconds of video this backend produces for one request."""
        return self._nominal_duration

    async def invoke(self, request: GenerationRequest) -> ProviderResult:
        """Dispatch a request and normalize the outcome into a ProviderResult."""
        t0 = time.monotonic()
        try:
            result = await self._dispatch(request)
        except GenerationError as exc:
            result = ProviderResult(success=False, error=str(exc), error_kind=exc.kind)
        except Exception as exc:
            # Anything unexpected on the wire counts as a dispatch failure
            result = ProviderResult(
                success=False,
                error=f"{type(exc).__name__}: {exc}",
                error_kind=ErrorKind.DISPATCH,
            )

        result.provider = self.kind.value
        result.elapsed_ms = (time.monotonic() - t0) * 1000
        if result.success:
            logger.info(
                "provider_invoke_complete",
                request_id=request.id,
                long_running=result.handle is not None,
                elapsed_ms=round(result.elapsed_ms),
            )
        else:
            logger.warning(
                "provider_invoke_failed",
                request_id=request.id,
                error_kind=result.error_kind.value if result.error_kind else None,
                error=result.error,
                elapsed_ms=round(result.elapsed_ms),
            )
        return result

    async def fetch_status(self, handle: AsyncOperationHandle) -> OperationStatus:
        """Query a long-running operation. Only long-running adapters support it."""
        raise NotImplementedError(f"{self.kind.value} does not run long-running operations")

    @abc.abstractmethod
    async def _dispatch(self, request: GenerationRequest) -> ProviderResult:
        """Issue the backend call. Raise GenerationError subclasses on failure."""
        ...

    # ---- shared helpers ----------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        """POST a JSON body; transport or non-2xx raises DispatchError."""
        try:
            async with self._client() as client:
                resp = await client.post(url, json=payload, headers=headers, params=params)
        except httpx.HTTPError as exc:
            raise DispatchError(
                f"{self.kind.value} request failed: {type(exc).__name__}: {exc}"
            ) from exc
        return decode_response(self.kind, resp)

    async def _get_json(self, url: str, *, headers: dict[str, str] | None = None) -> Any:
        """GET a JSON document; transport or non-2xx raises DispatchError."""
        try:
            async with self._client() as client:
                resp = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise DispatchError(
                f"{self.kind.value} status request failed: {type(exc).__name__}: {exc}"
            ) from exc
        return decode_response(self.kind, resp)


def decode_response(kind: ProviderKind, resp: httpx.Response) -> Any:
    """Check the status of a backend response and return its JSON body."""
    if resp.is_error:
        raise DispatchError(
            f"{kind.value} request failed with status {resp.status_code}: {resp.text[:200]}"
        )
    try:
        return resp.json()
    except ValueError as exc:
        raise ResponseShapeError(f"{kind.value} response is not JSON: {exc}") from exc
