"""Generation orchestrator: provider selection, dispatch, polling and fallback.

Responsibilities:
  - Hold the single active provider and snapshot it on entry to generate().
  - Dispatch to the provider adapter; drive the OperationPoller when the
    adapter hands back a long-running operation handle.
  - Turn every failure into a placeholder video (provenance=synthetic), so
    callers always get exactly one GeneratedVideo per request.
  - Fan batches out concurrently with per-item fault isolation.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from typing import Optional

import httpx

from reelgen.config import Settings, get_polling_config, get_settings
from reelgen.log import get_logger, request_context
from reelgen.metrics import (
    GENERATION_FAILURES,
    GENERATION_TIME,
    GENERATIONS_TOTAL,
    POLL_ATTEMPTS,
    PROVIDER_SWITCHES,
)
from reelgen.models import GeneratedVideo, GenerationRequest, Provenance, ProviderKind
from reelgen.poller import DEFAULT_INTERVAL_SECONDS, DEFAULT_MAX_ATTEMPTS, OperationPoller
from reelgen.providers.base import ProviderAdapter
from reelgen.providers.errors import ErrorKind
from reelgen.providers.registry import build_adapters

logger = get_logger(__name__)

DEFAULT_TEST_PROMPT = (
    "A fluffy orange cat wearing sunglasses sits in a director's chair, "
    "occasionally looking directly at the camera with an expression of "
    "existential contemplation"
)


class GenerationOrchestrator:
    """Dispatches generation requests to the active provider with fallback."""

    def __init__(
        self,
        adapters: dict[ProviderKind, ProviderAdapter],
        provider: ProviderKind | str = ProviderKind.VEO2,
        *,
        poller: Optional[OperationPoller] = None,
        placeholder_base_url: str = "https://placeholder-video.com",
    ):
        self._adapters = dict(adapters)
        self._provider = self._resolve(provider)
        self._poller = poller or OperationPoller()
        self._placeholder_base_url = placeholder_base_url.rstrip("/")

    # ---- provider selection ------------------------------------------------

    @property
    def provider(self) -> ProviderKind:
        return self._provider

    def set_provider(self, provider: ProviderKind | str) -> None:
        """Switch the active provider for generations started from now on."""
        kind = self._resolve(provider)
        self._provider = kind
        PROVIDER_SWITCHES.labels(to_provider=kind.value).inc()
        logger.info("provider_switched", provider=kind.value)

    def _resolve(self, provider: ProviderKind | str) -> ProviderKind:
        try:
            kind = ProviderKind(provider)
        except ValueError:
            raise ValueError(f"Unknown video provider: {provider!r}") from None
        if kind not in self._adapters:
            raise ValueError(f"No adapter configured for provider {kind.value}")
        return kind

    # ---- generation --------------------------------------------------------

    async def generate(self, request: GenerationRequest) -> GeneratedVideo:
        """Generate one video. Never raises; failures yield a placeholder."""
        # Snapshot: a provider switch mid-flight must not affect this request
        kind = self._provider
        adapter = self._adapters[kind]
        t0 = time.monotonic()

        with request_context(request.id, kind.value):
            logger.info("generation_start", prompt=request.text[:60])
            try:
                video = await self._run(kind, adapter, request)
            except Exception as exc:
                video = self._fallback(
                    kind, adapter, request, ErrorKind.DISPATCH,
                    f"unhandled {type(exc).__name__}: {exc}",
                )

            GENERATION_TIME.labels(provider=kind.value).observe(time.monotonic() - t0)
            GENERATIONS_TOTAL.labels(
                provider=kind.value, provenance=video.provenance.value,
            ).inc()
            logger.info(
                "generation_complete",
                video_id=video.id,
                provenance=video.provenance.value,
                elapsed_ms=round((time.monotonic() - t0) * 1000),
            )
            return video

    async def _run(
        self,
        kind: ProviderKind,
        adapter: ProviderAdapter,
        request: GenerationRequest,
    ) -> GeneratedVideo:
        result = await adapter.invoke(request)
        if not result.success:
            return self._fallback(
                kind, adapter, request,
                result.error_kind or ErrorKind.DISPATCH, result.error or "unknown error",
            )

        video_url = result.video_url
        if result.handle is not None:
            outcome = await self._poller.await_completion(result.handle, adapter.fetch_status)
            POLL_ATTEMPTS.labels(provider=kind.value).observe(outcome.attempts)
            if not outcome.success:
                return self._fallback(
                    kind, adapter, request,
                    outcome.error_kind or ErrorKind.DISPATCH, outcome.error or "unknown error",
                )
            video_url = outcome.location

        if not video_url:
            return self._fallback(
                kind, adapter, request, ErrorKind.RESPONSE_SHAPE,
                "provider reported success without a video location",
            )

        return GeneratedVideo(
            prompt_id=request.id,
            video_url=video_url,
            duration=adapter.nominal_duration(),
            provider=kind,
            provenance=Provenance.GENUINE,
        )

    def _fallback(
        self,
        kind: ProviderKind,
        adapter: ProviderAdapter,
        request: GenerationRequest,
        error_kind: ErrorKind,
        error: str,
    ) -> GeneratedVideo:
        GENERATION_FAILURES.labels(provider=kind.value, error_kind=error_kind.value).inc()
        logger.warning(
            "generation_fallback",
            request_id=request.id,
            provider=kind.value,
            error_kind=error_kind.value,
            error=error,
        )
        return GeneratedVideo(
            prompt_id=request.id,
            video_url=self.placeholder_url(kind, request.id),
            duration=adapter.nominal_duration(),
            provider=kind,
            provenance=Provenance.SYNTHETIC,
            error_kind=error_kind,
        )

    def placeholder_url(self, kind: ProviderKind, request_id: str) -> str:
        return f"{self._placeholder_base_url}/{kind.value}/{request_id}.mp4"

    async def generate_batch(self, requests: list[GenerationRequest]) -> list[GeneratedVideo]:
        """Generate all requests concurrently; one video per request, in input order."""
        videos = list(await asyncio.gather(*(self.generate(r) for r in requests)))

        genuine = sum(1 for v in videos if v.is_genuine)
        logger.info(
            "batch_complete",
            total=len(videos),
            genuine=genuine,
            synthetic=len(videos) - genuine,
        )
        return videos

    async def test_generation(self, prompt_text: str = "") -> GeneratedVideo:
        """Single-shot generation with a synthesized request."""
        request = GenerationRequest(
            id=uuid.uuid4().hex,
            text=prompt_text or DEFAULT_TEST_PROMPT,
            theme="test",
        )
        return await self.generate(request)


def build_orchestrator(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> GenerationOrchestrator:
    """Wire settings, engine.yaml, adapters and the poller together."""
    settings = settings or get_settings()
    polling = get_polling_config()
    poller = OperationPoller(
        max_attempts=int(polling.get("max_attempts", DEFAULT_MAX_ATTEMPTS)),
        interval_seconds=float(polling.get("interval_seconds", DEFAULT_INTERVAL_SECONDS)),
    )
    return GenerationOrchestrator(
        build_adapters(settings, transport=transport),
        settings.video_provider,
        poller=poller,
        placeholder_base_url=settings.placeholder_base_url,
    )
