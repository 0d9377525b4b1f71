"""Shared test fixtures."""

from __future__ import annotations

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

# Override env before importing anything from reelgen
os.environ["REELGEN_ENV"] = "test"
os.environ["VIDEO_PROVIDER"] = "veo2"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"
os.environ["REPLICATE_API_KEY"] = "test-replicate-key"
os.environ["VERTEX_API_KEY"] = "test-vertex-key"
os.environ["GOOGLE_PROJECT_ID"] = "test-project"

from reelgen.models import GenerationRequest, ProviderKind
from reelgen.poller import OperationPoller
from reelgen.providers.base import ProviderAdapter, ProviderResult


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

@pytest.fixture()
def cat_request() -> GenerationRequest:
    return GenerationRequest(id="p1", text="a cat", theme="pets")


# ---------------------------------------------------------------------------
# Poller with no wait between attempts
# ---------------------------------------------------------------------------

@pytest.fixture()
def fast_poller() -> OperationPoller:
    return OperationPoller(max_attempts=30, interval_seconds=0)


# ---------------------------------------------------------------------------
# Mock adapters
# ---------------------------------------------------------------------------

def make_adapter(
    kind: ProviderKind,
    *,
    duration: int = 5,
    result: ProviderResult | None = None,
    statuses: list | None = None,
) -> AsyncMock:
    """A provider adapter mock with a scripted invoke() result and status sequence."""
    adapter = AsyncMock(spec=ProviderAdapter)
    adapter.kind = kind
    adapter.nominal_duration = MagicMock(return_value=duration)
    adapter.invoke = AsyncMock(return_value=result or ProviderResult(
        success=True,
        provider=kind.value,
        video_url=f"https://cdn.example.com/{kind.value}.mp4",
    ))
    adapter.fetch_status = AsyncMock(side_effect=statuses or [])
    return adapter


@pytest.fixture()
def mock_adapters() -> dict[ProviderKind, AsyncMock]:
    """One always-succeeding adapter per provider, with the real nominal durations."""
    return {
        ProviderKind.VEO2: make_adapter(ProviderKind.VEO2, duration=5),
        ProviderKind.VEO3_REPLICATE: make_adapter(ProviderKind.VEO3_REPLICATE, duration=8),
        ProviderKind.VEO3_VERTEX: make_adapter(ProviderKind.VEO3_VERTEX, duration=8),
    }


@pytest.fixture()
def adapter_factory():
    return make_adapter
