"""Provider registry: maps each ProviderKind to its adapter class."""

from __future__ import annotations

from typing import Any

import httpx

from reelgen.config import Settings, get_provider_config
from reelgen.models import ProviderKind
from reelgen.providers.base import ProviderAdapter
from reelgen.providers.replicate import ReplicateAdapter
from reelgen.providers.veo2 import Veo2Adapter
from reelgen.providers.vertex import VertexAdapter

# Registry of adapter classes by kind
_ADAPTER_REGISTRY: dict[ProviderKind, type[ProviderAdapter]] = {
    ProviderKind.VEO2: Veo2Adapter,
    ProviderKind.VEO3_REPLICATE: ReplicateAdapter,
    ProviderKind.VEO3_VERTEX: VertexAdapter,
}


def build_adapters(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[ProviderKind, ProviderAdapter]:
    """Instantiate one adapter per provider kind from settings + engine.yaml."""
    credentials: dict[ProviderKind, dict[str, Any]] = {
        ProviderKind.VEO2: {"api_key": settings.gemini_api_key},
        ProviderKind.VEO3_REPLICATE: {"api_key": settings.replicate_api_key},
        ProviderKind.VEO3_VERTEX: {
            "api_key": settings.vertex_api_key,
            "project_id": settings.google_project_id,
            "location": settings.vertex_location,
        },
    }

    adapters: dict[ProviderKind, ProviderAdapter] = {}
    for kind, cls in _ADAPTER_REGISTRY.items():
        adapters[kind] = cls(
            transport=transport,
            config=get_provider_config(kind.value),
            **credentials.get(kind, {}),
        )
    return adapters
