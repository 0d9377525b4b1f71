"""Veo 3 on Vertex AI: long-running operation workflow.

predictLongRunning starts a named operation and returns immediately; the
orchestrator hands the resulting handle to the OperationPoller, which
calls back into fetch_status until the operation is done.
"""

from __future__ import annotations

from typing import Any, Optional

from reelgen.log import get_logger
from reelgen.models import GenerationRequest, ProviderKind
from reelgen.providers.base import (
    AsyncOperationHandle,
    OperationStatus,
    ProviderAdapter,
    ProviderResult,
)
from reelgen.providers.errors import ResponseShapeError

logger = get_logger(__name__)

_API_BASE = "https://aiplatform.googleapis.com/v1"


class VertexAdapter(ProviderAdapter):
    """Vertex AI Veo 3 adapter (predictLongRunning + operation polling)."""

    kind = ProviderKind.VEO3_VERTEX
    default_duration = 8

    def __init__(
        self,
        *,
        project_id: str = "",
        location: str = "us-central1",
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self._project_id = project_id
        self._location = location

    # ---- dispatch ----------------------------------------------------------

    async def _dispatch(self, request: GenerationRequest) -> ProviderResult:
        model = self._model or "veo-3.0-generate-preview"
        endpoint = (
            f"{self._api_base()}/projects/{self._project_id}/locations/{self._location}"
            f"/publishers/google/models/{model}:predictLongRunning"
        )
        body = {
            "instances": [{"prompt": request.text}],
            "parameters": {
                "aspectRatio": request.aspect_ratio or self._cfg.get("aspect_ratio", "9:16"),
                "durationSeconds": self.nominal_duration(),
                "numberOfVideos": 1,
            },
        }

        data = await self._post_json(endpoint, body, headers=self._headers())
        name = data.get("name") if isinstance(data, dict) else None
        if not isinstance(name, str) or not name:
            raise ResponseShapeError("no operation name in Vertex AI response")

        logger.info("vertex_operation_started", request_id=request.id, operation=name)
        handle = AsyncOperationHandle(name=name, status_url=f"{self._api_base()}/{name}")
        return ProviderResult(success=True, handle=handle)

    # ---- status ------------------------------------------------------------

    async def fetch_status(self, handle: AsyncOperationHandle) -> OperationStatus:
        operation = await self._get_json(handle.status_url, headers=self._headers())
        if not isinstance(operation, dict):
            raise ResponseShapeError(f"operation {handle.name} status is not an object")

        if not operation.get("done"):
            return OperationStatus.pending()

        error = operation.get("error")
        if error:
            reason = error.get("message") if isinstance(error, dict) else None
            return OperationStatus.failed(reason or str(error))

        return OperationStatus.succeeded(_video_location(operation.get("response")))

    # ---- internal ----------------------------------------------------------

    def _api_base(self) -> str:
        return self._base_url or _API_BASE

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }


def _video_location(response: Any) -> Optional[str]:
    if not isinstance(response, dict):
        return None
    for key in ("predictions", "videos"):
        items = response.get(key)
        if isinstance(items, list) and items and isinstance(items[0], dict):
            first = items[0]
            for field in ("videoUrl", "gcsUri"):
                location = first.get(field)
                if isinstance(location, str) and location:
                    return location
    return None
