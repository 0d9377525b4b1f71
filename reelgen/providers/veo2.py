"""Veo 2 adapter: direct, synchronous generation through the Gemini API.

One generateContent call; the backend answers with the video reference
inline. Best for: cheap 5-second drafts.
"""

from __future__ import annotations

from typing import Any, Optional

from reelgen.log import get_logger
from reelgen.models import GenerationRequest, ProviderKind
from reelgen.providers.base import ProviderAdapter, ProviderResult
from reelgen.providers.errors import ResponseShapeError

logger = get_logger(__name__)

_DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"


class Veo2Adapter(ProviderAdapter):
    """Gemini Veo 2 video generation adapter."""

    kind = ProviderKind.VEO2
    default_duration = 5

    async def _dispatch(self, request: GenerationRequest) -> ProviderResult:
        model = self._model or "veo-2.0-generate-001"
        endpoint = self._base_url or _DEFAULT_ENDPOINT

        body: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": request.text}]}],
            "generationConfig": {
                "response_modalities": ["video"],
                "video_config": {
                    "aspect_ratio": request.aspect_ratio or self._cfg.get("aspect_ratio", "9:16"),
                    "duration_seconds": self.nominal_duration(),
                },
            },
        }

        logger.info("veo2_submit", request_id=request.id, prompt=request.text[:60])
        data = await self._post_json(
            f"{endpoint}/models/{model}:generateContent",
            body,
            params={"key": self._api_key},
        )

        video_url = _extract_video_url(data)
        if not video_url:
            raise ResponseShapeError("Veo 2 response carries no video reference")

        return ProviderResult(success=True, video_url=video_url)


def _extract_video_url(response: Any) -> Optional[str]:
    """Pull the first video reference out of a generateContent response."""
    if not isinstance(response, dict):
        raise ResponseShapeError(f"Veo 2 response is not an object: {type(response).__name__}")

    candidates = response.get("candidates")
    if not candidates:
        raise ResponseShapeError("Veo 2: no candidates in response")
    if not isinstance(candidates, list) or not isinstance(candidates[0], dict):
        raise ResponseShapeError("Veo 2: candidates is not a list of objects")

    content = candidates[0].get("content")
    if not isinstance(content, dict):
        raise ResponseShapeError("Veo 2: first candidate has no content object")

    for part in content.get("parts") or []:
        if not isinstance(part, dict):
            continue
        file_data = part.get("file_data") or part.get("fileData")
        if isinstance(file_data, dict):
            uri = file_data.get("file_uri") or file_data.get("fileUri")
            if isinstance(uri, str) and uri:
                return uri
        video_url = part.get("videoUrl")
        if isinstance(video_url, str) and video_url:
            return video_url
    return None
