"""Veo 3 via Replicate: delegated, synchronous generation.

Replicate runs the model on our behalf. With ``Prefer: wait`` the
predictions endpoint holds the connection open for up to a minute; a
prediction still starting or processing after that is followed through
its ``urls.get`` link until it reaches succeeded, failed or canceled.
From the orchestrator's point of view the call is still a single blocking
invoke that yields the final output.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from reelgen.log import get_logger
from reelgen.models import GenerationRequest, ProviderKind
from reelgen.providers.base import ProviderAdapter, ProviderResult
from reelgen.providers.errors import OperationFailed, OperationTimeout, ResponseShapeError

logger = get_logger(__name__)

_API_BASE = "https://api.replicate.com/v1"
_NEGATIVE_PROMPT = "low quality, blurry, distorted"
_TERMINAL_STATUSES = ("succeeded", "failed", "canceled")


class ReplicateAdapter(ProviderAdapter):
    """Google Veo 3 hosted on Replicate."""

    kind = ProviderKind.VEO3_REPLICATE
    default_duration = 8

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self._wait_interval = float(self._cfg.get("wait_interval_seconds", 5))
        self._max_wait_polls = int(self._cfg.get("max_wait_polls", 120))

    async def _dispatch(self, request: GenerationRequest) -> ProviderResult:
        model = self._model or "google/veo-3"
        payload = {
            "input": {
                "prompt": request.text,
                "enhance_prompt": True,
                "negative_prompt": self._cfg.get("negative_prompt", _NEGATIVE_PROMPT),
            },
        }

        logger.info("replicate_submit", request_id=request.id, model=model)
        prediction = await self._post_json(
            f"{self._api_base()}/models/{model}/predictions",
            payload,
            headers=self._headers(wait=True),
        )
        prediction = await self._wait(_as_prediction(prediction))

        status = prediction.get("status")
        if status in ("failed", "canceled"):
            raise OperationFailed(
                f"Replicate prediction {prediction.get('id', '?')} {status}: "
                f"{prediction.get('error') or 'no reason given'}"
            )

        video_url = _output_url(prediction.get("output"))
        if video_url is None:
            raise ResponseShapeError(
                f"unexpected output format from Replicate: "
                f"{type(prediction.get('output')).__name__}"
            )

        return ProviderResult(success=True, video_url=video_url)

    async def _wait(self, prediction: dict[str, Any]) -> dict[str, Any]:
        """Follow a prediction until Replicate reports a terminal status."""
        polls = 0
        while prediction.get("status") not in _TERMINAL_STATUSES:
            if polls >= self._max_wait_polls:
                raise OperationTimeout(
                    f"Replicate prediction {prediction.get('id', '?')} still "
                    f"{prediction.get('status') or 'unknown'} after {polls} status checks"
                )
            status_url = self._status_url(prediction)
            polls += 1
            logger.info(
                "replicate_waiting",
                prediction=prediction.get("id"),
                status=prediction.get("status"),
                poll=polls,
            )
            await asyncio.sleep(self._wait_interval)
            prediction = _as_prediction(await self._get_json(status_url, headers=self._headers()))
        return prediction

    def _status_url(self, prediction: dict[str, Any]) -> str:
        urls = prediction.get("urls")
        if isinstance(urls, dict) and isinstance(urls.get("get"), str):
            return urls["get"]
        prediction_id = prediction.get("id")
        if not isinstance(prediction_id, str) or not prediction_id:
            raise ResponseShapeError("running Replicate prediction has no id or status link")
        return f"{self._api_base()}/predictions/{prediction_id}"

    def _api_base(self) -> str:
        return self._base_url or _API_BASE

    def _headers(self, *, wait: bool = False) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if wait:
            headers["Prefer"] = "wait"
        return headers


def _as_prediction(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ResponseShapeError(f"Replicate prediction is not an object: {type(data).__name__}")
    return data


def _output_url(output: Any) -> Optional[str]:
    if isinstance(output, str) and output:
        return output
    # Some model versions wrap the file URL in a one-element list
    if isinstance(output, list) and len(output) == 1 and isinstance(output[0], str) and output[0]:
        return output[0]
    return None
