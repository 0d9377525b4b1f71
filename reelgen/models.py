"""Pydantic models: generation requests, generated videos and supporting enums."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from reelgen.providers.errors import ErrorKind


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ProviderKind(str, enum.Enum):
    VEO2 = "veo2"                       # direct, synchronous
    VEO3_REPLICATE = "veo3-replicate"   # via intermediary, synchronous
    VEO3_VERTEX = "veo3-vertex"         # direct, long-running operation


class Provenance(str, enum.Enum):
    GENUINE = "genuine"
    SYNTHETIC = "synthetic"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Request / result
# ---------------------------------------------------------------------------

class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    text: str
    theme: str = ""
    aspect_ratio: str = "9:16"
    created_at: datetime = Field(default_factory=_utcnow)


class GeneratedVideo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    prompt_id: str
    video_url: str
    duration: int
    created_at: datetime = Field(default_factory=_utcnow)
    provider: ProviderKind
    provenance: Provenance
    error_kind: Optional[ErrorKind] = None

    @property
    def is_genuine(self) -> bool:
        return self.provenance == Provenance.GENUINE

    def to_publish_payload(self) -> dict[str, Any]:
        """Shape handed to the publishing collaborator."""
        return {
            "id": self.id,
            "promptId": self.prompt_id,
            "videoUrl": self.video_url,
            "duration": self.duration,
            "createdAt": self.created_at.isoformat(),
        }
