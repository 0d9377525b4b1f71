"""Smoke test launcher: one real generation against the configured provider.

Usage:
    python run_smoke.py ["custom prompt text"]

Provider and credentials come from the environment / .env
(VIDEO_PROVIDER, GEMINI_API_KEY, REPLICATE_API_KEY, VERTEX_API_KEY,
GOOGLE_PROJECT_ID). A failed backend call still prints a video: check
its provenance to see whether the result is genuine.
"""

import asyncio
import os
import sys

os.environ.setdefault("REELGEN_ENV", "local")

from reelgen.config import get_settings
from reelgen.log import get_logger, setup_logging
from reelgen.orchestrator import build_orchestrator

logger = get_logger("run_smoke")


async def main(prompt_text: str = "") -> int:
    settings = get_settings()
    setup_logging(json_output=settings.json_logs)

    orchestrator = build_orchestrator(settings)
    logger.info("smoke_start", provider=orchestrator.provider.value)

    video = await orchestrator.test_generation(prompt_text)
    logger.info(
        "smoke_result",
        video_id=video.id,
        video_url=video.video_url,
        duration=video.duration,
        provenance=video.provenance.value,
        error_kind=video.error_kind.value if video.error_kind else None,
    )
    return 0 if video.is_genuine else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main(" ".join(sys.argv[1:]))))
