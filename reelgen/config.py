"""Configuration loading from YAML files + env vars."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_CONFIG_DIR = _PROJECT_ROOT / "config"


# ---------------------------------------------------------------------------
# Pydantic settings (env‑var overrides)
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    reelgen_env: str = "local"
    video_provider: str = "veo2"
    gemini_api_key: str = ""
    replicate_api_key: str = ""
    vertex_api_key: str = ""
    google_project_id: str = ""
    vertex_location: str = "us-central1"
    placeholder_base_url: str = "https://placeholder-video.com"
    log_json: bool = True

    @property
    def json_logs(self) -> bool:
        """JSON log lines everywhere except local runs, which get the console renderer."""
        return self.log_json and self.reelgen_env != "local"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


# ---------------------------------------------------------------------------
# YAML config helpers
# ---------------------------------------------------------------------------

def _load_yaml(name: str) -> dict[str, Any]:
    path = _CONFIG_DIR / name
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


@lru_cache()
def get_engine_config() -> dict[str, Any]:
    return _load_yaml("engine.yaml")


def get_provider_config(kind: str) -> dict[str, Any]:
    return get_engine_config().get("providers", {}).get(kind, {}) or {}


def get_polling_config() -> dict[str, Any]:
    return get_engine_config().get("polling", {}) or {}
