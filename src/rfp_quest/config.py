"""Sync settings from environment variables and optional YAML."""

import os
from pathlib import Path
from typing import Optional

try:
    import yaml
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "PyYAML is required for settings loading. Run: poetry install"
    ) from e
from pydantic import BaseModel, Field

ENV_PREFIX = "RFP_QUEST_"


class SyncSettings(BaseModel):
    """Runtime settings for connectors, store and orchestrator."""

    db_path: Path = Field(default=Path("rfp_quest.db"), description="SQLite database file")
    source: str = Field(default="find-a-tender", description="Connector id")
    api_base_url: Optional[str] = Field(default=None, description="Override connector base URL")

    window_days: int = Field(default=7, ge=0)
    page_delay_seconds: float = Field(default=0.5, ge=0, description="Pause between pages")
    default_retry_after: float = Field(default=60.0, ge=0, description="Wait when Retry-After is missing")
    max_retries: Optional[int] = Field(
        default=None,
        ge=0,
        description="Ceiling for 429/503 retries; None retries forever",
    )
    request_timeout: float = Field(default=60.0, gt=0)

    @classmethod
    def _env_values(cls) -> dict:
        env = os.environ
        values: dict = {}
        if env.get(f"{ENV_PREFIX}DB"):
            values["db_path"] = env[f"{ENV_PREFIX}DB"]
        if env.get(f"{ENV_PREFIX}SOURCE"):
            values["source"] = env[f"{ENV_PREFIX}SOURCE"].strip()
        if env.get(f"{ENV_PREFIX}API_URL"):
            values["api_base_url"] = env[f"{ENV_PREFIX}API_URL"].strip()
        if env.get(f"{ENV_PREFIX}WINDOW_DAYS"):
            values["window_days"] = env[f"{ENV_PREFIX}WINDOW_DAYS"]
        if env.get(f"{ENV_PREFIX}MAX_RETRIES"):
            values["max_retries"] = env[f"{ENV_PREFIX}MAX_RETRIES"]
        return values

    @classmethod
    def from_env(cls) -> "SyncSettings":
        """Settings from RFP_QUEST_* environment variables over defaults."""
        return cls.model_validate(cls._env_values())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "SyncSettings":
        """
        Load settings from YAML. Supports a nested `sync:` section or flat keys.
        Environment values are used for anything the file leaves out.
        """
        data = yaml.safe_load(Path(path).read_text()) or {}
        section = data.get("sync", data)
        merged = cls._env_values()
        merged.update({k: v for k, v in section.items() if k in cls.model_fields})
        return cls.model_validate(merged)
