from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "CHUB_"


class Settings(BaseSettings):
    """Environment overrides applied on top of ``config.toml``.

    ``CHUB_CONFIG_PATH`` selects the file, ``CHUB_ENABLE_LOCAL_API`` and
    ``CHUB_DATABASE_URL`` replace the matching ``[runtime]`` keys when set.
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, env_file=".env", extra="ignore")

    config_path: Path = Path("config.toml")
    enable_local_api: bool | None = None
    database_url: str | None = None


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["ENV_PREFIX", "Settings", "get_settings"]
