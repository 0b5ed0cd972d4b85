"""Runtime configuration, read from ``STOCKLEDGER_*`` environment variables or ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STOCKLEDGER_", env_file=".env")

    data_dir: Path = _DEFAULT_DATA_DIR
    critical_fraction: float = Field(default=0.5, gt=0, le=1)
    overstock_fraction: float = Field(default=0.9, gt=0, le=1)
    max_conflict_retries: int = Field(default=3, ge=0)
    lock_timeout: float = Field(default=10.0, gt=0)
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def inventory_file(self) -> Path:
        return self.data_dir / "inventory.json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
