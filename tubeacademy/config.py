"""
Runtime settings for TubeAcademy.

Values come from a .env file (if present) and TUBEACADEMY_* environment
variables, e.g. TUBEACADEMY_API_BASE_URL=http://localhost:5000/api
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


ENV_PREFIX = "TUBEACADEMY_"
DEFAULT_DATA_DIR = Path.home() / ".tubeacademy"
DB_FILENAME = "tubeacademy.db"


class Settings(BaseModel):
    api_base_url: str = "http://localhost:5000/api"
    data_dir: Path = DEFAULT_DATA_DIR
    cache_ttl_hours: float = Field(default=24.0, gt=0)
    completion_threshold: float = Field(default=90.0, gt=0, le=100)
    tick_interval: float = Field(default=1.0, gt=0)
    auto_advance_delay: float = Field(default=1.5, ge=0)
    request_timeout: float = Field(default=10.0, gt=0)
    prefetch_workers: int = Field(default=4, ge=1)
    report_progress: bool = False
    report_interval: float = Field(default=15.0, ge=0)
    log_level: str = "INFO"

    @property
    def db_path(self) -> Path:
        return self.data_dir / DB_FILENAME

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_hours * 3600


def load_settings(env_file: Optional[Path] = None, **overrides) -> Settings:
    """
    Build settings from the environment.

    Args:
        env_file: Optional .env path (default: search from the working directory)
        **overrides: Explicit values that win over the environment

    Returns:
        Validated Settings
    """
    load_dotenv(env_file)

    values = {}
    for name in Settings.model_fields:
        raw = os.environ.get(ENV_PREFIX + name.upper())
        if raw is not None and raw != "":
            values[name] = raw
    if "data_dir" in values:
        values["data_dir"] = Path(values["data_dir"]).expanduser()
    values.update(overrides)
    return Settings(**values)
