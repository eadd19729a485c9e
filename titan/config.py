"""Global configuration — loaded from environment variables."""

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings


class TitanSettings(BaseSettings):
    registry_path: Path = Path("~/.titan").expanduser()
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    default_signal: str = "KILL"  # KILL|TERM|QUIT|INT|...

    model_config = {"env_prefix": "TITAN_"}


settings = TitanSettings()
