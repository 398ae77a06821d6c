"""
Runtime settings for icesync.

Everything is read from the process environment (after load_env() has
merged any .env file). The core never reads os.environ directly; it
receives a Settings instance.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_BASE_URL = "https://api.todoist.com/rest/v2"
DEFAULT_PORT = 3000
DEFAULT_MIN_INTERVAL = 5.0
DEFAULT_PREFIX = "ICE-S"


class ConfigError(ValueError):
    """Raised when a required setting is missing or malformed."""


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}")
    if value < 0:
        raise ConfigError(f"{key} must not be negative")
    return value


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    api_token: str
    task_filter: str = ""
    base_url: str = DEFAULT_BASE_URL
    port: int = DEFAULT_PORT
    min_interval: float = DEFAULT_MIN_INTERVAL
    prefix: str = DEFAULT_PREFIX
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from (default: os.environ)

        Raises:
            ConfigError: If TODOIST_API_TOKEN is unset or a number is malformed
        """
        env = os.environ if env is None else env
        token = env.get("TODOIST_API_TOKEN", "").strip()
        if not token:
            raise ConfigError("TODOIST_API_TOKEN not set. Set env var or add it to .env.")
        prefix = env.get("ICE_PREFIX", "").strip() or DEFAULT_PREFIX
        return cls(
            api_token=token,
            task_filter=env.get("TODOIST_FILTER", ""),
            base_url=env.get("TODOIST_API_URL", "").strip() or DEFAULT_BASE_URL,
            port=_int(env, "PORT", DEFAULT_PORT),
            min_interval=_float(env, "ICE_MIN_INTERVAL", DEFAULT_MIN_INTERVAL),
            prefix=prefix,
            log_level=env.get("LOG_LEVEL", "").strip().upper() or "INFO",
            log_dir=Path(env.get("LOG_DIR", "").strip() or "logs"),
        )
