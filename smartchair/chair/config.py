from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv


class ConfigError(RuntimeError):
    """Raised when a setting cannot be parsed."""


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


@dataclass
class Settings:
    database_url: str = "sqlite:///smartchair.db"
    subscriber_queue_size: int = 100
    history_default_limit: int = 100
    history_max_limit: int = 1000
    log_level: str = "INFO"
    port: int = 3000
    cors_allowed_origins: str = "*"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        if env is None:
            load_dotenv()
            env = os.environ

        return cls(
            database_url=env.get("DATABASE_URL", cls.database_url),
            subscriber_queue_size=_int_setting(env, "SUBSCRIBER_QUEUE_SIZE", cls.subscriber_queue_size),
            history_default_limit=_int_setting(env, "HISTORY_DEFAULT_LIMIT", cls.history_default_limit),
            history_max_limit=_int_setting(env, "HISTORY_MAX_LIMIT", cls.history_max_limit),
            log_level=env.get("LOG_LEVEL", cls.log_level).upper(),
            port=_int_setting(env, "PORT", cls.port),
            cors_allowed_origins=env.get("CORS_ALLOWED_ORIGINS", cls.cors_allowed_origins),
        )
