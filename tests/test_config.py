from __future__ import annotations

import pytest

from chair.config import ConfigError, Settings

pytestmark = pytest.mark.config


def test_defaults_when_environment_is_empty() -> None:
    settings = Settings.from_env({})
    assert settings.database_url == "sqlite:///smartchair.db"
    assert settings.subscriber_queue_size == 100
    assert settings.history_default_limit == 100
    assert settings.port == 3000


def test_values_from_environment() -> None:
    settings = Settings.from_env(
        {
            "DATABASE_URL": "sqlite:///other.db",
            "SUBSCRIBER_QUEUE_SIZE": "16",
            "LOG_LEVEL": "debug",
            "PORT": "8080",
        }
    )
    assert settings.database_url == "sqlite:///other.db"
    assert settings.subscriber_queue_size == 16
    assert settings.log_level == "DEBUG"
    assert settings.port == 8080


@pytest.mark.parametrize("raw", ["lots", "0", "-5"])
def test_bad_integers_are_rejected(raw: str) -> None:
    with pytest.raises(ConfigError, match="SUBSCRIBER_QUEUE_SIZE"):
        Settings.from_env({"SUBSCRIBER_QUEUE_SIZE": raw})
