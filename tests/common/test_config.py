from __future__ import annotations

import pytest

from storage_gateway.common import config
from storage_gateway.common.config import Settings, get_settings


def test_defaults():
    settings = Settings.from_environment()

    assert settings.STORAGE_DRIVER == "s3"
    assert settings.S3_ACCESS_KEY_ID is None
    assert settings.S3_REGION == "us-east-1"
    assert settings.S3_USE_SSL is True
    assert settings.S3_PUBLIC_DOMAIN == "amazonaws.com"
    assert settings.LOG_FORMAT == "json"


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("STORAGE_DRIVER", " S3 ")
    monkeypatch.setenv("S3_ACCESS_KEY_ID", "key")
    monkeypatch.setenv("S3_SECRET_ACCESS_KEY", "secret")
    monkeypatch.setenv("S3_REGION", "eu-north-1")
    monkeypatch.setenv("S3_ENDPOINT_URL", "")
    monkeypatch.setenv("S3_USE_SSL", "off")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_FORMAT", "PLAIN")

    settings = Settings.from_environment()

    assert settings.STORAGE_DRIVER == "s3"
    assert settings.S3_ACCESS_KEY_ID == "key"
    assert settings.S3_SECRET_ACCESS_KEY == "secret"
    assert settings.S3_REGION == "eu-north-1"
    assert settings.S3_ENDPOINT_URL is None
    assert settings.S3_USE_SSL is False
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.LOG_FORMAT == "plain"


def test_env_file_does_not_override_environment(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# local credentials\n"
        "S3_ACCESS_KEY_ID='file-key'\n"
        'S3_REGION="ca-central-1"\n'
        "not a pair\n",
        encoding="utf-8",
    )
    monkeypatch.setattr(config, "ENV_FILE", env_file)
    monkeypatch.setenv("S3_REGION", "us-east-2")

    settings = Settings.from_environment()

    assert settings.S3_ACCESS_KEY_ID == "file-key"
    assert settings.S3_REGION == "us-east-2"


@pytest.mark.parametrize(
    "kwargs",
    [{"LOG_FORMAT": "xml"}, {"LOG_FORMAT": "JSON"}, {"LOG_LEVEL": "VERBOSE"}],
)
def test_invalid_settings(kwargs):
    with pytest.raises(ValueError):
        Settings(**kwargs)


def test_get_settings_is_cached(monkeypatch):
    first = get_settings()
    monkeypatch.setenv("S3_REGION", "changed")

    assert get_settings() is first

    get_settings.cache_clear()  # type: ignore[attr-defined]
    assert get_settings().S3_REGION == "changed"
