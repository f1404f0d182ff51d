from __future__ import annotations

import os

import pytest

from storage_gateway.common import config
from storage_gateway.common.config import get_settings

STORAGE_ENV_VARS = (
    "STORAGE_DRIVER",
    "S3_ACCESS_KEY_ID",
    "S3_SECRET_ACCESS_KEY",
    "S3_REGION",
    "S3_ENDPOINT_URL",
    "S3_ADDRESSING_STYLE",
    "S3_USE_SSL",
    "S3_PUBLIC_DOMAIN",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test against a clean environment and no .env file."""
    for name in STORAGE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "ENV_FILE", tmp_path / ".env")
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    for name in STORAGE_ENV_VARS:
        os.environ.pop(name, None)
    get_settings.cache_clear()  # type: ignore[attr-defined]
