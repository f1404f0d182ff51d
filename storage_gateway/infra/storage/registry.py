"""Storage driver factory."""

from __future__ import annotations

from typing import Any

from storage_gateway.common.config import Settings, get_settings
from storage_gateway.infra.storage.driver import Driver
from storage_gateway.infra.storage.s3_driver import S3Driver


class UnknownDriverError(ValueError):
    """Raised when no driver is registered under the requested name."""


class DriverNotConfiguredError(Exception):
    """Raised when settings lack what the configured driver needs."""


# Registry of driver classes by backend name
DRIVER_REGISTRY: dict[str, type[Driver]] = {
    "s3": S3Driver,
}


def register_driver(name: str, driver_class: type[Driver]) -> None:
    """Register a driver class for a backend name."""
    DRIVER_REGISTRY[name.strip().lower()] = driver_class


def new_driver(
    access_key: str,
    secret_key: str,
    region: str,
    *,
    backend: str = "s3",
    **options: Any,
) -> Driver:
    """Construct a driver for ``backend``.

    Args:
        access_key: Backend access key.
        secret_key: Backend secret key.
        region: Backend region.
        backend: Registered backend name.
        **options: Extra keyword arguments for the driver class.

    Returns:
        Configured Driver instance.

    Raises:
        UnknownDriverError: If the backend is not registered.
        ValueError: If the credentials or region are malformed.
    """
    name = (backend or "").strip().lower()
    driver_class = DRIVER_REGISTRY.get(name)
    if driver_class is None:
        raise UnknownDriverError(
            f"Unknown storage driver: {backend}. "
            f"Registered: {', '.join(sorted(DRIVER_REGISTRY))}"
        )
    return driver_class(access_key, secret_key, region, **options)


def get_driver(settings: Settings | None = None) -> Driver:
    """Build the driver configured by ``settings`` (environment by default)."""
    settings = settings or get_settings()
    if not settings.S3_ACCESS_KEY_ID or not settings.S3_SECRET_ACCESS_KEY:
        raise DriverNotConfiguredError(
            "S3_ACCESS_KEY_ID and S3_SECRET_ACCESS_KEY are required"
        )
    if not settings.S3_REGION:
        raise DriverNotConfiguredError("S3_REGION is required")

    options: dict[str, Any] = {}
    if settings.STORAGE_DRIVER == "s3":
        options = {
            "endpoint_url": settings.S3_ENDPOINT_URL,
            "addressing_style": settings.S3_ADDRESSING_STYLE,
            "use_ssl": bool(settings.S3_USE_SSL),
            "provider_domain": settings.S3_PUBLIC_DOMAIN,
        }
    return new_driver(
        settings.S3_ACCESS_KEY_ID,
        settings.S3_SECRET_ACCESS_KEY,
        settings.S3_REGION,
        backend=settings.STORAGE_DRIVER,
        **options,
    )
