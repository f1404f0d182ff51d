"""Object storage driver layer.

This module provides a protocol-based abstraction for object storage backends
together with the S3 driver and a factory keyed by backend name.
"""

from .driver import (
    DEFAULT_URL_TTL_SECONDS,
    MAX_URL_TTL_SECONDS,
    NO_STATUS_CODE,
    Driver,
    DriverException,
    ObjectInfo,
)
from .registry import (
    DRIVER_REGISTRY,
    DriverNotConfiguredError,
    UnknownDriverError,
    get_driver,
    new_driver,
    register_driver,
)
from .s3_driver import S3Driver

__all__ = [
    "DEFAULT_URL_TTL_SECONDS",
    "DRIVER_REGISTRY",
    "MAX_URL_TTL_SECONDS",
    "NO_STATUS_CODE",
    "Driver",
    "DriverException",
    "DriverNotConfiguredError",
    "ObjectInfo",
    "S3Driver",
    "UnknownDriverError",
    "get_driver",
    "new_driver",
    "register_driver",
]
