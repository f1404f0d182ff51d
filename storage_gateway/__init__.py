"""Uniform object-storage gateway.

Call ``setup_logging()`` once at startup to route the ``storage`` loggers
through the configured handler, then obtain a driver with ``get_driver()``
(from the environment) or ``new_driver()`` (explicit credentials).
"""

from storage_gateway.common.logging import setup_logging
from storage_gateway.infra.storage import (
    Driver,
    DriverException,
    ObjectInfo,
    S3Driver,
    get_driver,
    new_driver,
    register_driver,
)

__all__ = [
    "Driver",
    "DriverException",
    "ObjectInfo",
    "S3Driver",
    "get_driver",
    "new_driver",
    "register_driver",
    "setup_logging",
]
