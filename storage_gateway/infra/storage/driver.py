"""Storage driver protocol and data types.

This module defines the capability contract every storage backend must
satisfy, the metadata snapshot returned by it, and the single error type
that backend failures are normalized into.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

# Reported as ``DriverException.code`` when the backend gave no status.
NO_STATUS_CODE = 0

DEFAULT_URL_TTL_SECONDS = 300
# SigV4 presigned URLs cannot outlive seven days.
MAX_URL_TTL_SECONDS = 7 * 24 * 60 * 60


class DriverException(RuntimeError):
    """Raised when a storage backend operation fails.

    Attributes:
        message: Backend-agnostic summary of the failed operation.
        code: Backend status code (HTTP status for S3), or ``NO_STATUS_CODE``.
        cause: The original backend error, kept for diagnostics only.
    """

    def __init__(
        self,
        message: str,
        code: int = NO_STATUS_CODE,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.cause = cause

    def __str__(self) -> str:
        if self.code == NO_STATUS_CODE:
            return self.message
        return f"{self.message} (status={self.code})"


@dataclass(frozen=True, slots=True)
class ObjectInfo:
    """Metadata snapshot of a stored object."""

    url: str
    content_type: str
    content_length: int
    etag: str
    last_modified: datetime


def validate_ttl(ttl_seconds: int) -> int:
    """Return ``ttl_seconds`` as an int or raise ``ValueError``.

    Signed URL lifetimes must lie in ``1..MAX_URL_TTL_SECONDS``.
    """
    if isinstance(ttl_seconds, bool) or not isinstance(ttl_seconds, int):
        raise ValueError(f"ttl_seconds must be an integer, got {ttl_seconds!r}")
    if ttl_seconds < 1 or ttl_seconds > MAX_URL_TTL_SECONDS:
        raise ValueError(
            f"ttl_seconds must be between 1 and {MAX_URL_TTL_SECONDS}, "
            f"got {ttl_seconds}"
        )
    return ttl_seconds


class Driver(Protocol):
    """Protocol defining the interface for object storage backends.

    Read-path operations report a missing object as ``None``/``False``.
    Every other backend failure is raised as ``DriverException``.
    """

    def is_accessible(self, container: str) -> bool:
        """Check whether a container exists and can be reached.

        Never raises for backend failures; they all yield ``False``.
        """
        ...

    def get_info(self, container: str, key: str) -> ObjectInfo | None:
        """Fetch object metadata without downloading the content.

        Returns:
            ObjectInfo, or None if the object does not exist.

        Raises:
            DriverException: If the backend fails for any other reason.
        """
        ...

    def get_as_bytes(self, container: str, key: str) -> bytes | None:
        """Download the whole object into memory.

        Returns:
            The payload, or None if the object does not exist.

        Raises:
            DriverException: If the backend fails for any other reason.
        """
        ...

    def get_as_local_file(self, container: str, key: str, dest_path: str) -> bool:
        """Download the object into ``dest_path``.

        Returns:
            True once written, False if the object does not exist.

        Raises:
            DriverException: If the backend fails for any other reason.
        """
        ...

    def get_read_url(
        self, container: str, key: str, ttl_seconds: int = DEFAULT_URL_TTL_SECONDS
    ) -> str:
        """Generate a signed, time-limited download URL.

        Raises:
            ValueError: If ``ttl_seconds`` is out of range.
            DriverException: If signing fails.
        """
        ...

    def get_write_url(
        self, container: str, key: str, ttl_seconds: int = DEFAULT_URL_TTL_SECONDS
    ) -> str:
        """Generate a signed, time-limited upload URL.

        Raises:
            ValueError: If ``ttl_seconds`` is out of range.
            DriverException: If signing fails.
        """
        ...

    def build_public_url(self, container: str, key: str) -> str:
        """Build the unsigned URL of a public-read object. No network access."""
        ...

    def delete(self, container: str, key: str) -> bool:
        """Delete an object. Deleting a missing key also returns True."""
        ...

    def copy(
        self, src_container: str, src_key: str, dst_container: str, dst_key: str
    ) -> bool:
        """Server-side copy of one object to another location."""
        ...

    def put_from_bytes(
        self,
        payload: bytes,
        container: str,
        key: str,
        *,
        content_type: str | None = None,
        is_public: bool = False,
    ) -> bool:
        """Upload ``payload``. Objects are private unless ``is_public``."""
        ...

    def put_from_local_file(
        self,
        path: str,
        container: str,
        key: str,
        *,
        content_type: str | None = None,
        is_public: bool = False,
    ) -> bool:
        """Upload the file at ``path``. Objects are private unless ``is_public``."""
        ...
