"""S3-compatible storage driver implementation.

This module provides a storage driver that works with AWS S3, MinIO, and
other S3-compatible object storage services.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime
from typing import Any
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from botocore.utils import parse_timestamp

from storage_gateway.infra.storage.driver import (
    DEFAULT_URL_TTL_SECONDS,
    NO_STATUS_CODE,
    DriverException,
    ObjectInfo,
    validate_ttl,
)

logger = logging.getLogger("storage.s3")

HTTP_NOT_FOUND = 404

ACL_PRIVATE = "private"
ACL_PUBLIC_READ = "public-read"

DOWNLOAD_CHUNK_SIZE = 1024 * 1024

# RFC 3986 pchar minus unreserved; valid unescaped inside a path segment.
PATH_SAFE_CHARS = "/~!$&'()*+,;=:@"

# Everything the SDK raises for a failed request, signing included.
BACKEND_ERRORS = (ClientError, BotoCoreError)


def _status_code(exc: BaseException) -> int:
    """Extract the HTTP status from a botocore error, if it carries one."""
    if not isinstance(exc, ClientError):
        return NO_STATUS_CODE
    response = exc.response or {}
    status = response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    if status is not None:
        return int(status)
    # HEAD responses have no body, so botocore uses the status as the code.
    error_code = str(response.get("Error", {}).get("Code", ""))
    if error_code.isdigit():
        return int(error_code)
    return NO_STATUS_CODE


def _is_not_found(exc: BaseException) -> bool:
    return _status_code(exc) == HTTP_NOT_FOUND


def _strip_etag(etag: Any) -> str:
    return str(etag or "").strip('"')


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return parse_timestamp(value)


def _remove_partial(path: str | None) -> None:
    if path is None:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


class S3Driver:
    """S3-compatible object storage driver.

    Supports AWS S3, MinIO, and other S3-compatible services.
    Uses boto3 for all storage operations. The boto3 client is built once
    and shared by every call; the driver holds no other mutable state.
    """

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        region: str,
        *,
        endpoint_url: str | None = None,
        addressing_style: str | None = None,
        use_ssl: bool = True,
        provider_domain: str = "amazonaws.com",
    ) -> None:
        """Initialize the driver and its boto3 client.

        No network request is made here.

        Raises:
            ValueError: If a credential or the region is empty.
        """
        if not access_key or not secret_key:
            raise ValueError("access_key and secret_key are required")
        if not region:
            raise ValueError("region is required")

        self._region = region
        self._provider_domain = provider_domain
        self._client = self._build_client(
            access_key=access_key,
            secret_key=secret_key,
            region=region,
            endpoint_url=endpoint_url,
            addressing_style=addressing_style,
            use_ssl=use_ssl,
        )
        logger.info(
            "storage_driver_created backend=s3 region=%s endpoint=%s",
            region,
            endpoint_url or "<aws>",
        )

    @staticmethod
    def _build_client(
        *,
        access_key: str,
        secret_key: str,
        region: str,
        endpoint_url: str | None,
        addressing_style: str | None,
        use_ssl: bool,
    ) -> Any:
        """Create a boto3 S3 client."""
        s3_options: dict[str, Any] = {}
        if addressing_style:
            s3_options["addressing_style"] = addressing_style.strip().lower()
        config = Config(signature_version="s3v4", s3=s3_options or None)

        return boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            use_ssl=use_ssl,
            config=config,
        )

    @property
    def region(self) -> str:
        return self._region

    def _failure(
        self, message: str, exc: BaseException, *, bucket: str, key: str | None
    ) -> DriverException:
        status = _status_code(exc)
        logger.warning(
            "storage_backend_failure message=%s bucket=%s key=%s status=%s",
            message,
            bucket,
            key,
            status,
            extra={
                "extra": {
                    "bucket": bucket,
                    "key": key,
                    "status": status,
                    "error": type(exc).__name__,
                }
            },
        )
        return DriverException(message, status, exc)

    def is_accessible(self, container: str) -> bool:
        """Check that the bucket exists and the credentials can reach it."""
        try:
            self._client.head_bucket(Bucket=container)
        except BACKEND_ERRORS as exc:
            logger.debug(
                "bucket_inaccessible bucket=%s status=%s",
                container,
                _status_code(exc),
            )
            return False
        return True

    def get_info(self, container: str, key: str) -> ObjectInfo | None:
        """Get object metadata without downloading the content."""
        try:
            response = self._client.head_object(Bucket=container, Key=key)
        except BACKEND_ERRORS as exc:
            if _is_not_found(exc):
                logger.debug("object_not_found bucket=%s key=%s", container, key)
                return None
            raise self._failure(
                "Failed to get object metadata", exc, bucket=container, key=key
            ) from exc

        last_modified = response.get("LastModified")
        if last_modified is None:
            logger.warning(
                "storage_malformed_response bucket=%s key=%s field=LastModified",
                container,
                key,
            )
            raise DriverException(
                "Failed to get object metadata: malformed response"
            )

        size = response.get("ContentLength")
        return ObjectInfo(
            url=self.build_public_url(container, key),
            content_type=str(response.get("ContentType") or ""),
            content_length=int(size) if size is not None else 0,
            etag=_strip_etag(response.get("ETag")),
            last_modified=_as_datetime(last_modified),
        )

    def get_as_bytes(self, container: str, key: str) -> bytes | None:
        """Download the whole object into memory."""
        try:
            response = self._client.get_object(Bucket=container, Key=key)
            body = response["Body"]
            try:
                return body.read()
            finally:
                body.close()
        except BACKEND_ERRORS as exc:
            if _is_not_found(exc):
                logger.debug("object_not_found bucket=%s key=%s", container, key)
                return None
            raise self._failure(
                "Failed to download object", exc, bucket=container, key=key
            ) from exc

    def get_as_local_file(self, container: str, key: str, dest_path: str) -> bool:
        """Download the object into ``dest_path``.

        The payload is streamed into a temporary file next to ``dest_path``
        and moved into place only once fully read. A missing object or an
        interrupted download leaves any existing file at ``dest_path``
        untouched.
        """
        try:
            response = self._client.get_object(Bucket=container, Key=key)
        except BACKEND_ERRORS as exc:
            if _is_not_found(exc):
                logger.debug("object_not_found bucket=%s key=%s", container, key)
                return False
            raise self._failure(
                "Failed to download object", exc, bucket=container, key=key
            ) from exc

        body = response["Body"]
        dest_dir = os.path.dirname(os.path.abspath(dest_path))
        tmp_path: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=dest_dir, prefix=".download-", delete=False
            ) as fh:
                tmp_path = fh.name
                for chunk in body.iter_chunks(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    fh.write(chunk)
            os.replace(tmp_path, dest_path)
        except BACKEND_ERRORS as exc:
            _remove_partial(tmp_path)
            raise self._failure(
                "Failed to download object", exc, bucket=container, key=key
            ) from exc
        except OSError:
            _remove_partial(tmp_path)
            raise
        finally:
            body.close()

        logger.debug(
            "object_saved bucket=%s key=%s path=%s", container, key, dest_path
        )
        return True

    def _presign(
        self, client_method: str, container: str, key: str, ttl_seconds: int
    ) -> str:
        expires_in = validate_ttl(ttl_seconds)
        try:
            url = self._client.generate_presigned_url(
                client_method,
                Params={"Bucket": container, "Key": key},
                ExpiresIn=expires_in,
            )
        except BACKEND_ERRORS as exc:
            raise self._failure(
                "Failed to generate presigned URL", exc, bucket=container, key=key
            ) from exc

        if not url:
            raise DriverException("Generated presigned URL is empty")

        return str(url)

    def get_read_url(
        self, container: str, key: str, ttl_seconds: int = DEFAULT_URL_TTL_SECONDS
    ) -> str:
        """Generate a presigned URL for downloading an object."""
        return self._presign("get_object", container, key, ttl_seconds)

    def get_write_url(
        self, container: str, key: str, ttl_seconds: int = DEFAULT_URL_TTL_SECONDS
    ) -> str:
        """Generate a presigned URL for uploading an object."""
        return self._presign("put_object", container, key, ttl_seconds)

    def build_public_url(self, container: str, key: str) -> str:
        """Build ``https://{region}.{provider_domain}/{container}/{key}``.

        Characters that are legal in a URL path (``/``, ``+``, ``=``, ``@``
        and the like) are kept as is; anything else in the key, such as
        spaces, ``?``, ``#``, ``%`` or non-ASCII text, is percent-escaped.
        """
        return (
            f"https://{self._region}.{self._provider_domain}/"
            f"{container}/{quote(key, safe=PATH_SAFE_CHARS)}"
        )

    def delete(self, container: str, key: str) -> bool:
        """Delete an object from storage."""
        try:
            self._client.delete_object(Bucket=container, Key=key)
        except BACKEND_ERRORS as exc:
            raise self._failure(
                "Failed to delete object", exc, bucket=container, key=key
            ) from exc
        logger.debug("object_deleted bucket=%s key=%s", container, key)
        return True

    def copy(
        self, src_container: str, src_key: str, dst_container: str, dst_key: str
    ) -> bool:
        """Copy an object server-side."""
        try:
            self._client.copy_object(
                CopySource={"Bucket": src_container, "Key": src_key},
                Bucket=dst_container,
                Key=dst_key,
            )
        except BACKEND_ERRORS as exc:
            raise self._failure(
                "Failed to copy object", exc, bucket=dst_container, key=dst_key
            ) from exc
        logger.debug(
            "object_copied source=%s/%s target=%s/%s",
            src_container,
            src_key,
            dst_container,
            dst_key,
        )
        return True

    @staticmethod
    def _put_params(
        container: str, key: str, content_type: str | None, is_public: bool
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "Bucket": container,
            "Key": key,
            "ACL": ACL_PUBLIC_READ if is_public else ACL_PRIVATE,
        }
        if content_type:
            params["ContentType"] = content_type
        return params

    def put_from_bytes(
        self,
        payload: bytes,
        container: str,
        key: str,
        *,
        content_type: str | None = None,
        is_public: bool = False,
    ) -> bool:
        """Upload an in-memory payload."""
        params = self._put_params(container, key, content_type, is_public)
        try:
            self._client.put_object(Body=payload, **params)
        except BACKEND_ERRORS as exc:
            raise self._failure(
                "Failed to upload object", exc, bucket=container, key=key
            ) from exc
        logger.debug(
            "object_uploaded bucket=%s key=%s size=%s acl=%s",
            container,
            key,
            len(payload),
            params["ACL"],
        )
        return True

    def put_from_local_file(
        self,
        path: str,
        container: str,
        key: str,
        *,
        content_type: str | None = None,
        is_public: bool = False,
    ) -> bool:
        """Upload a local file. ``OSError`` from opening ``path`` propagates."""
        params = self._put_params(container, key, content_type, is_public)
        with open(path, "rb") as fh:
            try:
                self._client.put_object(Body=fh, **params)
            except BACKEND_ERRORS as exc:
                raise self._failure(
                    "Failed to upload object", exc, bucket=container, key=key
                ) from exc
        logger.debug(
            "object_uploaded bucket=%s key=%s path=%s acl=%s",
            container,
            key,
            path,
            params["ACL"],
        )
        return True
