"""Boto3 adapter for the requester-pays Landsat bucket.

This module wraps the S3 client calls the gateway needs: an authentication
check, paginated listings and object downloads, either buffered in memory
or handed out as a chunk iterator. Every listing and object request carries
``RequestPayer="requester"`` because the USGS bucket bills transfer costs
to the caller.

Provider failures are re-raised as StorageError so callers deal with a
single exception type; the authentication check is the only call that
turns failures into a return value.

Example:
    List the first page under a prefix:
        >>> from app.core.config import get_settings
        >>> from app.services.storage import S3StorageClient
        >>> storage = S3StorageClient(get_settings())
        >>> page = storage.list_objects("collection02/level-1/")
        >>> [entry["Key"] for entry in page.contents]
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

import boto3
from botocore import exceptions as botocore_exceptions

from app.services import models as service_models

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from app.core import config

logger = logging.getLogger(__name__)

BUCKET_NAME = "usgs-landsat"
REQUEST_PAYER = "requester"
DEFAULT_CHUNK_SIZE = 64 * 1024

_PROVIDER_ERRORS = (
    botocore_exceptions.ClientError,
    botocore_exceptions.BotoCoreError,
)


class StorageError(RuntimeError):
    """Exception raised when the object store cannot satisfy a request.

    Wraps not-found, permission, network and invalid-token failures. The
    message is the provider's own message; the original exception is kept
    as ``__cause__``.
    """


class InvalidKeyError(StorageError):
    """Raised for object keys that cannot address anything (e.g. empty)."""


class S3StorageClient:
    """Read-only access to a single S3 bucket.

    The underlying boto3 client is created on first use and then reused;
    it holds no per-request state, so one instance can serve concurrent
    requests.

    Args:
        settings: Application settings carrying region and credentials.
        client_factory: Callable with the ``boto3.client`` signature; tests
            pass a factory returning a fake client.
        bucket: Bucket name, fixed to the Landsat bucket in production.
    """

    def __init__(
        self,
        settings: config.Settings,
        client_factory: Callable[..., Any] | None = None,
        bucket: str = BUCKET_NAME,
    ) -> None:
        self.bucket = bucket
        self._settings = settings
        self._client_factory = client_factory or boto3.client
        self._client: Any = None
        self._client_lock = threading.Lock()

    def _get_client(self) -> Any:
        """Build the boto3 client once, on first use.

        Raises:
            StorageError: If the client cannot be built, e.g. for an
                invalid region name.
        """
        with self._client_lock:
            if self._client is None:
                try:
                    self._client = self._client_factory(
                        "s3",
                        region_name=self._settings.aws_region,
                        aws_access_key_id=self._settings.aws_access_key_id,
                        aws_secret_access_key=self._settings.aws_secret_access_key,
                    )
                except (*_PROVIDER_ERRORS, ValueError) as exc:
                    logger.error("Could not create the S3 client", exc_info=True)
                    raise StorageError(str(exc)) from exc
            return self._client

    def verify_authentication(self) -> bool:
        """Check the credentials by listing the account's buckets.

        Returns:
            True if the call succeeded, False on any failure, including a
            client that cannot be built from the configured settings.
        """
        try:
            self._get_client().list_buckets()
        except Exception:
            logger.error("Failed to authenticate with AWS", exc_info=True)
            return False

        logger.info("Successfully authenticated with AWS")
        return True

    def list_objects(
        self,
        prefix: str,
        continuation_token: str | None = None,
    ) -> service_models.ListingResult:
        """List one page of objects under ``prefix``.

        Args:
            prefix: Key prefix to filter on.
            continuation_token: Cursor returned by a previous page.

        Returns:
            ListingResult with the page entries and pagination state.

        Raises:
            StorageError: If the provider rejects or fails the request.
        """
        params: dict[str, Any] = {
            "Bucket": self.bucket,
            "Prefix": prefix,
            "RequestPayer": REQUEST_PAYER,
        }
        if continuation_token:
            params["ContinuationToken"] = continuation_token

        try:
            response = self._get_client().list_objects_v2(**params)
        except _PROVIDER_ERRORS as exc:
            logger.error("Error listing objects under %r", prefix, exc_info=True)
            raise StorageError(str(exc)) from exc

        is_truncated = bool(response.get("IsTruncated", False))
        return service_models.ListingResult(
            contents=list(response.get("Contents", [])),
            is_truncated=is_truncated,
            next_continuation_token=(
                response.get("NextContinuationToken") if is_truncated else None
            ),
        )

    def get_object(self, key: str) -> bytes:
        """Download an object and buffer its whole body.

        Raises:
            StorageError: If the key does not exist or the transfer fails.
        """
        response = self._request_object(key)
        body = response["Body"]
        try:
            return body.read()
        except _PROVIDER_ERRORS as exc:
            logger.error("Error reading object %s", key, exc_info=True)
            raise StorageError(str(exc)) from exc
        finally:
            body.close()

    def get_object_stream(
        self,
        key: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> service_models.ObjectStream:
        """Open an object for chunked pass-through.

        The request is issued immediately so a missing key fails here;
        the body is only read as the returned iterator is consumed.

        Args:
            key: Object key.
            chunk_size: Maximum size of each yielded chunk in bytes.

        Returns:
            ObjectStream whose ``chunks`` iterator yields the body.

        Raises:
            StorageError: If the initial request fails. Failures while
                reading are raised from the iterator as StorageError.
        """
        logger.info("Opening object stream for key %s", key)
        response = self._request_object(key)
        return service_models.ObjectStream(
            key=key,
            chunks=_iter_body(key, response["Body"], chunk_size),
            content_length=response.get("ContentLength"),
        )

    def _request_object(self, key: str) -> dict[str, Any]:
        try:
            return self._get_client().get_object(
                Bucket=self.bucket,
                Key=key,
                RequestPayer=REQUEST_PAYER,
            )
        except _PROVIDER_ERRORS as exc:
            logger.error("Error getting object %s", key, exc_info=True)
            raise StorageError(str(exc)) from exc


def _iter_body(key: str, body: Any, chunk_size: int) -> Iterator[bytes]:
    """Yield a botocore body in chunks and always release it."""
    try:
        yield from body.iter_chunks(chunk_size)
    except _PROVIDER_ERRORS as exc:
        logger.error("Object stream for %s failed", key, exc_info=True)
        raise StorageError(str(exc)) from exc
    finally:
        body.close()
