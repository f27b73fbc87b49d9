"""Orchestration of storage access and raster decoding per HTTP route.

Each method maps one route onto the storage adapter (and, for decoding,
the raster adapter). Nothing here retries, caches or recovers: errors from
the adapters propagate unchanged to the HTTP layer.
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING

from app.core import config
from app.services import models as service_models
from app.services import raster, storage

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

# Landsat Collection 2 keys all live under this prefix.
DEFAULT_PREFIX = "collection02/"


def normalize_key(raw_key: str) -> str:
    """Turn a wildcard path segment into an object key.

    Backslashes (e.g. from Windows-style client input) become forward
    slashes.

    Raises:
        InvalidKeyError: If the key is empty.
    """
    key = raw_key.replace("\\", "/")
    if not key:
        raise storage.InvalidKeyError("Object key must not be empty")
    return key


class RetrievalService:
    """Route-level operations over the bucket.

    Args:
        storage_client: Adapter for the object store.
        decoder: Callable turning GeoTIFF bytes into a RasterResult.
    """

    def __init__(
        self,
        storage_client: storage.S3StorageClient,
        decoder: Callable[[bytes], service_models.RasterResult] = raster.decode,
    ) -> None:
        self.storage = storage_client
        self.decoder = decoder

    def verify(self) -> bool:
        return self.storage.verify_authentication()

    def list_objects(
        self,
        prefix: str | None = None,
        continuation_token: str | None = None,
    ) -> service_models.ListingResult:
        """List one page of the bucket.

        A missing prefix defaults to the collection prefix; an explicit empty
        prefix lists from the bucket root.
        """
        request = service_models.ListingRequest(
            prefix=DEFAULT_PREFIX if prefix is None else prefix,
            continuation_token=continuation_token,
        )
        return self.storage.list_objects(
            request.prefix,
            request.continuation_token,
        )

    def fetch_object(self, raw_key: str) -> service_models.StoredObject:
        key = normalize_key(raw_key)
        return service_models.StoredObject(
            key=key,
            data=self.storage.get_object(key),
        )

    def open_raster_stream(self, raw_key: str) -> service_models.ObjectStream:
        key = normalize_key(raw_key)
        logger.info("Fetching GeoTIFF stream with key %s", key)
        return self.storage.get_object_stream(key)

    def fetch_raster(self, raw_key: str) -> service_models.RasterResult:
        """Download a GeoTIFF completely, then decode its first image.

        Raises:
            StorageError: If the download fails.
            DecodeError: If the bytes are not a readable GeoTIFF.
        """
        key = normalize_key(raw_key)
        logger.info("Fetching GeoTIFF with key %s", key)
        data = self.storage.get_object(key)
        return self.decoder(data)


@functools.lru_cache
def get_retrieval_service() -> RetrievalService:
    """Return the process-wide service built from the cached settings."""
    return RetrievalService(storage.S3StorageClient(config.get_settings()))
