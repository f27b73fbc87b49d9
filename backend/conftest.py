"""Pytest configuration and shared fakes for the gateway tests.

Exposes the backend package for imports and provides a fake boto3 S3
client, GeoTIFF fixtures written with rasterio, and a TestClient wired to
a retrieval service built on the fake client.
"""

from __future__ import annotations

import pathlib
import sys
from typing import TYPE_CHECKING, Any

import numpy as np
import pytest
import rasterio
from botocore import exceptions as botocore_exceptions
from fastapi import testclient
from rasterio import transform as rio_transform

BACKEND_ROOT = pathlib.Path(__file__).resolve().parent

if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from app import main  # noqa: E402
from app.api import s3 as api_s3  # noqa: E402
from app.core import config  # noqa: E402
from app.services import retrieval, storage  # noqa: E402

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


def no_such_key(operation: str = "GetObject") -> botocore_exceptions.ClientError:
    return botocore_exceptions.ClientError(
        {
            "Error": {
                "Code": "NoSuchKey",
                "Message": "The specified key does not exist.",
            },
        },
        operation,
    )


class FakeBody:
    """Stand-in for botocore's StreamingBody."""

    def __init__(self, data: bytes, error: Exception | None = None):
        self._data = data
        self.error = error
        self.closed = False
        self.chunk_sizes: list[int] = []

    def read(self) -> bytes:
        if self.error is not None:
            raise self.error
        return self._data

    def iter_chunks(self, chunk_size: int = 1024) -> Iterator[bytes]:
        self.chunk_sizes.append(chunk_size)
        for start in range(0, len(self._data), chunk_size):
            yield self._data[start:start + chunk_size]
        if self.error is not None:
            raise self.error

    def close(self) -> None:
        self.closed = True


class FakeS3Client:
    """In-memory S3 client recording every call it receives.

    Listings filter ``objects`` by prefix unless explicit ``pages`` are
    queued, in which case each call pops the next page.
    """

    def __init__(
        self,
        objects: dict[str, bytes] | None = None,
        pages: list[dict[str, Any]] | None = None,
    ):
        self.objects = dict(objects or {})
        self.pages = list(pages or [])
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.bodies: list[FakeBody] = []
        self.auth_error: Exception | None = None
        self.list_error: Exception | None = None
        self.read_error: Exception | None = None
        self.factory_kwargs: dict[str, Any] = {}

    def factory(self, service_name: str, **kwargs: Any) -> FakeS3Client:
        self.factory_kwargs = {"service_name": service_name, **kwargs}
        return self

    def list_buckets(self) -> dict[str, Any]:
        self.calls.append(("list_buckets", {}))
        if self.auth_error is not None:
            raise self.auth_error
        return {"Buckets": [{"Name": storage.BUCKET_NAME}]}

    def list_objects_v2(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("list_objects_v2", kwargs))
        if self.list_error is not None:
            raise self.list_error
        if self.pages:
            return self.pages.pop(0)
        prefix = kwargs.get("Prefix", "")
        contents = [
            {"Key": key, "Size": len(data)}
            for key, data in sorted(self.objects.items())
            if key.startswith(prefix)
        ]
        response: dict[str, Any] = {
            "IsTruncated": False,
            "KeyCount": len(contents),
            "Prefix": prefix,
        }
        if contents:
            response["Contents"] = contents
        return response

    def get_object(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("get_object", kwargs))
        key = kwargs["Key"]
        if key not in self.objects:
            raise no_such_key()
        data = self.objects[key]
        body = FakeBody(data, error=self.read_error)
        self.bodies.append(body)
        return {"Body": body, "ContentLength": len(data)}


def write_geotiff(width: int = 4, height: int = 3, count: int = 2) -> bytes:
    """Write a small georeferenced uint8 GeoTIFF and return its bytes.

    Band ``b`` holds the values ``b * width * height`` onwards in
    row-major order.
    """
    data = np.arange(count * height * width, dtype="uint8").reshape(
        count, height, width,
    )
    with rasterio.MemoryFile() as memfile:
        with memfile.open(
            driver="GTiff",
            width=width,
            height=height,
            count=count,
            dtype="uint8",
            crs="EPSG:32618",
            transform=rio_transform.from_origin(500000, 4000000, 30, 30),
        ) as dataset:
            dataset.write(data)
        return bytes(memfile.getbuffer())


@pytest.fixture
def fake_s3() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def make_geotiff() -> Callable[..., bytes]:
    return write_geotiff


@pytest.fixture
def storage_client(fake_s3: FakeS3Client) -> storage.S3StorageClient:
    return storage.S3StorageClient(
        config.Settings(),
        client_factory=fake_s3.factory,
    )


@pytest.fixture
def service(storage_client: storage.S3StorageClient) -> retrieval.RetrievalService:
    return retrieval.RetrievalService(storage_client)


@pytest.fixture
def api_client(
    service: retrieval.RetrievalService,
) -> Iterator[testclient.TestClient]:
    """TestClient whose S3 routes use the fake-backed service."""
    app = main.create_app()
    app.dependency_overrides[api_s3._get_service] = lambda: service
    try:
        yield testclient.TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
