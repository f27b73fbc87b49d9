"""Request-scoped data models for bucket listings and retrieved objects.

None of these values outlive a request: they are built from a provider
response, shaped into an HTTP body and discarded.

Example:
    A listing page that has more results:
        >>> from app.services.models import ListingResult
        >>> page = ListingResult(
        ...     contents=[{"Key": "collection02/LC08/a.tif", "Size": 10}],
        ...     is_truncated=True,
        ...     next_continuation_token="token-2",
        ... )
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

Number = int | float


def _basename(key: str) -> str:
    return key.rsplit("/", 1)[-1]


@dataclasses.dataclass(frozen=True)
class ListingRequest:
    """Filters for a single listing call.

    Attributes:
        prefix: Key prefix to filter on.
        continuation_token: Opaque cursor from a previous page, if any.
    """

    prefix: str
    continuation_token: str | None = None


@dataclasses.dataclass
class ListingResult:
    """One page of a bucket listing.

    Attributes:
        contents: Object entries as returned by S3 (``Key``, ``Size``,
            ``LastModified``, ``ETag``, ...), in provider order.
        is_truncated: Whether more pages exist.
        next_continuation_token: Cursor for the next page; set only when
            ``is_truncated`` is true.
    """

    contents: list[dict[str, Any]]
    is_truncated: bool
    next_continuation_token: str | None = None


@dataclasses.dataclass
class StoredObject:
    """An object body buffered completely in memory."""

    key: str
    data: bytes

    @property
    def filename(self) -> str:
        return _basename(self.key)


@dataclasses.dataclass
class ObjectStream:
    """A live object body delivered chunk by chunk.

    Attributes:
        key: Object key the stream was opened for.
        chunks: Iterator yielding the body in provider order. It owns the
            underlying connection and releases it when exhausted or closed.
        content_length: Size reported by the provider, if any.
    """

    key: str
    chunks: Iterator[bytes]
    content_length: int | None = None

    @property
    def filename(self) -> str:
        return _basename(self.key)


@dataclasses.dataclass
class RasterResult:
    """Decoded pixel data of the first image in a GeoTIFF.

    Attributes:
        raster_data: One flat, row-major list of samples per band; each
            list holds ``width * height`` values.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    raster_data: list[list[Number]]
    width: int
    height: int
