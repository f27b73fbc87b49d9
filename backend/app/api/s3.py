"""Read-only S3 browsing and GeoTIFF retrieval endpoints.

This module exposes the Landsat bucket over HTTP: an authentication
check, paginated listings, raw object downloads, GeoTIFF pass-through
streaming and decoded GeoTIFF pixel data. Handlers are plain functions so
FastAPI runs the blocking boto3 and rasterio calls in its threadpool,
leaving the event loop free for other requests.

This router is the only place where service exceptions become HTTP
statuses: object downloads report failures as 500 with the provider
message, while both GeoTIFF routes answer every failure with a 404 body.

Example:
    Browse a path row and fetch one band:
        >>> response = client.get(
        ...     "/s3/list",
        ...     params={"prefix": "collection02/level-1/standard/oli-tirs/"},
        ... )
        >>> page = response.json()
        >>> # {"contents": [...], "isTruncated": true,
        >>> #  "nextContinuationToken": "1ueGcxLPRx1Tr..."}

        >>> response = client.get(
        ...     "/s3/get-geotiff/collection02/level-2/.../LC08_..._SR_B4.TIF"
        ... )
        >>> body = response.json()
        >>> # {"rasterData": [[...]], "width": 7611, "height": 7761}
"""

from __future__ import annotations

import logging
from typing import Any

import fastapi
from fastapi import responses
from typing_extensions import TypedDict

from app.services import raster, retrieval, storage

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(prefix="/s3", tags=["s3"])

OBJECT_ERROR_MESSAGE = "Error retrieving the object"


class ListingResponse(TypedDict):
    contents: list[dict[str, Any]]
    isTruncated: bool
    nextContinuationToken: str | None


def _get_service() -> retrieval.RetrievalService:
    """Resolve the retrieval service dependency.

    Returns:
        The process-wide RetrievalService.
    """
    return retrieval.get_retrieval_service()


def _not_found(raw_key: str) -> responses.JSONResponse:
    """Build the 404 body shared by both GeoTIFF routes."""
    return responses.JSONResponse(
        status_code=404,
        content={
            "message": f"Cannot GET /s3/get-geotiff/{raw_key}",
            "error": "Not Found",
            "statusCode": 404,
        },
    )


@router.get("/verify")
def verify_authentication(
    service: retrieval.RetrievalService = fastapi.Depends(_get_service),  # noqa: B008
) -> dict[str, bool]:
    """Report whether the configured AWS credentials are accepted.

    Never fails: credential or network problems yield
    ``{"authenticated": false}`` with status 200.
    """
    return {"authenticated": service.verify()}


@router.get("/list")
def list_objects(
    prefix: str = retrieval.DEFAULT_PREFIX,
    continuation_token: str | None = fastapi.Query(  # noqa: B008
        default=None,
        alias="continuationToken",
    ),
    service: retrieval.RetrievalService = fastapi.Depends(_get_service),  # noqa: B008
) -> ListingResponse:
    """List one page of objects in the bucket.

    Args:
        prefix: Key prefix filter (defaults to "collection02/").
        continuation_token: Cursor from a previous page's
            ``nextContinuationToken``.
        service: Retrieval service (injected via FastAPI Depends).

    Returns:
        Dictionary with the page ``contents``, ``isTruncated`` and
        ``nextContinuationToken`` (null unless truncated).

    Raises:
        StorageError: Propagated unhandled, answered by the framework
            with a 500.

    Example:
        Walk pages:
            >>> page = client.get("/s3/list", params={"prefix": prefix}).json()
            >>> while page["isTruncated"]:
            ...     page = client.get("/s3/list", params={
            ...         "prefix": prefix,
            ...         "continuationToken": page["nextContinuationToken"],
            ...     }).json()
    """
    result = service.list_objects(prefix, continuation_token)
    return ListingResponse(
        contents=result.contents,
        isTruncated=result.is_truncated,
        nextContinuationToken=result.next_continuation_token,
    )


@router.get("/object/{key:path}")
def download_object(
    key: str,
    service: retrieval.RetrievalService = fastapi.Depends(_get_service),  # noqa: B008
) -> responses.Response:
    """Download an object as an attachment.

    Args:
        key: Object key; backslashes are treated as forward slashes.
        service: Retrieval service (injected via FastAPI Depends).

    Returns:
        Binary response with ``application/octet-stream`` content, or a
        500 JSON body ``{"message", "error"}`` if the object cannot be
        retrieved.
    """
    try:
        stored = service.fetch_object(key)
    except storage.StorageError as exc:
        return responses.JSONResponse(
            status_code=500,
            content={"message": OBJECT_ERROR_MESSAGE, "error": str(exc)},
        )

    return responses.Response(
        content=stored.data,
        media_type="application/octet-stream",
        headers={
            "Content-Disposition": f'attachment; filename="{stored.filename}"',
        },
    )


@router.get("/get-geotiff-stream/{key:path}")
def stream_geotiff(
    key: str,
    service: retrieval.RetrievalService = fastapi.Depends(_get_service),  # noqa: B008
) -> responses.Response:
    """Stream a GeoTIFF file unmodified for inline display.

    Chunks are forwarded in the order S3 delivers them and are only read
    from S3 as the client consumes them. If the client disconnects,
    iteration stops and the S3 connection is released.

    Args:
        key: Object key; backslashes are treated as forward slashes.
        service: Retrieval service (injected via FastAPI Depends).

    Returns:
        Streaming ``image/tiff`` response, or the GeoTIFF 404 body if the
        object cannot be opened.
    """
    try:
        stream = service.open_raster_stream(key)
    except storage.StorageError:
        logger.warning("Error fetching GeoTIFF stream for key: %s", key, exc_info=True)
        return _not_found(key)

    headers = {"Content-Disposition": f'inline; filename="{stream.filename}"'}
    if stream.content_length is not None:
        headers["Content-Length"] = str(stream.content_length)

    return responses.StreamingResponse(
        stream.chunks,
        media_type="image/tiff",
        headers=headers,
    )


@router.get("/get-geotiff/{key:path}")
def get_geotiff(
    key: str,
    service: retrieval.RetrievalService = fastapi.Depends(_get_service),  # noqa: B008
) -> responses.Response:
    """Fetch a GeoTIFF and return its decoded pixel data.

    Args:
        key: Object key; backslashes are treated as forward slashes.
        service: Retrieval service (injected via FastAPI Depends).

    Returns:
        JSON ``{"rasterData", "width", "height"}`` where ``rasterData``
        holds one flat row-major list per band. Any storage or decode
        failure yields the GeoTIFF 404 body.
    """
    try:
        result = service.fetch_raster(key)
    except (storage.StorageError, raster.DecodeError):
        logger.warning("Error fetching GeoTIFF for key: %s", key, exc_info=True)
        return _not_found(key)

    return responses.JSONResponse(
        content={
            "rasterData": result.raster_data,
            "width": result.width,
            "height": result.height,
        },
    )
