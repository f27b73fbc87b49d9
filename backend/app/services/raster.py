"""GeoTIFF decoding for objects fetched from the bucket.

Decoding is delegated to rasterio: the buffered bytes are opened as an
in-memory GDAL dataset restricted to the GeoTIFF driver, and every band of
the first image is read into plain Python lists so the result can be
serialized as JSON.

Example:
    Decode a downloaded scene band:
        >>> from app.services import raster
        >>> result = raster.decode(tiff_bytes)
        >>> result.width, result.height
        (7611, 7761)
"""

from __future__ import annotations

import rasterio
from rasterio import errors as rasterio_errors

from app.services import models as service_models

GEOTIFF_DRIVER = "GTiff"


class DecodeError(RuntimeError):
    """Exception raised when bytes cannot be decoded as a GeoTIFF image."""


def decode(data: bytes) -> service_models.RasterResult:
    """Decode the first image of a GeoTIFF held in memory.

    Args:
        data: Complete file contents.

    Returns:
        RasterResult with one flat row-major sample list per band and the
        image dimensions.

    Raises:
        DecodeError: If the bytes are empty, not a TIFF, or unreadable.
    """
    if not data:
        raise DecodeError("Empty raster payload")

    try:
        with rasterio.MemoryFile(data) as memfile, memfile.open(
            driver=GEOTIFF_DRIVER,
        ) as dataset:
            bands = dataset.read()
            width, height = dataset.width, dataset.height
    except rasterio_errors.RasterioError as exc:
        raise DecodeError(f"Could not decode GeoTIFF: {exc}") from exc

    return service_models.RasterResult(
        raster_data=[band.ravel().tolist() for band in bands],
        width=width,
        height=height,
    )
