"""App package initializer for the Landsat S3 gateway backend.

This package contains a small FastAPI service for browsing and retrieving
objects from the requester-pays USGS Landsat bucket on S3, with optional
decoding of GeoTIFF objects into pixel data.

- Verifies AWS credentials and lists bucket contents with prefix and
  continuation-token pagination
- Downloads objects buffered, or streams them chunk by chunk
- Decodes GeoTIFF bands via rasterio for clients that want pixel values
- Designed for FastAPI dependency injection and testability with a fake
  boto3 client

See module sub-docstrings for details on architecture and usage.
"""
