"""API router subpackage for the Landsat S3 gateway.

Submodules:
    - s3: Endpoints for credential verification, bucket listings, object
      downloads, GeoTIFF streaming and GeoTIFF decoding.

Each module exposes its own APIRouter for composition in the application's
main FastAPI instance.
"""
