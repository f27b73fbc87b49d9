"""FastAPI application entrypoint and configuration.

This module provides the main FastAPI application factory that sets up
logging and CORS middleware, includes the S3 router, and exposes a health
check endpoint for monitoring.

Example:
    The application can be run with uvicorn:
        $ uvicorn app.main:app --reload

    Or through the console script, which binds the configured port:
        $ landsat-s3-gateway
"""

import fastapi
import uvicorn
from fastapi.middleware import cors

from app.api import s3
from app.core import config, logging_config

CORS_METHODS = ["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"]


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application.

    Configures logging, includes the S3 router and adds a health check
    endpoint. CORS admits only the configured origins, with credentials.

    Returns:
        Configured FastAPI application instance ready for ASGI server.
    """
    settings = config.get_settings()
    logging_config.setup_logging(settings.log_level)

    app = fastapi.FastAPI(title="Landsat S3 Gateway", version="0.1.0")

    app.include_router(s3.router)

    app.add_middleware(
        cors.CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:  # type: ignore[misc]
        """Health check endpoint for monitoring and load balancers.

        Returns:
            Dictionary with status "ok" if the service is running.
        """
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    """Serve the module-level app on the configured host and port."""
    settings = config.get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
