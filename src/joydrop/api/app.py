"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from joydrop.api.joydrop import router as joydrop_router
from joydrop.api.models import ErrorResponse
from joydrop.api.posts import router as posts_router
from joydrop.api.users import router as users_router
from joydrop.app_logging import configure_logging
from joydrop.config import parse_cors_origins
from joydrop.containers import AppContainer
from joydrop.errors import JoydropError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI(title="Joydrop API")
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_cors_origins(container.settings.cors_origins),
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )

    app.include_router(joydrop_router)
    app.include_router(posts_router)
    app.include_router(users_router)

    @app.exception_handler(JoydropError)
    async def joydrop_error_handler(request: Request, exc: JoydropError) -> JSONResponse:
        """Render typed service failures with their status and error code."""
        if exc.status_code >= 500:
            logger.error(
                "Request failed: %s %s: %s",
                request.method,
                request.url.path,
                exc.message,
            )
        else:
            logger.info(
                "Request rejected: %s %s: %s %s",
                request.method,
                request.url.path,
                exc.error_code,
                exc.message,
            )
        body = ErrorResponse(
            error=exc.message, error_code=exc.error_code, details=exc.details
        )
        return JSONResponse(status_code=exc.status_code, content=body.model_dump())

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
