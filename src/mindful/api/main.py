"""Mindful API.

REST surface over the session orchestration core. Every route lives under
/api and expects a bearer token from the identity provider.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from .. import __version__
from ..config import configure_logging, settings
from ..core.exceptions import InvalidInputError, MindfulException
from ..database import init_db
from .routes_chat import router as chat_router
from .routes_renewal import router as renewal_router
from .routes_sessions import router as sessions_router
from .routes_usage import router as usage_router
from .schemas import HealthResponse


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    configure_logging()
    await init_db()
    logger.info("Mindful API started")
    yield
    logger.info("Mindful API shutting down")


def error_body(exc: MindfulException) -> dict:
    return {"error": exc.kind, "message": exc.message, **exc.details()}


async def mindful_exception_handler(request: Request, exc: MindfulException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.kind}")

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=error_body(exc), headers=headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    error = InvalidInputError(f"{location}: {first.get('msg', 'invalid request')}")
    return JSONResponse(status_code=error.status_code, content=error_body(error))


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Mindful API",
        description="Session orchestration for emotional-support chat",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MindfulException, mindful_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Routers define their own prefixes, mounted once under /api
    app.include_router(chat_router, prefix="/api")
    app.include_router(sessions_router, prefix="/api")
    app.include_router(usage_router, prefix="/api")
    app.include_router(renewal_router, prefix="/api")

    @app.get("/health", tags=["health"])
    @app.get("/api/health", response_model=HealthResponse, tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(version=__version__)

    return app


# Create app instance
app = create_app()


def run():
    """Run the server."""
    import uvicorn
    uvicorn.run(
        "mindful.api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
    )


if __name__ == "__main__":
    run()
