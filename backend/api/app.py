"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.config import get_settings
from shared.exceptions import CupOfSugarError
from .models.errors import status_code_for
from .routes import health
from modules.users.routes import router as users_router
from modules.quotas.routes import router as limits_router
from modules.groups.routes import router as groups_router, invites_router
from modules.help_requests.routes import router as requests_router
from modules.notifications.routes import router as notifications_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    # Startup
    settings = get_settings()
    logger.info(
        f"Starting {settings.app_name} on {settings.host}:{settings.port} "
        f"({settings.storage_backend} storage)"
    )
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


async def domain_error_handler(request: Request, exc: CupOfSugarError) -> JSONResponse:
    """Turn a guard failure into its HTTP status and error body."""
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.debug(f"{request.method} {request.url.path} rejected: {exc.code}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Community mutual-aid requests: groups, invites, claims and fulfillment",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(CupOfSugarError, domain_error_handler)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(users_router, prefix="/api/users", tags=["users"])
    app.include_router(limits_router, prefix="/api/limits", tags=["limits"])
    app.include_router(groups_router, prefix="/api/groups", tags=["groups"])
    app.include_router(invites_router, prefix="/api/invites", tags=["invites"])
    app.include_router(requests_router, prefix="/api/requests", tags=["requests"])
    app.include_router(
        notifications_router, prefix="/api/notifications", tags=["notifications"]
    )

    return app


# Application instance for uvicorn
app = create_app()
