"""ElevatorID API — FastAPI application factory."""


import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from elevatorid.core.config import settings
from elevatorid.core.exceptions import register_exception_handlers
from elevatorid.schemas.common import HealthResponse

# v1 routers
from elevatorid.routers.v1.directory import router as directory_v1_router
from elevatorid.routers.v1.elevators import router as elevators_v1_router
from elevatorid.routers.v1.parts import router as parts_v1_router
from elevatorid.routers.v1.transfers import router as transfers_v1_router


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
    )

    # --- CORS (admin dashboard) ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/api/v1/*) ---
    app.include_router(parts_v1_router, prefix="/api/v1")
    app.include_router(transfers_v1_router, prefix="/api/v1")
    app.include_router(elevators_v1_router, prefix="/api/v1")
    app.include_router(directory_v1_router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(app=settings.app_name, env=settings.app_env)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn on APP_PORT."""
    import uvicorn

    uvicorn.run(
        "elevatorid.main:app",
        host="0.0.0.0",
        port=settings.app_port,
        reload=settings.app_env == "development",
    )
