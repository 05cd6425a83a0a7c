"""
FastAPI application entry point for the Budget Insights API.

This application backs the budgeting single-page app with:
- AI-generated monthly spending insights (Google Gemini)
- A health check reporting which integrations are configured
- Production serving of the built frontend
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import Settings, get_settings
from app.core.logging import setup_logging, get_logger
from app.core.exceptions import (
    ApplicationError,
    ValidationError,
    validation_exception_handler,
    application_exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
    general_exception_handler,
)
from app.features.insights import router as insights_router
from app.features.frontend import mount_frontend
from app.shared.middleware import (
    request_logging_middleware,
    error_handling_middleware,
)
from app.shared.schemas import HealthEnvironment, HealthResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager for startup and shutdown events.
    """
    settings = app.state.settings

    # Startup
    app.state.insights_gate = asyncio.Semaphore(settings.MAX_CONCURRENT_INSIGHTS)
    logger.info("Starting Budget Insights API")
    logger.info(f"Environment: {'production' if settings.is_production() else 'development'}")
    logger.info(f"API Version: {settings.API_VERSION}")
    if not settings.has_gemini:
        logger.warning("GEMINI_API_KEY is not set, insights requests will fail")

    yield

    # Shutdown
    logger.info("Shutting down Budget Insights API")


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.
    """
    settings = settings or get_settings()

    # Setup logging first
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Gemini-powered spending insights for the budgeting web app",
        version=settings.API_VERSION,
        docs_url="/api/docs" if not settings.is_production() else None,
        redoc_url="/api/redoc" if not settings.is_production() else None,
        openapi_url="/api/openapi.json" if not settings.is_production() else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials="*" not in settings.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add custom middleware
    app.middleware("http")(error_handling_middleware)
    app.middleware("http")(request_logging_middleware)

    # Register exception handlers
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(ApplicationError, application_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    @app.get("/api/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(current: Settings = Depends(get_settings)):  # type: ignore[misc]
        """Health check reporting which integrations are configured."""
        return HealthResponse(
            status="ok",
            env=HealthEnvironment(
                hasGemini=current.has_gemini,
                hasSupabase=current.has_supabase,
            ),
        )

    # Include routers
    app.include_router(
        insights_router,
        prefix="/api/ai",
        tags=["Insights"]
    )

    # Catch-all frontend route goes last
    mount_frontend(app, settings)

    return app


# Create the application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
        log_level="info",
    )
