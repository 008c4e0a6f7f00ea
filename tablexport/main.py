from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging
import sys
from tablexport.core.config import get_settings
from tablexport.core.logger import build_formatter
from tablexport.api.endpoints import router as export_router
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from tablexport.core.rate_limit import limiter

logger = logging.getLogger(__name__)


def setup_logging():
    settings = get_settings()

    # Get the root logger
    root_logger = logging.getLogger()
    # Clear any existing handlers
    root_logger.handlers = []

    log_handler = logging.StreamHandler(sys.stdout)
    log_handler.setFormatter(build_formatter(settings.LOG_FORMAT))
    root_logger.addHandler(log_handler)
    root_logger.setLevel(settings.LOG_LEVEL)

    # Re-apply to uvicorn loggers so they match our format
    for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"]:
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers = []
        uvicorn_logger.addHandler(log_handler)
        uvicorn_logger.propagate = False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: logging. Shutdown: drain export workers, close the database adapter.
    """
    setup_logging()
    settings = get_settings()
    logger.info(f"Starting {settings.APP_NAME} in {settings.ENVIRONMENT} mode.")
    logger.info(f"Configured Database Engine: {settings.DB_ENGINE}")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    from tablexport.db.factory import close_database_adapter
    from tablexport.services.export_service import get_export_service

    get_export_service().shutdown(wait=True)
    close_database_adapter()
    logger.info("Application shutdown complete.")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Tablexport Engine",
        description="Paged table export to JSON, CSV and SQL files.",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Attach rate limiter to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in get_settings().ALLOWED_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(export_router, prefix="/api/v1", tags=["Export Engine"])

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    return app


app = create_app()
