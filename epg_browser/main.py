from contextlib import asynccontextmanager
import asyncio
import logging

import httpx
from fastapi import FastAPI, Request

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from epg_browser.config import CustomSettings, settings as default_settings, setup_logging
from epg_browser.database import Database
from epg_browser.exceptions import AppError, app_error_handler, unhandled_error_handler
from epg_browser.services import ChannelRefreshService, RefreshScheduler, count_channels

from epg_browser.routers import main_router


setup_logging()
logger = logging.getLogger(__name__)


def create_http_client(settings: CustomSettings, **kwargs) -> httpx.AsyncClient:
    """Shared outbound client; the timeout bounds every upstream request"""
    return httpx.AsyncClient(
        timeout=settings.http_timeout_sec,
        headers={"User-Agent": settings.user_agent},
        follow_redirects=True,
        **kwargs,
    )


async def _initial_refresh(app: FastAPI) -> None:
    """Populate an empty store in the background so startup is not blocked"""
    try:
        async with app.state.database.session_scope() as session:
            existing = await count_channels(session)

        if existing:
            logger.info(f"Database contains {existing} channels")
            return

        logger.info("Database is empty. Fetching channels from upstream...")
        result = await app.state.refresh_service.refresh()
        logger.info(f"Initial refresh stored {result.channel_count} channels")
    except AppError as e:
        logger.error(f"Failed to initialize database: {e.detail}")
        logger.info("Server started but database is empty. Use POST /api/refresh to populate.")
    except Exception as e:
        logger.error(f"Unexpected error during initial refresh: {e}", exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    settings: CustomSettings = app.state.settings
    logger.info("Starting EPG Channel Browser...")

    database = Database(settings.database_path)
    http_client = create_http_client(settings)
    refresh_service = ChannelRefreshService(database, http_client, settings)
    scheduler = None
    initial_refresh: asyncio.Task | None = None

    try:
        logger.info("Initializing database...")
        await database.init()

        app.state.database = database
        app.state.http_client = http_client
        app.state.refresh_service = refresh_service

        if settings.scheduler_enabled:
            logger.info("Starting scheduler...")
            scheduler = RefreshScheduler(
                refresh_service,
                settings.refresh_cron,
                settings.refresh_misfire_grace_sec,
            )
            scheduler.start()
        app.state.scheduler = scheduler

        if settings.refresh_on_startup:
            initial_refresh = asyncio.create_task(_initial_refresh(app))

        logger.info("EPG Channel Browser started successfully")
    except Exception as e:
        logger.error(f"Failed to start EPG Channel Browser: {e}", exc_info=True)
        await http_client.aclose()
        await database.close()
        raise

    yield

    logger.info("Shutting down EPG Channel Browser...")

    try:
        if scheduler:
            scheduler.shutdown()
        if initial_refresh and not initial_refresh.done():
            refresh_service.coordinator.cancel()
            initial_refresh.cancel()
            await asyncio.gather(initial_refresh, return_exceptions=True)
    except Exception as e:
        logger.error(f"Error during scheduler shutdown: {e}", exc_info=True)

    await http_client.aclose()
    await database.close()
    logger.info("EPG Channel Browser stopped")


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors with details"""
    logger.error(f"Validation error for {request.method} {request.url.path}")
    logger.error(f"Validation details: {exc.errors()}")

    # Create a properly serializable error response
    errors = []
    for error in exc.errors():
        error_dict = {
            "type": error.get("type"),
            "loc": error.get("loc"),
            "msg": error.get("msg"),
            "input": str(error.get("input", ""))[:100]
        }
        errors.append(error_dict)

    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "detail": errors
        }
    )


def create_app(settings: CustomSettings | None = None) -> FastAPI:
    """Build the application; tests pass their own settings"""
    app = FastAPI(
        title="EPG Channel Browser",
        version="0.1.0",
        lifespan=lifespan
    )
    app.state.settings = settings or default_settings

    app.include_router(main_router)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    return app


app = create_app()
