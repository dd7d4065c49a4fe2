"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hilal import __version__
from hilal.api.dependencies import initialize_app_state, shutdown_app_state
from hilal.api.routes import router as api_router
from hilal.config import AppConfig, get_config
from hilal.domain.models import ConfigurationError, PrayerSettings
from hilal.services.ports import AudioPlayerPort, NotifierPort, TickerPort

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    logger.info("Hilal starting...")

    config: AppConfig = app.state.config or get_config()
    settings: PrayerSettings = app.state.settings or config.to_settings()

    state = initialize_app_state(
        settings=settings,
        audio_dir=config.audio_dir,
        ticker=app.state.ticker,
        notifier=app.state.notifier,
        audio_player=app.state.audio_player,
        language=config.language,
    )

    schedule = state.scheduler_service.get_schedule()
    logger.info(f"Location: {settings.city or '-'} ({settings.timezone}), method {settings.method.value}")
    logger.info(f"Today: {schedule.to_dict()}")
    state.scheduler_service.start()

    logger.info("Hilal ready!")

    yield

    # Shutdown
    logger.info("Hilal shutting down...")
    await shutdown_app_state()
    logger.info("Hilal stopped.")


def create_app(
    config: AppConfig | None = None,
    settings: PrayerSettings | None = None,
    ticker: TickerPort | None = None,
    notifier: NotifierPort | None = None,
    audio_player: AudioPlayerPort | None = None,
) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        config: Application configuration (default: environment)
        settings: Prayer settings overriding the configured ones
        ticker: Periodic timer driving the scheduler
        notifier: Notification sink
        audio_player: Audio player

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Hilal",
        description="Prayer times and adhan scheduler",
        version=__version__,
        lifespan=lifespan,
    )

    # Store config in app state
    app.state.config = config
    app.state.settings = settings
    app.state.ticker = ticker
    app.state.notifier = notifier
    app.state.audio_player = audio_player

    # Read-only API, any origin may query it
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # API routes
    app.include_router(api_router, prefix="/api")

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    # Health check
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
