"""Main application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.router import router
from .booking.service import BookingService
from .clock import Clock
from .config import AppConfig, get_config_path, load_config
from .errors import InvalidRequestError, NotFoundError
from .notifier import ChangeNotifier
from .state.ledger import BookingLedger
from .state.spot_store import SpotStore
from .sweeper import ExpirationSweeper

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def load_app_config() -> AppConfig:
    """Load config/config.yaml, falling back to defaults when it is missing."""
    config_path = get_config_path()
    if not config_path.exists():
        logger.warning(f"Configuration file not found: {config_path}, using defaults")
        return AppConfig()

    config = load_config(config_path)
    logger.info(f"Loaded configuration from {config_path}")
    return config


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    config: AppConfig = app.state.config
    sweeper: ExpirationSweeper = app.state.sweeper

    logger.info("Starting Spot Booking...")

    if config.sweeper.enabled:
        sweeper.start()
        logger.info("Expiration sweeper started")
    else:
        logger.info("Expiration sweeper disabled")

    logger.info(f"Spot Booking ready on http://{config.api.host}:{config.api.port}")

    yield  # Application runs here

    # Shutdown
    logger.info("Shutting down...")
    await sweeper.stop()
    logger.info("Shutdown complete")


async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": str(exc)})


async def handle_invalid_request(request: Request, exc: InvalidRequestError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'][1:]) or 'body'}: {err['msg']}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": details or "Invalid request"})


def create_app(config: Optional[AppConfig] = None, clock: Optional[Clock] = None) -> FastAPI:
    """
    Build the application and its booking state.

    The store, ledgers, notifier and sweeper are created once here and
    reached by handlers through ``app.state``.

    Args:
        config: Application configuration, loaded from disk when omitted
        clock: Clock override, mainly for tests
    """
    config = config or load_app_config()
    logging.getLogger().setLevel(config.log_level.upper())

    clock = clock or Clock(config.booking.timezone)
    store = SpotStore(config.booking.spot_count, clock)
    notifier = ChangeNotifier(store.list, lock=store.lock)
    service = BookingService(
        store=store,
        history=BookingLedger("history", config.booking.history_capacity),
        upcoming=BookingLedger("upcoming", config.booking.upcoming_capacity),
        notifier=notifier,
        clock=clock,
        default_occupant=config.booking.default_occupant,
    )
    sweeper = ExpirationSweeper(
        store,
        notifier,
        clock,
        interval_seconds=config.sweeper.interval_seconds,
    )

    app = FastAPI(
        title="Spot Booking",
        description="API for booking parking spots with real-time updates",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.clock = clock
    app.state.booking_service = service
    app.state.sweeper = sweeper
    app.state.started_at = datetime.now()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(NotFoundError, handle_not_found)
    app.add_exception_handler(InvalidRequestError, handle_invalid_request)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.include_router(router, prefix="/api")

    return app


def main():
    """Run the application."""
    config = load_app_config()

    uvicorn.run(
        create_app(config),
        host=config.api.host,
        port=config.api.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
