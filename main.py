import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from activity_api.config import get_settings
from activity_api.infrastructure.database import engine, initialize_database
from activity_api.infrastructure.notifications import (
    ActivityPublisher,
    ActivitySubscriptionManager,
)
from activity_api.interfaces.api.errors import register_exception_handlers
from activity_api.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tables on startup and release realtime and DB resources on shutdown."""

    initialize_database()
    yield
    app.state.subscription_manager.reset()
    engine.dispose()
    logger.info("Activity API stopped")


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Activity Telemetry API", lifespan=lifespan)

    manager = ActivitySubscriptionManager()
    app.state.subscription_manager = manager
    app.state.activity_publisher = ActivityPublisher(manager)

    register_exception_handlers(app)
    register_routes(app)
    return app


app = create_app()
