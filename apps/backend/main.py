# apps/backend/main.py
import logging
from typing import Optional

from fastapi import FastAPI

from apps.backend.config.settings import load_settings
from apps.backend.routes.events import router as events_router
from apps.backend.routes.health import router as health_router
from apps.backend.services.events.submitter import EventsClient, EventSubmitter
from apps.backend.services.klaviyo_client import build_client
from apps.backend.utils.logger import configure_logging

log = logging.getLogger("restaurant_events.main")


def create_app(client: Optional[EventsClient] = None) -> FastAPI:
    app = FastAPI(
        title="Restaurant Events",
        version="0.1.0",
        description="Ordering, reservation and loyalty events for Klaviyo",
    )

    # -------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------
    app.include_router(health_router)
    app.include_router(events_router)

    # -------------------------------------------------------------------
    # Root
    # -------------------------------------------------------------------
    @app.get("/")
    async def root():
        return {
            "status": "Restaurant Events Online",
            "routes": [
                "/health",
                "/events/catalog",
                "/events/{kind}",
            ],
        }

    # -------------------------------------------------------------------
    # Startup (missing KLAVIYO_API_KEY is fatal here)
    # -------------------------------------------------------------------
    @app.on_event("startup")
    async def startup_event():
        settings = load_settings()
        configure_logging(settings.log_level)
        app.state.submitter = EventSubmitter(client or build_client(settings))
        log.info(f"Restaurant Events starting ({settings.app_env}), client={type(app.state.submitter.client).__name__}")

    return app


app = create_app()
