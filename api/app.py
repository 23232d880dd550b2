"""
Application assembly.

`create_app` wires routers, middleware and error handlers around a services
dict. `create_production_app` builds that dict from Vault-held secrets and
PostgreSQL; run it with `uvicorn api.app:create_production_app --factory`.
"""

import logging

from dotenv import load_dotenv
from fastapi import FastAPI

from api.actions import create_actions_router
from api.base import success_response
from api.data import create_data_router
from api.errors import register_error_handlers
from api.intake import create_intake_router
from api.middleware import RequestIDMiddleware
from auth.security_middleware import AdminAuthMiddleware
from core.config import OperatingConfig, load_operating_config
from core.event_bus import EventBus
from core.services.blackout_service import BlackoutService
from core.services.scheduling_service import SchedulingService
from core.services.ticket_service import TicketService

logger = logging.getLogger(__name__)


def build_services(tickets, schedule, blackouts, config: OperatingConfig, distance=None, event_bus=None) -> dict:
    """Services keyed the way the routers look them up."""
    blackout_service = BlackoutService(blackouts, config)
    return {
        "ticket": TicketService(tickets, config, distance=distance, event_bus=event_bus),
        "scheduling": SchedulingService(schedule, tickets, blackout_service, config, event_bus=event_bus),
        "blackout": blackout_service,
    }


def create_app(services: dict, admin_secret: str, config: OperatingConfig) -> FastAPI:
    app = FastAPI(title=config.app_name)
    # Last added is outermost; auth rejections still get a request id and access line.
    app.add_middleware(AdminAuthMiddleware, admin_secret=admin_secret)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_intake_router(services), prefix="/api")
    app.include_router(create_data_router(services), prefix="/api")
    app.include_router(create_actions_router(services), prefix="/api")

    @app.get("/health")
    async def health():
        return success_response({"status": "ok"}).model_dump(mode="json")

    return app


def create_production_app() -> FastAPI:
    """Build the app against PostgreSQL, Google Distance Matrix and the email gateway."""
    from clients.distance_client import DistanceMatrixClient
    from clients.email_client import EmailGatewayClient
    from clients.postgres_client import PostgresClient
    from clients.vault_client import (
        get_admin_secret,
        get_database_url,
        get_email_config,
        get_maps_api_key,
    )
    from core.handlers.notification_handler import register_notification_handlers
    from core.stores.postgres import (
        PostgresBlackoutStore,
        PostgresScheduleStore,
        PostgresTicketStore,
        ensure_schema,
    )

    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_operating_config()
    postgres = PostgresClient(get_database_url())
    ensure_schema(postgres)

    event_bus = EventBus()
    email = EmailGatewayClient(**get_email_config(), sender=config.app_name)
    register_notification_handlers(event_bus, email, config)

    distance = DistanceMatrixClient(
        get_maps_api_key(),
        timeout_seconds=config.distance_timeout_seconds,
    )

    services = build_services(
        PostgresTicketStore(postgres),
        PostgresScheduleStore(postgres),
        PostgresBlackoutStore(postgres),
        config,
        distance=distance,
        event_bus=event_bus,
    )
    logger.info(f"{config.app_name} ready (timezone {config.timezone})")
    return create_app(services, get_admin_secret(), config)
