from contextlib import asynccontextmanager

from fastapi import FastAPI

from supportdesk.api.errors import register_error_handlers
from supportdesk.api.routes import approvals, dashboard, health, invoices, organizations, settings, tickets, users
from supportdesk.core.config import get_settings
from supportdesk.core.logging import configure_logging, init_tracer, shutdown_tracer
from supportdesk.store import PortalStore, create_store


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
    app_settings = get_settings()
    logger = configure_logging(app_settings)
    tracer_provider = init_tracer(app_settings)

    app.state.logger = logger
    app.state.tracer_provider = tracer_provider
    if getattr(app.state, "store", None) is None:
        app.state.store = create_store(app_settings)
    logger.info("%s started (%s)", app_settings.app_name, app_settings.environment)
    try:
        yield
    finally:
        shutdown_tracer(tracer_provider)


def create_app(store: PortalStore | None = None) -> FastAPI:
    """Build the application; ``store`` replaces the one built from settings."""

    app_settings = get_settings()
    app = FastAPI(title=app_settings.app_name, lifespan=lifespan)
    app.state.store = store
    register_error_handlers(app)
    app.include_router(health.router)
    app.include_router(tickets.router)
    app.include_router(approvals.router)
    app.include_router(invoices.router)
    app.include_router(organizations.router)
    app.include_router(users.router)
    app.include_router(dashboard.router)
    app.include_router(settings.router)
    return app


app = create_app()
