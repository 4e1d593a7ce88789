import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scholarhub.config import get_settings
from scholarhub.infrastructure.database import engine, initialize_database
from scholarhub.infrastructure.notifications import bind_delivery_loop
from scholarhub.interfaces.api.routes import register_routes
from scholarhub.logging_config import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the database on startup and release resources on shutdown."""

    initialize_database()
    bind_delivery_loop(asyncio.get_running_loop())
    try:
        yield
    finally:
        bind_delivery_loop(None)
        engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the main FastAPI application."""

    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="ScholarHub Notifications", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
