"""FastAPI application entry point for Tracker Core."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tracker import __version__
from tracker.api.errors import tracker_error_handler
from tracker.api.middleware.logging_middleware import LoggingMiddleware
from tracker.api.routes.health import router as health_router
from tracker.api.routes.projects import router as projects_router
from tracker.api.routes.sprints import router as sprints_router
from tracker.api.routes.tickets import router as tickets_router
from tracker.api.startup import configure_logging
from tracker.domain.exceptions import TrackerError


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    yield


def create_app() -> FastAPI:
    """Build the application with middleware, error mapping and routers."""
    application = FastAPI(
        title="Tracker Core API",
        description="Authorization, workflow, ordering and cascade rules for a project tracker",
        version=__version__,
        lifespan=lifespan,
    )
    application.add_middleware(LoggingMiddleware)
    application.add_exception_handler(TrackerError, tracker_error_handler)

    application.include_router(health_router)
    application.include_router(projects_router)
    application.include_router(tickets_router)
    application.include_router(sprints_router)
    return application


app = create_app()
