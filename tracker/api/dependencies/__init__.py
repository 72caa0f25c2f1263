"""FastAPI dependencies: the acting user and the wired services."""

from tracker.api.dependencies.actor import ACTOR_HEADER, get_actor_id
from tracker.api.dependencies.services import (
    TrackerServices,
    build_services,
    get_services,
    reset_services,
)

__all__: list[str] = [
    "ACTOR_HEADER",
    "TrackerServices",
    "build_services",
    "get_actor_id",
    "get_services",
    "reset_services",
]
