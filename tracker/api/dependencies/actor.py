"""Acting-user dependency.

Session mechanics are outside the core: an upstream gateway
authenticates the caller and forwards the user id in X-User-Id. A
missing header yields None, which every service rejects with
UnauthenticatedError (HTTP 401).
"""

from fastapi import Header

ACTOR_HEADER = "X-User-Id"


async def get_actor_id(
    x_user_id: str | None = Header(default=None, alias=ACTOR_HEADER),
) -> str | None:
    """Return the authenticated user id, or None when absent."""
    return x_user_id or None
