"""
Top-level router.

Aggregates the domain routers under the prefixes existing clients use:
``/user`` for accounts, ``/message`` for chat messages and the
``/socket`` WebSocket for real-time events.
"""

from fastapi import APIRouter

from .endpoints import messages, realtime, users

router = APIRouter()

router.include_router(users.router, prefix="/user", tags=["users"])
router.include_router(messages.router, prefix="/message", tags=["messages"])
router.include_router(realtime.router, tags=["realtime"])
