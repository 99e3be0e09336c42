"""
FastAPI dependencies resolving the services wired in ``main.create_app``.

Services and the notifier are stored on ``app.state``; tests can replace
them through ``app.dependency_overrides``.
"""

from fastapi import Request
from fastapi.requests import HTTPConnection

from ..core.realtime import Notifier
from ..services.message_service import MessageService
from ..services.user_service import UserService


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_message_service(request: Request) -> MessageService:
    return request.app.state.message_service


def get_notifier(conn: HTTPConnection) -> Notifier:
    return conn.app.state.notifier
