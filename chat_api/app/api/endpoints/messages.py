"""
Message endpoints.

``POST /addMessage`` validates and saves a message, then broadcasts a
``messageUpdate`` event carrying the stored record to every real-time
subscriber.  ``GET /getMessages`` lists messages oldest first.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import ValidationError

from ...core.errors import ServiceError
from ...core.realtime import MESSAGE_UPDATE_EVENT, Notifier
from ...core.store import to_utc
from ...schemas.message import MessageCreate, MessageRead
from ...services.message_service import MessageService
from ..deps import get_message_service, get_notifier
from ..responses import error_response, invalid_body, read_json_body


logger = logging.getLogger(__name__)

router = APIRouter()


def is_request_valid(body: Any) -> bool:
    """The body must be an object carrying a ``messageToAdd`` payload.

    Empty objects and arrays count as present; they fail message
    validation instead.
    """
    return isinstance(body, dict) and body.get("messageToAdd") not in (None, "", 0, False)


def _non_blank(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def parse_message(payload: Any) -> Optional[MessageCreate]:
    """Return the message if ``msg`` and ``msgFrom`` are non-blank and the payload parses.

    ``msgDateTime`` must also be representable in UTC, which rules out
    offsets that push a timestamp past the ends of the calendar.
    """
    if not isinstance(payload, dict):
        return None
    if not (_non_blank(payload.get("msg")) and _non_blank(payload.get("msgFrom"))):
        return None
    try:
        message = MessageCreate.model_validate(payload)
        if message.msg_date_time is not None:
            to_utc(message.msg_date_time)
    except (ValidationError, OverflowError):
        return None
    return message


@router.post("/addMessage", response_model=MessageRead)
async def add_message(
    request: Request,
    service: MessageService = Depends(get_message_service),
    notifier: Notifier = Depends(get_notifier),
) -> Any:
    """Save a new message and notify subscribers.

    The ``messageUpdate`` event is sent after the message is stored, so
    it carries the assigned ``id`` and the resolved ``msgDateTime``.
    """
    try:
        body = await read_json_body(request)
        if not is_request_valid(body):
            return invalid_body("Invalid request")

        message = parse_message(body["messageToAdd"])
        if message is None:
            return invalid_body("Invalid message")

        stored = await service.save_message(message)
        await notifier.emit(MESSAGE_UPDATE_EVENT, {"msg": stored.model_dump(mode="json", by_alias=True)})
        return stored
    except ServiceError as exc:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)
    except Exception:
        logger.exception("Unexpected error while adding message")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to add message")


@router.get("/getMessages", response_model=List[MessageRead])
async def get_messages(service: MessageService = Depends(get_message_service)) -> Any:
    """Fetch all messages in ascending order of their date and time."""
    try:
        return await service.get_messages()
    except Exception:
        logger.exception("Failed to retrieve messages")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to retrieve messages")
