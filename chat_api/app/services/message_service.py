"""
Service layer for chat messages.

Messages are immutable once saved: the service only creates and lists
them.  Listing returns messages ordered by ``msgDateTime`` ascending.
"""

import logging
from datetime import datetime, timezone
from typing import List

from ..core.errors import PersistenceError
from ..core.store import ASCENDING, DocumentCollection, StoreError
from ..schemas.message import MessageCreate, MessageRead


logger = logging.getLogger(__name__)


class MessageService:
    """Service for chat messages.

    With ``suppress_list_errors`` set (the default) a store failure in
    ``get_messages`` is logged and an empty list is returned, so callers
    cannot tell "no messages" from "listing failed".  Without it the
    failure is raised as ``PersistenceError``.
    """

    def __init__(self, messages: DocumentCollection, suppress_list_errors: bool = True) -> None:
        self.messages = messages
        self.suppress_list_errors = suppress_list_errors

    async def save_message(self, message: MessageCreate) -> MessageRead:
        """Store a message, stamping it with the current time if it has none."""
        try:
            stored = await self.messages.create(
                {
                    "msg": message.msg,
                    "msgFrom": message.msg_from,
                    "msgDateTime": message.msg_date_time or datetime.now(timezone.utc),
                }
            )
        except StoreError as exc:
            logger.error("Failed to save message from %s: %s", message.msg_from, exc)
            raise PersistenceError("Failed to save message") from exc
        return MessageRead.model_validate(stored)

    async def get_messages(self) -> List[MessageRead]:
        """Return all messages, oldest first."""
        try:
            rows = await self.messages.find(sort=[("msgDateTime", ASCENDING)])
        except StoreError as exc:
            if not self.suppress_list_errors:
                raise PersistenceError("Failed to retrieve messages") from exc
            logger.warning("Listing messages failed, returning no messages: %s", exc)
            return []
        return [MessageRead.model_validate(row) for row in rows]
