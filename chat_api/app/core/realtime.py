"""
Real-time notifications over WebSocket.

The ``Notifier`` keeps the set of connected WebSocket subscribers and
broadcasts events to all of them.  Each event is sent as a JSON text
frame of the form ``{"event": <name>, "data": <payload>}``.

Delivery is best effort: a subscriber whose send fails, or does not
complete within ``send_timeout`` seconds, is dropped and the failure is
logged.  ``emit`` never raises into the caller and nothing is retried,
so a client that stops reading cannot hold up the request that emits.
"""

import asyncio
import logging
from typing import Any, Dict, Set

from fastapi import WebSocket


logger = logging.getLogger(__name__)

MESSAGE_UPDATE_EVENT = "messageUpdate"

DEFAULT_SEND_TIMEOUT = 5.0


class Notifier:
    """Fan-out of named events to connected WebSocket clients."""

    def __init__(self, send_timeout: float = DEFAULT_SEND_TIMEOUT) -> None:
        self.subscribers: Set[WebSocket] = set()
        self.send_timeout = send_timeout

    def subscribe(self, ws: WebSocket) -> None:
        self.subscribers.add(ws)
        logger.info("Subscriber connected (%d total)", len(self.subscribers))

    def unsubscribe(self, ws: WebSocket) -> None:
        if ws in self.subscribers:
            self.subscribers.discard(ws)
            logger.info("Subscriber disconnected (%d total)", len(self.subscribers))

    async def _send(self, ws: WebSocket, frame: Dict[str, Any]) -> None:
        try:
            await asyncio.wait_for(ws.send_json(frame), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            logger.warning("Dropping subscriber after send timed out (%.1fs)", self.send_timeout)
            self.unsubscribe(ws)
        except Exception as exc:
            logger.warning("Dropping subscriber after failed send: %s", exc)
            self.unsubscribe(ws)

    async def emit(self, event: str, payload: Dict[str, Any]) -> None:
        """Send ``payload`` under ``event`` to every current subscriber.

        Sends run concurrently, so the call takes at most ``send_timeout``
        seconds however many subscribers are stalled.
        """
        frame = {"event": event, "data": payload}
        subscribers = list(self.subscribers)
        if not subscribers:
            return
        logger.debug("Emitting %s to %d subscriber(s)", event, len(subscribers))
        await asyncio.gather(*(self._send(ws, frame) for ws in subscribers))
