"""
WebSocket endpoint for real-time updates.

Clients connect to ``/socket`` and receive every event emitted by the
``Notifier`` as a JSON text frame.  Frames sent by clients are read and
discarded; the connection stays subscribed until the client leaves.
"""

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from ...core.realtime import Notifier
from ..deps import get_notifier


router = APIRouter()


@router.websocket("/socket")
async def socket_endpoint(ws: WebSocket, notifier: Notifier = Depends(get_notifier)) -> None:
    notifier.subscribe(ws)
    try:
        await ws.accept()
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        notifier.unsubscribe(ws)
