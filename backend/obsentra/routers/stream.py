"""
Live Stream Router
==================

The WebSocket door. Dashboards connect here to watch everything live.

WHAT HAPPENS ON A CONNECTION:
----------------------------
1. We accept the socket and register it with the hub
2. It immediately gets the current selection:
       {"type": "SENSOR_UPDATE", "sensor": "..."}
3. From then on it gets every SENSOR_UPDATE and SENSOR_DATA event
4. It may send {"type": "SENSOR_UPDATE", "sensor": "..."} to change the
   selection for everyone. Junk messages are logged and ignored.
5. When it disconnects (or breaks) we remove it

Available at both /ws and / (older clients just connect to the server root).
"""

import logging

from fastapi import APIRouter, Depends, WebSocket

from obsentra.routers.sensor_relay import get_relay_hub
from obsentra.services import WebSocketSubscriber

logger = logging.getLogger(__name__)

router = APIRouter(tags=["stream"])


@router.websocket("/ws")
@router.websocket("/")
async def relay_stream(websocket: WebSocket, hub = Depends(get_relay_hub)):
    try:
        await websocket.accept()
    except (RuntimeError, OSError) as e:
        logger.warning(f"Could not accept WebSocket from {websocket.client}: {e!r}")
        return

    subscriber = WebSocketSubscriber(websocket, max_pending=hub.max_pending)
    subscriber.start()

    try:
        if not hub.connect(subscriber):
            return

        while True:
            # Only the receive itself counts as a transport failure
            try:
                message = await websocket.receive()
            except (RuntimeError, OSError) as e:
                logger.info(f"{subscriber!r} transport error: {e!r}")
                break
            if message["type"] == "websocket.disconnect":
                break

            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is None:
                continue

            hub.handle_message(subscriber, raw)
    finally:
        hub.disconnect(subscriber)
        subscriber.close()
        await subscriber.wait_closed()
