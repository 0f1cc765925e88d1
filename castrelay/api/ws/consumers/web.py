import time

from fastapi import APIRouter

from castrelay.api.ws.handlers import load_handlers
from castrelay.api.ws.websocket import SignalingWebSocketEndpoint
from castrelay.logging import logger
from castrelay.routing import event_router
from castrelay.schemas.request import SignalMessage
from castrelay.utils.metrics import (
    ws_message_processing_duration_seconds,
    ws_messages_received_total,
)

load_handlers()

router = APIRouter()


@router.websocket_route("/ws")
class Web(SignalingWebSocketEndpoint):
    """
    Signaling endpoint used by Host and Viewer clients.

    Every decoded frame is routed by event name through `event_router`.
    Replies, if any, are emitted by the handlers themselves to whichever
    connection they concern.
    """

    async def on_receive(self, websocket, data: SignalMessage):
        """
        Dispatches one decoded message to its event handler.

        Args:
            websocket: The `SignalingWebSocket` the message arrived on.
            data (SignalMessage): The decoded frame.
        """
        ws_messages_received_total.labels(event=data.event.value).inc()
        logger.debug(
            f"Received {data.event} on transport {websocket.transport_id}"
        )

        start_time = time.time()
        await event_router.handle_message(websocket, data)
        ws_message_processing_duration_seconds.labels(
            event=data.event.value
        ).observe(time.time() - start_time)
