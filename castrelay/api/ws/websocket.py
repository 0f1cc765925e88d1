import uuid
from typing import Any, Type

from pydantic import BaseModel
from starlette import status
from starlette.endpoints import WebSocketEndpoint
from starlette.types import Receive, Scope, Send
from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from castrelay.connection_registry import connection_registry
from castrelay.constants import (
    WS_CORRELATION_ID_LENGTH,
    WS_REPLACED_CLOSE_CODE,
)
from castrelay.exceptions import InvalidMessageError
from castrelay.logging import clear_log_context, logger, set_log_context
from castrelay.schemas.request import SignalMessage
from castrelay.types import TransportId
from castrelay.utils.metrics import (
    ws_connections_active,
    ws_connections_total,
    ws_invalid_messages_total,
    ws_messages_sent_total,
)


class SignalingWebSocket(WebSocket):  # type: ignore[misc]
    """
    WebSocket that implements the `Transport` protocol.

    Sends named `{"event", "data"}` frames and can be closed from any task
    (reconnects close the superseded socket from the new socket's task).
    """

    def __init__(self, scope: Scope, receive: Receive, send: Send) -> None:
        super().__init__(scope, receive=receive, send=send)
        self.transport_id = TransportId(str(uuid.uuid4()))

    @property
    def connected(self) -> bool:
        return (
            self.client_state == WebSocketState.CONNECTED
            and self.application_state == WebSocketState.CONNECTED
        )

    async def emit(
        self, event: str, payload: BaseModel | dict[str, Any] | None = None
    ) -> bool:
        """
        Sends one named message over the WebSocket connection.

        A connection that is already gone is logged and skipped; the
        caller never sees an exception for it.

        Args:
            event: Outbound event name.
            payload: Message data; pydantic models are dumped with their
                camelCase aliases.

        Returns:
            True if the frame was sent.
        """
        if not self.connected:
            logger.debug(
                f"Skipping {event} to transport {self.transport_id}: not connected"
            )
            return False

        text = SignalMessage(
            event=event, data=payload if payload is not None else {}
        ).encode()
        try:
            await self.send({"type": "websocket.send", "text": text})
        except (WebSocketDisconnect, OSError, RuntimeError) as e:
            # WebSocketDisconnect: Client disconnected
            # OSError: Network errors
            # RuntimeError: WebSocket in invalid state
            logger.warning(
                f"Failed to send {event} to transport {self.transport_id}: {e}"
            )
            return False

        ws_messages_sent_total.labels(event=str(event)).inc()
        return True

    async def close(
        self, code: int = WS_REPLACED_CLOSE_CODE, reason: str | None = None
    ) -> None:
        """Force-close the connection; a no-op if it is already closed."""
        if (
            self.application_state == WebSocketState.DISCONNECTED
            or self.client_state == WebSocketState.DISCONNECTED
        ):
            return
        try:
            await super().close(code=code, reason=reason)
        except (WebSocketDisconnect, OSError, RuntimeError) as e:
            logger.debug(f"Transport {self.transport_id} already closing: {e}")


class SignalingWebSocketEndpoint(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint that turns a physical connection into
    connected / message / disconnected events for the signaling core.

    Malformed frames are dropped one by one; they never close the
    connection.
    """

    encoding = None  # Frames are decoded into SignalMessage in decode()
    websocket_class: Type[WebSocket] = SignalingWebSocket

    async def dispatch(self) -> None:
        """
        Manages the WebSocket connection lifecycle.

        1. Creates a `SignalingWebSocket` from the scope and calls on_connect.
        2. Receives frames until the client disconnects; each frame is
           decoded and, when valid, passed to on_receive.
        3. Always calls on_disconnect with the close code, also when an
           unexpected error ends the loop.
        """
        websocket = self.websocket_class(
            self.scope, receive=self.receive, send=self.send
        )
        await self.on_connect(websocket)  # type: ignore[no-untyped-call]

        close_code = status.WS_1000_NORMAL_CLOSURE

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.receive":
                    data = await self.decode(websocket, message)
                    if data is not None:
                        await self.on_receive(websocket, data)
                elif message["type"] == "websocket.disconnect":
                    close_code = int(
                        message.get("code") or status.WS_1000_NORMAL_CLOSURE
                    )
                    break
        except Exception as exc:
            # Catch-all for unexpected errors
            close_code = status.WS_1011_INTERNAL_ERROR
            raise exc
        finally:
            await self.on_disconnect(websocket, close_code)  # type: ignore[no-untyped-call]

    async def decode(
        self, websocket: WebSocket, message: dict[str, Any]
    ) -> SignalMessage | None:
        """
        Decode one inbound frame.

        Returns:
            The decoded message, or None if the frame was malformed.
        """
        raw = message.get("text")
        if raw is None:
            raw = message.get("bytes") or b""

        try:
            return SignalMessage.decode(raw)
        except InvalidMessageError as ex:
            logger.warning(
                f"Dropping malformed frame from transport "
                f"{websocket.transport_id}: {ex}"
            )
            ws_invalid_messages_total.inc()
            return None

    async def on_connect(self, websocket):  # type: ignore[no-untyped-def]
        """
        Accepts the connection and sets up per-connection log context.

        The first characters of the transport id serve as the correlation
        id of every log line written for this connection.
        """
        await super().on_connect(websocket)

        set_log_context(
            transport_id=websocket.transport_id,
            correlation_id=websocket.transport_id[:WS_CORRELATION_ID_LENGTH],
        )

        ws_connections_total.labels(status="accepted").inc()
        ws_connections_active.inc()
        logger.info(f"User connected: transport {websocket.transport_id}")

    async def on_disconnect(self, websocket, close_code):  # type: ignore[no-untyped-def]
        """
        Removes the connection's registry entry and force-closes it.

        Removal is by transport id: if the profile has already reconnected
        on a newer transport, its entry is left alone.
        """
        await super().on_disconnect(websocket, close_code)

        removed = await connection_registry.remove_by_transport(
            websocket.transport_id
        )
        await websocket.close()

        ws_connections_total.labels(status="closed").inc()
        ws_connections_active.dec()

        if removed is not None:
            logger.info(
                f"{removed.profile.role} '{removed.profile.id}' disconnected "
                f"with code {close_code}"
            )
        else:
            logger.info(
                f"Transport {websocket.transport_id} disconnected with code {close_code}"
            )
        clear_log_context()
