"""
Protocol classes for structural subtyping (duck typing with type safety).

The signaling core only ever talks to a connection through `Transport`.
`SignalingWebSocket` implements it for production; tests use a
recording fake with the same shape.
"""

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel

from castrelay.types import TransportId


@runtime_checkable
class Transport(Protocol):
    """
    Protocol for one physical realtime connection.

    Attributes:
        transport_id: Unique id of this connection.
    """

    transport_id: TransportId

    @property
    def connected(self) -> bool:
        """
        Whether the connection is live right now.

        Must reflect the current state on every access; the grace-period
        re-check relies on it never being cached.
        """
        ...

    async def emit(
        self, event: str, payload: BaseModel | dict[str, Any] | None = None
    ) -> bool:
        """
        Send one named message.

        Args:
            event: Outbound event name.
            payload: Message payload, serialized with camelCase aliases.

        Returns:
            True if the message was handed to the connection, False if
            the connection was already gone (never raises for that case).
        """
        ...

    async def close(self) -> None:
        """Force-close the connection. Idempotent."""
        ...
