"""
Prometheus metrics definitions.

All metrics are re-exported here so callers import from one place:

    from castrelay.utils.metrics import ws_connections_active
    from castrelay.utils.metrics import host_claims_total
"""

from castrelay.utils.metrics.signaling import (
    host_claims_total,
    registry_connections,
    ws_messages_dropped_total,
)
from castrelay.utils.metrics.websocket import (
    get_active_websocket_connections,
    ws_connections_active,
    ws_connections_total,
    ws_invalid_messages_total,
    ws_message_processing_duration_seconds,
    ws_messages_received_total,
    ws_messages_sent_total,
)

__all__ = [
    "get_active_websocket_connections",
    "host_claims_total",
    "registry_connections",
    "ws_connections_active",
    "ws_connections_total",
    "ws_invalid_messages_total",
    "ws_message_processing_duration_seconds",
    "ws_messages_dropped_total",
    "ws_messages_received_total",
    "ws_messages_sent_total",
]
