"""
Prometheus metrics for WebSocket transport monitoring.

This module defines metrics for tracking WebSocket connections, message rates
per event, and message processing durations.
"""

from castrelay.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_gauge,
    _get_or_create_histogram,
)

# WebSocket Connection Metrics
ws_connections_active = _get_or_create_gauge(
    "ws_connections_active", "Number of active WebSocket connections"
)

ws_connections_total = _get_or_create_counter(
    "ws_connections_total",
    "Total WebSocket connections",
    ["status"],  # accepted, closed
)

ws_messages_received_total = _get_or_create_counter(
    "ws_messages_received_total",
    "Total WebSocket messages received",
    ["event"],
)

ws_messages_sent_total = _get_or_create_counter(
    "ws_messages_sent_total", "Total WebSocket messages sent", ["event"]
)

ws_invalid_messages_total = _get_or_create_counter(
    "ws_invalid_messages_total",
    "Total inbound frames dropped as malformed",
)

ws_message_processing_duration_seconds = _get_or_create_histogram(
    "ws_message_processing_duration_seconds",
    "WebSocket message processing duration in seconds",
    ["event"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)


def get_active_websocket_connections() -> int:
    """
    Get the current number of active WebSocket connections.

    Returns:
        int: Number of active WebSocket connections.
    """
    try:
        return int(ws_connections_active._value.get())
    except (AttributeError, ValueError):
        return 0
