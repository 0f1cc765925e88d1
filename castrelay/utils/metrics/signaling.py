"""
Prometheus metrics for the signaling core.

Host arbitration outcomes, relay drops and registry occupancy.
"""

from castrelay.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_gauge,
)

host_claims_total = _get_or_create_counter(
    "host_claims_total",
    "Host registration requests by outcome",
    # registered, reconnected, pending, denied, accepted, abandoned, ignored
    ["outcome"],
)

ws_messages_dropped_total = _get_or_create_counter(
    "ws_messages_dropped_total",
    "Relayed messages dropped because the target has no live entry",
    ["event"],
)

registry_connections = _get_or_create_gauge(
    "registry_connections",
    "Connections held by the registry",
    ["role"],
)
