"""
Application-level constants for hardcoded signaling behavior.

These values are part of the wire protocol or internal safety limits and
should NEVER be changed via environment variables or configuration.

For configurable values (keep-alive timing, origins, logging), see
castrelay/settings.py where values can be overridden via environment variables.
"""

# ============================================================================
# WebSocket Protocol Constants
# ============================================================================

# WebSocket close code used when a transport is superseded by a newer one
# for the same profile (reconnect or Host takeover)
WS_REPLACED_CLOSE_CODE = 4000

# Largest text frame accepted from a client; SDP offers with many
# candidates stay well below this
WS_MAX_FRAME_BYTES = 256 * 1024

# Length of the transport id prefix used as the log correlation id
WS_CORRELATION_ID_LENGTH = 8


# ============================================================================
# Logging
# ============================================================================

# Upper bound for a single structured (JSON) log line; longer messages
# are truncated
MAX_LOG_SIZE_BYTES = 64 * 1024
