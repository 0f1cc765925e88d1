"""
Type definitions and aliases for improved type safety.

NewType IDs keep transport handles and profile identities from being
mixed up; both are plain strings on the wire.
"""

from typing import NewType

TransportId = NewType("TransportId", str)
"""Unique id of one physical WebSocket connection."""

ProfileId = NewType("ProfileId", str)
"""Opaque identity supplied by a remote endpoint in its Profile."""
