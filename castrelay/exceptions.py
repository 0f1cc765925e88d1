"""
Custom exception classes for the application.

Nothing in the signaling core raises to its callers; these exceptions
only cross the boundary between frame decoding and the WebSocket
endpoint, where they are logged and the offending frame is dropped.
"""


class SignalingError(Exception):
    """
    Base exception for signaling errors.
    """

    pass


class InvalidMessageError(SignalingError):
    """
    Inbound frame could not be decoded.

    Raised when a frame is not valid JSON, is too large, or does not match
    the `{"event": ..., "data": ...}` envelope.
    """

    pass
