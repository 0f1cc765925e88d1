from enum import StrEnum


class SignalEvent(StrEnum):
    """
    Named events carried in the `event` field of every WebSocket frame.

    Attributes:
        REGISTER_HOST: Endpoint asks to become the Host (in).
        REGISTER_VIEWER: Endpoint asks to become a Viewer (in).
        REGISTERED: Registration acknowledged (out).
        HOST_REJECTED: Host takeover denied, current Host still alive (out).
        REQUEST_CONNECTION: Viewer asks the Host for a session (in).
        NO_HOST: No Host is registered, told to the requesting Viewer (out).
        NOTIFY_NEW_CONNECTION: A Viewer wants a session, told to the Host (out).
        SESSION_OFFER: Session offer relayed Host -> Viewer (in/out).
        SESSION_ANSWER: Session answer relayed Viewer -> Host (in/out).
        ICE_CANDIDATE: Connectivity candidate relayed either way (in/out).
    """

    REGISTER_HOST = "register-host"
    REGISTER_VIEWER = "register-viewer"
    REGISTERED = "registered"
    HOST_REJECTED = "host-rejected"
    REQUEST_CONNECTION = "request-connection"
    NO_HOST = "no-host"
    NOTIFY_NEW_CONNECTION = "notify-new-connection"
    SESSION_OFFER = "session-offer"
    SESSION_ANSWER = "session-answer"
    ICE_CANDIDATE = "ice-candidate"
