import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from castrelay.api.ws.constants import SignalEvent
from castrelay.constants import WS_MAX_FRAME_BYTES
from castrelay.exceptions import InvalidMessageError
from castrelay.schemas.profile import ProfileModel


class SignalMessage(BaseModel):
    """
    Envelope of every WebSocket frame.

    Attributes:
        event: Event name, routed by `EventRouter`.
        data: Event payload, validated by the handler's payload model.
    """

    event: SignalEvent = Field(frozen=True)
    data: Any = None

    @classmethod
    def decode(cls, text: str | bytes) -> "SignalMessage":
        """
        Parse one inbound text frame.

        Raises:
            InvalidMessageError: If the frame is oversized, not JSON, nested
                too deeply, or not a `{"event": ..., "data": ...}` object.
        """
        if isinstance(text, str):
            size = len(text.encode("utf-8", "surrogatepass"))
        else:
            size = len(text)
        if size > WS_MAX_FRAME_BYTES:
            raise InvalidMessageError(
                f"Frame of {size} bytes exceeds {WS_MAX_FRAME_BYTES}"
            )
        try:
            return cls.model_validate(json.loads(text))
        except (ValueError, ValidationError) as ex:
            # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
            raise InvalidMessageError(str(ex)) from ex
        except RecursionError as ex:
            raise InvalidMessageError("Frame is nested too deeply") from ex

    def encode(self) -> str:
        data = self.data
        if isinstance(data, BaseModel):
            data = data.model_dump(mode="json", by_alias=True)
        return json.dumps({"event": str(self.event), "data": data})


class SignalPayloadModel(BaseModel):
    """Base for payloads whose wire keys are camelCase."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class SessionOfferModel(SignalPayloadModel):
    profile: ProfileModel
    sdp: Any


class SessionAnswerModel(SignalPayloadModel):
    profile: ProfileModel
    answer: Any


@dataclass(frozen=True)
class ToHost:
    """Candidate goes to the registered Host."""


@dataclass(frozen=True)
class ToViewer:
    """Candidate goes to the Viewer identified by `profile`."""

    profile: ProfileModel


IceTarget = ToHost | ToViewer


class IceCandidateModel(SignalPayloadModel):
    """
    Inbound ice-candidate payload.

    `viewerProfile` is present when the Host addresses a Viewer and absent
    when a Viewer addresses the Host; use `target` rather than the raw
    field.
    """

    profile: ProfileModel
    candidate: Any
    viewer_profile: ProfileModel | None = Field(
        default=None, alias="viewerProfile"
    )

    @property
    def target(self) -> IceTarget:
        if self.viewer_profile is None:
            return ToHost()
        return ToViewer(self.viewer_profile)
