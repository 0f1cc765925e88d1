from typing import Any

from pydantic import Field

from castrelay.schemas.profile import ProfileModel
from castrelay.schemas.request import SignalPayloadModel


class HostRejectedModel(SignalPayloadModel):
    profile: ProfileModel
    host_profile: ProfileModel = Field(alias="hostProfile")


class NoHostModel(SignalPayloadModel):
    profile: ProfileModel


class SessionAnswerRelayModel(SignalPayloadModel):
    answer: Any
    profile: ProfileModel


class IceCandidateRelayModel(SignalPayloadModel):
    profile: ProfileModel
    candidate: Any


class CurrentHostModel(SignalPayloadModel):
    profile: ProfileModel | None = None
