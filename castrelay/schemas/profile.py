from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from castrelay.types import ProfileId


class UserRole(StrEnum):
    HOST = "Host"
    VIEWER = "Viewer"


class ProfileModel(BaseModel):  # type: ignore[misc]
    """
    Identity descriptor presented by a remote endpoint.

    Profiles are trusted as presented; `id` is the key used to match
    reconnects and to address Viewers.
    """

    model_config = ConfigDict(frozen=True)

    id: ProfileId
    name: str
    role: UserRole

    @property
    def is_host(self) -> bool:
        return self.role == UserRole.HOST
