from typing import Any

from pydantic import BaseModel

from castrelay.api.ws.constants import SignalEvent
from castrelay.connection_registry import (
    Connection,
    ConnectionRegistry,
    connection_registry,
)
from castrelay.logging import logger
from castrelay.protocols import Transport
from castrelay.schemas.profile import ProfileModel, UserRole
from castrelay.schemas.request import (
    IceCandidateModel,
    SessionAnswerModel,
    SessionOfferModel,
    ToHost,
    ToViewer,
)
from castrelay.schemas.response import (
    IceCandidateRelayModel,
    NoHostModel,
    SessionAnswerRelayModel,
)
from castrelay.utils.metrics import ws_messages_dropped_total


class MessageRouter:
    """
    Relays signaling messages to exactly one recipient.

    Holds no state of its own; every call resolves its target against the
    registry as it is at that moment. A target without a live entry is
    a normal race (the peer left) and the message is dropped.

    Each relay method returns True if the message was delivered.
    """

    def __init__(self, registry: ConnectionRegistry) -> None:
        self.registry = registry

    async def request_connection(
        self, requester: Transport, profile: ProfileModel
    ) -> bool:
        """
        A Viewer asks for a session: notify the Host, or tell the Viewer
        there is none.
        """
        host = self.registry.find_host()
        if host is None:
            logger.info(f"Host not found, denying connection to '{profile.id}'")
            return await requester.emit(
                SignalEvent.NO_HOST, NoHostModel(profile=profile)
            )

        logger.info(f"Host notified of connection request by '{profile.name}'")
        return await self._deliver(
            host, SignalEvent.NOTIFY_NEW_CONNECTION, profile
        )

    async def relay_offer(self, offer: SessionOfferModel) -> bool:
        viewer = self.registry.find_by_id(
            offer.profile.id, role=UserRole.VIEWER
        )
        return await self._deliver(
            viewer,
            SignalEvent.SESSION_OFFER,
            offer,
            target_id=offer.profile.id,
        )

    async def relay_answer(self, answer: SessionAnswerModel) -> bool:
        return await self._deliver(
            self.registry.find_host(),
            SignalEvent.SESSION_ANSWER,
            SessionAnswerRelayModel(
                answer=answer.answer, profile=answer.profile
            ),
            target_id="host",
        )

    async def relay_ice_candidate(self, message: IceCandidateModel) -> bool:
        """
        Forward a candidate to the Viewer named by `viewerProfile`, or to
        the Host when it is absent.

        The relayed `profile` is always the Viewer side of the session:
        the addressed Viewer, or the sending Viewer when going to the Host.
        """
        ice_target = message.target
        if isinstance(ice_target, ToViewer):
            target = self.registry.find_by_id(
                ice_target.profile.id, role=UserRole.VIEWER
            )
            relayed_profile = ice_target.profile
            target_id = ice_target.profile.id
        elif isinstance(ice_target, ToHost):
            target = self.registry.find_host()
            relayed_profile = message.profile
            target_id = "host"
        else:
            raise TypeError(f"Unknown ice target {ice_target!r}")

        delivered = await self._deliver(
            target,
            SignalEvent.ICE_CANDIDATE,
            IceCandidateRelayModel(
                profile=relayed_profile, candidate=message.candidate
            ),
            target_id=target_id,
        )
        if delivered:
            logger.debug(
                f"Sent ice candidate from '{message.profile.id}' to '{target.profile.id}'"
            )
        return delivered

    async def _deliver(
        self,
        target: Connection | None,
        event: SignalEvent,
        payload: BaseModel | dict[str, Any],
        target_id: str = "",
    ) -> bool:
        if target is None:
            logger.info(f"Target '{target_id}' of {event} not found, dropping")
            ws_messages_dropped_total.labels(event=event.value).inc()
            return False
        return await target.transport.emit(event, payload)


message_router = MessageRouter(connection_registry)
