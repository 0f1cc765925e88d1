"""
WebSocket handlers for session negotiation.

Payloads are relayed unchanged to exactly one recipient; see
`MessageRouter` for how each recipient is resolved.
"""

from castrelay.api.ws.constants import SignalEvent
from castrelay.managers.message_router import message_router
from castrelay.protocols import Transport
from castrelay.routing import event_router
from castrelay.schemas.profile import ProfileModel
from castrelay.schemas.request import (
    IceCandidateModel,
    SessionAnswerModel,
    SessionOfferModel,
)


@event_router.register(SignalEvent.REQUEST_CONNECTION, payload=ProfileModel)
async def request_connection_handler(
    transport: Transport, profile: ProfileModel
) -> bool:
    return await message_router.request_connection(transport, profile)


@event_router.register(SignalEvent.SESSION_OFFER, payload=SessionOfferModel)
async def session_offer_handler(
    transport: Transport, offer: SessionOfferModel
) -> bool:
    return await message_router.relay_offer(offer)


@event_router.register(SignalEvent.SESSION_ANSWER, payload=SessionAnswerModel)
async def session_answer_handler(
    transport: Transport, answer: SessionAnswerModel
) -> bool:
    return await message_router.relay_answer(answer)


@event_router.register(SignalEvent.ICE_CANDIDATE, payload=IceCandidateModel)
async def ice_candidate_handler(
    transport: Transport, candidate: IceCandidateModel
) -> bool:
    return await message_router.relay_ice_candidate(candidate)
