"""
WebSocket handlers for endpoint registration.

A transport becomes part of the registry only through these handlers:
the Host slot goes through the arbiter, Viewers are upserted directly.
"""

from castrelay.api.ws.constants import SignalEvent
from castrelay.connection_registry import Connection, connection_registry
from castrelay.logging import logger, set_log_context
from castrelay.managers.host_arbiter import HostClaimOutcome, host_arbiter
from castrelay.protocols import Transport
from castrelay.routing import event_router
from castrelay.schemas.profile import ProfileModel, UserRole


@event_router.register(SignalEvent.REGISTER_HOST, payload=ProfileModel)
async def register_host_handler(
    transport: Transport, profile: ProfileModel
) -> HostClaimOutcome:
    """
    Claim the Host slot for `transport`.

    Request Data: Profile with role "Host".

    Replies `registered` when the slot was free, nothing on reconnect and,
    after the grace period, `registered` or `host-rejected` when another
    Host held the slot.
    """
    logger.info(f"Create host request for '{profile.name}' ({profile.id})")
    set_log_context(profile_id=profile.id, role=profile.role.value)
    return await host_arbiter.claim(profile, transport)


@event_router.register(SignalEvent.REGISTER_VIEWER, payload=ProfileModel)
async def register_viewer_handler(
    transport: Transport, profile: ProfileModel
) -> bool:
    """
    Register `transport` as the Viewer `profile.id`.

    An existing entry with the same id is a reconnect: its old transport
    is closed and replaced, and no reply is sent. Otherwise the Viewer is
    added and `registered` is sent back.

    Returns:
        True if a new entry was created.
    """
    if profile.role != UserRole.VIEWER:
        logger.warning(
            f"Ignoring viewer registration for '{profile.id}' with role {profile.role}"
        )
        return False

    logger.info(f"Create viewer request for '{profile.name}' ({profile.id})")
    set_log_context(profile_id=profile.id, role=profile.role.value)

    async with connection_registry.lock:
        reconnect = (
            connection_registry.find_by_id(profile.id, role=UserRole.VIEWER)
            is not None
        )
        await connection_registry.upsert_locked(
            Connection(profile=profile, transport=transport)
        )

    if reconnect:
        logger.info(f"Viewer '{profile.id}' reconnected")
        return False

    await transport.emit(SignalEvent.REGISTERED)
    return True
