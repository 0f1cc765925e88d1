import asyncio
from enum import StrEnum

from castrelay.api.ws.constants import SignalEvent
from castrelay.connection_registry import (
    Connection,
    ConnectionRegistry,
    connection_registry,
)
from castrelay.logging import logger
from castrelay.protocols import Transport
from castrelay.schemas.profile import ProfileModel, UserRole
from castrelay.schemas.response import HostRejectedModel
from castrelay.settings import app_settings
from castrelay.utils.metrics import host_claims_total


class HostClaimOutcome(StrEnum):
    """
    Result of a Host registration request.

    PENDING is returned when the decision was deferred; the eventual
    DENIED / ACCEPTED / ABANDONED is the result of the pending task.
    """

    REGISTERED = "registered"
    RECONNECTED = "reconnected"
    PENDING = "pending"
    DENIED = "denied"
    ACCEPTED = "accepted"
    ABANDONED = "abandoned"
    IGNORED = "ignored"


class HostArbiter:
    """
    Decides who holds the single Host slot.

    A claim is resolved immediately when the slot is free or when the
    claimant already holds it (reconnect). A claim against a different
    Host is deferred for `grace_period` seconds, the time the transport
    keep-alive needs to notice a dead connection, and then re-checked
    against whatever Host the registry holds at that moment.
    """

    def __init__(
        self, registry: ConnectionRegistry, grace_period: float
    ) -> None:
        self.registry = registry
        self.grace_period = grace_period
        self.pending: dict[str, asyncio.Task[HostClaimOutcome]] = {}

    async def claim(
        self, profile: ProfileModel, transport: Transport
    ) -> HostClaimOutcome:
        """
        Handle a register-host request.

        Args:
            profile: Profile presented by the claimant, role must be Host.
            transport: Transport the request arrived on.

        Returns:
            The immediate outcome; PENDING if a deferred check was scheduled.
        """
        if profile.role != UserRole.HOST:
            logger.warning(
                f"Ignoring host registration for '{profile.id}' with role {profile.role}"
            )
            return self._record(HostClaimOutcome.IGNORED)

        if transport.transport_id in self.pending:
            logger.debug(
                f"Host claim from transport {transport.transport_id} is already pending"
            )
            return self._record(HostClaimOutcome.IGNORED)

        connection = Connection(profile=profile, transport=transport)

        async with self.registry.lock:
            host = self.registry.find_host()

            if host is None:
                await self.registry.upsert_locked(connection)
                outcome = HostClaimOutcome.REGISTERED
            elif host.profile.id == profile.id:
                await self.registry.upsert_locked(connection)
                outcome = HostClaimOutcome.RECONNECTED
            else:
                outcome = HostClaimOutcome.PENDING

        if outcome == HostClaimOutcome.REGISTERED:
            logger.info(f"No host, '{profile.name}' ({profile.id}) is now host")
            await transport.emit(SignalEvent.REGISTERED)
        elif outcome == HostClaimOutcome.RECONNECTED:
            logger.info(f"Host '{profile.id}' reconnected")
        else:
            logger.info(
                f"Host '{host.profile.id}' already exists, checking it in "
                f"{self.grace_period}s before answering '{profile.id}'"
            )
            self.pending[transport.transport_id] = asyncio.create_task(
                self._decide(connection)
            )

        return self._record(outcome)

    async def _decide(self, connection: Connection) -> HostClaimOutcome:
        """
        Settle a deferred claim once the grace period is over.

        The current Host is re-read under the registry lock so that a
        disconnect or reconnect during the wait is taken into account.
        """
        claimant = connection.transport
        try:
            await asyncio.sleep(self.grace_period)

            host_profile: ProfileModel | None = None
            async with self.registry.lock:
                host = self.registry.find_host()
                if host is not None and host.transport.connected:
                    host_profile = host.profile
                    outcome = HostClaimOutcome.DENIED
                elif not claimant.connected:
                    outcome = HostClaimOutcome.ABANDONED
                else:
                    # Either the slot emptied during the wait or the Host is
                    # stale; the stale case is normally pre-empted by
                    # disconnect handling removing the entry.
                    await self.registry.upsert_locked(connection)
                    outcome = HostClaimOutcome.ACCEPTED

            if outcome == HostClaimOutcome.DENIED:
                logger.info(
                    f"Host '{host_profile.id}' is active, denying '{connection.profile.id}'"
                )
                await claimant.emit(
                    SignalEvent.HOST_REJECTED,
                    HostRejectedModel(
                        profile=connection.profile, host_profile=host_profile
                    ),
                )
            elif outcome == HostClaimOutcome.ACCEPTED:
                logger.info(f"'{connection.profile.id}' took over as host")
                await claimant.emit(SignalEvent.REGISTERED)
            else:
                logger.info(
                    f"Claimant '{connection.profile.id}' left before the host check"
                )

            return self._record(outcome)
        finally:
            self.pending.pop(claimant.transport_id, None)

    async def shutdown(self) -> None:
        """Cancel all deferred claims and wait for them to finish."""
        tasks = list(self.pending.values())
        if not tasks:
            return

        logger.info(f"Cancelling {len(tasks)} pending host claims")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self.pending.clear()

    @staticmethod
    def _record(outcome: HostClaimOutcome) -> HostClaimOutcome:
        host_claims_total.labels(outcome=outcome.value).inc()
        return outcome


host_arbiter = HostArbiter(
    connection_registry, grace_period=app_settings.host_grace_period
)
