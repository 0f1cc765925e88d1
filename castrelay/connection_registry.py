"""Registry of live signaling connections keyed by profile identity."""

import asyncio
from dataclasses import dataclass

from castrelay.logging import logger
from castrelay.protocols import Transport
from castrelay.schemas.profile import ProfileModel, UserRole
from castrelay.types import ProfileId, TransportId
from castrelay.utils.metrics import registry_connections


@dataclass
class Connection:
    """
    One registry entry.

    The entry owns `transport`; whoever replaces it must close the old one.
    """

    profile: ProfileModel
    transport: Transport


class ConnectionRegistry:
    """
    Live connections keyed by profile identity.

    Invariants:
    - at most one entry has role Host;
    - Viewer profile ids are unique;
    - no two entries share a transport.

    Lookups are plain methods: on a single event loop they cannot
    interleave with a mutation. Mutations run under `lock`. A caller that
    needs a check and a mutation to be one step (host arbitration) holds
    `lock` itself and uses `upsert_locked`.
    """

    def __init__(self) -> None:
        self._connections: list[Connection] = []
        self.lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._connections)

    def find_host(self) -> Connection | None:
        for connection in self._connections:
            if connection.profile.role == UserRole.HOST:
                return connection
        return None

    def find_by_id(
        self, profile_id: ProfileId, role: UserRole | None = None
    ) -> Connection | None:
        """
        Get the entry whose profile id matches.

        Args:
            profile_id: Profile id to look up.
            role: Restrict the match to entries with this role.

        Returns:
            The matching entry if found, None otherwise.
        """
        for connection in self._connections:
            if connection.profile.id != profile_id:
                continue
            if role is None or connection.profile.role == role:
                return connection
        return None

    def find_by_transport(
        self, transport_id: TransportId
    ) -> Connection | None:
        for connection in self._connections:
            if connection.transport.transport_id == transport_id:
                return connection
        return None

    def count(self, role: UserRole) -> int:
        return sum(1 for c in self._connections if c.profile.role == role)

    def snapshot(self) -> list[Connection]:
        """Copy of the entries for read-only reporting."""
        return [
            Connection(profile=c.profile, transport=c.transport)
            for c in self._connections
        ]

    async def upsert(self, connection: Connection) -> Connection:
        """
        Insert `connection`, or replace the entry it matches.

        See `upsert_locked` for matching rules.

        Returns:
            The entry now held by the registry.
        """
        async with self.lock:
            return await self.upsert_locked(connection)

    async def upsert_locked(self, connection: Connection) -> Connection:
        """
        `upsert` for callers already holding `lock`.

        A Host matches the single Host slot whatever its id; a Viewer
        matches the Viewer entry with the same id. On a match the entry's
        profile and transport are replaced in place and the previous
        transport is closed. Any other entry bound to the same transport
        is dropped so a transport never backs two entries.
        """
        new_transport = connection.transport
        if connection.profile.role == UserRole.HOST:
            existing = self.find_host()
        else:
            existing = self.find_by_id(
                connection.profile.id, role=UserRole.VIEWER
            )

        self._connections = [
            c
            for c in self._connections
            if c is existing
            or c.transport.transport_id != new_transport.transport_id
        ]

        if existing is None:
            self._connections.append(connection)
            self._update_metrics()
            logger.debug(
                f"Registered {connection.profile.role} '{connection.profile.id}' "
                f"on transport {new_transport.transport_id}"
            )
            return connection

        old_transport = existing.transport
        existing.profile = connection.profile
        existing.transport = new_transport
        self._update_metrics()
        logger.debug(
            f"Replaced transport of {existing.profile.role} "
            f"'{existing.profile.id}': {old_transport.transport_id} -> "
            f"{new_transport.transport_id}"
        )

        if old_transport.transport_id != new_transport.transport_id:
            await old_transport.close()

        return existing

    async def remove_by_transport(
        self, transport_id: TransportId
    ) -> Connection | None:
        """
        Remove the entry bound to `transport_id`.

        Does not close the transport; disconnect handling does that.

        Returns:
            The removed entry, or None if no entry used that transport.
        """
        async with self.lock:
            connection = self.find_by_transport(transport_id)
            if connection is None:
                return None

            self._connections.remove(connection)
            self._update_metrics()
            logger.debug(
                f"Removed {connection.profile.role} '{connection.profile.id}' "
                f"(transport {transport_id})"
            )
            return connection

    def _update_metrics(self) -> None:
        for role in UserRole:
            registry_connections.labels(role=role.value).set(self.count(role))


connection_registry = ConnectionRegistry()
