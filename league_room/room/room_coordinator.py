"""
Coordinates the shared room: persisted state plus live listeners.

The RoomCoordinator is responsible for:
- Gating every operation behind a one-time initial load of the store
- Serializing writes so that save + broadcast appear atomic to observers
- Serving reads from the last committed document
- Opening and closing listener streams
"""

import asyncio
import logging
from typing import Any, Optional

from ..errors import ValidationError
from .broadcast_hub import BroadcastHub, ListenerChannel
from .room_document import RoomDocument
from .state_store import INVALID_TEAMS_MESSAGE, RoomStateStore

logger = logging.getLogger(__name__)


class RoomCoordinator:
    """Single-writer, multi-reader owner of the shared room."""

    def __init__(self, store: RoomStateStore, hub: Optional[BroadcastHub] = None):
        """
        Initialize the coordinator.

        Args:
            store: Persistent store for the room document
            hub: Broadcast hub for listeners (a new one is created if omitted)
        """
        self.store = store
        self.hub = hub or BroadcastHub()

        self._write_lock = asyncio.Lock()
        self._ready: Optional[asyncio.Future] = None
        self._committed: Optional[RoomDocument] = None

    async def start(self) -> None:
        """Perform the initial load. Safe to call more than once."""
        await self._wait_ready()

    async def _wait_ready(self) -> None:
        if self._ready is None:
            self._ready = asyncio.ensure_future(self._initial_load())
        try:
            await self._ready
        except Exception:
            # Failed load is not cached; the next caller retries it
            self._ready = None
            raise

    async def _initial_load(self) -> None:
        document = await asyncio.to_thread(self.store.load)
        self._committed = document
        logger.info(
            f"Room ready: {len(document.teams)} teams, updated {document.updated_at}"
        )

    async def get(self) -> RoomDocument:
        """
        Return the last committed document.

        Returns:
            Independent copy of the current RoomDocument
        """
        await self._wait_ready()
        return self._committed.copy()

    async def update(self, teams: Any) -> RoomDocument:
        """
        Replace the team list, persist it and broadcast it.

        Updates are processed one at a time in arrival order.

        Args:
            teams: New ordered team list

        Returns:
            The saved RoomDocument

        Raises:
            ValidationError: If teams is not a list (no state change)
        """
        if not isinstance(teams, list):
            raise ValidationError(INVALID_TEAMS_MESSAGE)

        await self._wait_ready()

        async with self._write_lock:
            document = await asyncio.to_thread(self.store.save, teams)

            # No await between commit and publish: readers and new listeners
            # never see a saved document whose broadcast is not yet scheduled.
            self._committed = document
            delivered = self.hub.publish(document)

        logger.info(
            f"Accepted update: {len(document.teams)} teams at {document.updated_at}, "
            f"sent to {delivered} listeners"
        )
        return document.copy()

    async def open_stream(self) -> ListenerChannel:
        """
        Subscribe a new listener starting from the committed document.

        Returns:
            ListenerChannel whose first frame is the current document
        """
        await self._wait_ready()
        return self.hub.subscribe(self._committed)

    def close_stream(self, channel: ListenerChannel) -> None:
        """Unsubscribe a listener. Idempotent."""
        self.hub.unsubscribe(channel)

    @property
    def listener_count(self) -> int:
        return self.hub.active_count

    def close(self) -> None:
        """Close all listeners. State is already persisted on every write."""
        listeners = self.hub.active_count
        self.hub.close_all()
        logger.info(f"Room closed ({listeners} listeners disconnected)")
