"""
In-memory fan-out of room updates to connected listeners.

Each listener owns a bounded asyncio mailbox of pre-encoded SSE frames. The
hub hands every frame off without waiting; a listener whose mailbox is closed
or full is dropped, and the remaining listeners are unaffected.
"""

import asyncio
import logging
import uuid
from typing import List, Optional, Set

from .. import config
from ..errors import DeliveryError
from .room_document import RoomDocument

logger = logging.getLogger(__name__)


def encode_frame(document: RoomDocument) -> str:
    """Encode a document as a single SSE data frame."""
    return f"data: {document.to_json()}\n\n"


class ListenerChannel:
    """Mailbox for one subscriber connection."""

    def __init__(self, max_pending: Optional[int] = None):
        self.channel_id = uuid.uuid4().hex[:12]
        self._queue: asyncio.Queue = asyncio.Queue(
            maxsize=max_pending if max_pending is not None else config.MAX_PENDING_FRAMES
        )
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Frames queued but not yet written to the transport."""
        return self._queue.qsize()

    def deliver(self, frame: str) -> None:
        """
        Hand a frame to this channel without blocking.

        Raises:
            DeliveryError: If the channel is closed or its mailbox is full
        """
        if self._closed:
            raise DeliveryError(f"Channel {self.channel_id} is closed")
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            raise DeliveryError(
                f"Channel {self.channel_id} has {self._queue.qsize()} undelivered frames"
            )

    async def next_frame(self, timeout: Optional[float] = None) -> Optional[str]:
        """
        Wait for the next frame.

        Args:
            timeout: Seconds to wait before giving up (None waits forever)

        Returns:
            The frame, or None on timeout or once the channel is closed
        """
        if self._closed:
            return None
        try:
            frame = await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None
        return frame

    def close(self) -> None:
        """Close the channel, discard pending frames and wake any waiting reader."""
        if self._closed:
            return
        self._closed = True

        while not self._queue.empty():
            self._queue.get_nowait()
        # None wakes a reader blocked in next_frame()
        self._queue.put_nowait(None)


class BroadcastHub:
    """Owns the active listener set and fans frames out to it."""

    def __init__(self, max_pending: Optional[int] = None):
        """
        Initialize the hub.

        Args:
            max_pending: Mailbox size per listener (default: config.MAX_PENDING_FRAMES)
        """
        self.max_pending = max_pending if max_pending is not None else config.MAX_PENDING_FRAMES
        self._channels: Set[ListenerChannel] = set()

    @property
    def active_count(self) -> int:
        return len(self._channels)

    def subscribe(self, document: RoomDocument) -> ListenerChannel:
        """
        Register a new listener and queue the current document as its first frame.

        Args:
            document: Snapshot the listener starts from

        Returns:
            The new ListenerChannel
        """
        channel = ListenerChannel(max_pending=self.max_pending)
        channel.deliver(encode_frame(document))
        self._channels.add(channel)

        logger.info(f"Listener {channel.channel_id} connected (total: {self.active_count})")
        return channel

    def unsubscribe(self, channel: ListenerChannel) -> None:
        """Remove and close a listener. Unknown or already removed channels are ignored."""
        if channel not in self._channels:
            return

        self._channels.discard(channel)
        channel.close()
        logger.info(f"Listener {channel.channel_id} disconnected (remaining: {self.active_count})")

    def publish(self, document: RoomDocument) -> int:
        """
        Deliver a document to every active listener.

        The document is encoded once and the identical frame is handed to each
        channel. Channels that cannot accept it are unsubscribed.

        Args:
            document: Document to broadcast

        Returns:
            Number of listeners the frame was handed to
        """
        frame = encode_frame(document)
        delivered = 0
        dead_channels: List[ListenerChannel] = []

        for channel in list(self._channels):
            try:
                channel.deliver(frame)
                delivered += 1
            except DeliveryError as e:
                logger.debug(f"Dropping listener: {e}")
                dead_channels.append(channel)

        for channel in dead_channels:
            self.unsubscribe(channel)

        logger.debug(f"Published update to {delivered} listeners ({len(dead_channels)} dropped)")
        return delivered

    def close_all(self) -> None:
        """Close every listener (used on shutdown)."""
        for channel in list(self._channels):
            self.unsubscribe(channel)
