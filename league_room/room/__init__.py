"""
Shared room subsystem.

This package owns the single persisted team document, serializes writes to
it, and fans every accepted write out to connected Server-Sent Events
listeners.
"""

from .room_document import RoomDocument
from .state_store import RoomStateStore
from .broadcast_hub import BroadcastHub, ListenerChannel
from .room_coordinator import RoomCoordinator

__all__ = [
    'RoomDocument',
    'RoomStateStore',
    'BroadcastHub',
    'ListenerChannel',
    'RoomCoordinator',
]
