"""
The shared room document: an ordered team list plus its last-write timestamp.
"""

import copy
import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision and a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp written by format_timestamp (or any ISO-8601 string)."""
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def next_timestamp(previous: Optional[str] = None) -> str:
    """
    Stamp for a new write, strictly later than the previous stamp.

    Args:
        previous: The last stamp handed out, if any

    Returns:
        ISO-8601 string for now, or previous + 1ms when the clock has not advanced
    """
    now = datetime.now(timezone.utc)
    if previous:
        try:
            last = parse_timestamp(previous)
        except ValueError:
            last = None
        if last is not None and now <= last:
            now = last + timedelta(milliseconds=1)
    return format_timestamp(now)


@dataclass(frozen=True)
class RoomDocument:
    """Immutable snapshot of the room state."""

    teams: List[Any] = field(default_factory=list)   # opaque team JSON, caller order
    updated_at: str = ''                              # ISO-8601, set server-side

    @classmethod
    def default(cls) -> 'RoomDocument':
        """Document served before anything has been persisted."""
        return cls(teams=[], updated_at=next_timestamp())

    def copy(self) -> 'RoomDocument':
        """Independent copy; nested team objects are not shared."""
        return RoomDocument(teams=copy.deepcopy(self.teams), updated_at=self.updated_at)

    def to_dict(self) -> dict:
        """Convert to the wire/storage shape."""
        return {
            'teams': copy.deepcopy(self.teams),
            'updatedAt': self.updated_at
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'RoomDocument':
        """Create RoomDocument from its stored shape."""
        teams = data.get('teams')
        if not isinstance(teams, list):
            teams = []
        updated_at = data.get('updatedAt')
        if not isinstance(updated_at, str) or not updated_at:
            updated_at = next_timestamp()
        return cls(teams=copy.deepcopy(teams), updated_at=updated_at)

    def to_json(self) -> str:
        """Convert to a compact JSON string."""
        return json.dumps(self.to_dict(), separators=(',', ':'))
