"""
Exception types shared across the league room service.
"""


class LeagueRoomError(Exception):
    """Base class for league room errors."""


class ValidationError(LeagueRoomError):
    """Client input was malformed (body not JSON, or teams not a list)."""


class UpstreamFetchError(LeagueRoomError):
    """The ESPN feed was unreachable or returned malformed top-level data."""


class PerGameParseError(LeagueRoomError):
    """A single game's boxscore could not be fetched or parsed."""

    def __init__(self, event_id: str, message: str):
        super().__init__(f"Game {event_id}: {message}")
        self.event_id = event_id


class DeliveryError(LeagueRoomError):
    """A frame could not be handed to a listener channel."""
