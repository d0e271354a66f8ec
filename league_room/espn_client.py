"""
ESPN NFL API client.

Integrates with the public site API:
- scoreboard: current week's games and their status
- summary: per-game detail including the boxscore
"""

import logging
from typing import Dict, List, Optional

import requests

from . import config
from .errors import PerGameParseError, UpstreamFetchError

logger = logging.getLogger(__name__)


class EspnClient:
    """Client for the read-only ESPN NFL feed."""

    def __init__(
        self,
        scoreboard_url: Optional[str] = None,
        summary_url: Optional[str] = None,
        timeout: Optional[int] = None
    ):
        """
        Initialize ESPN client.

        Args:
            scoreboard_url: Scoreboard endpoint (default: config.ESPN_SCOREBOARD_URL)
            summary_url: Game summary endpoint (default: config.ESPN_SUMMARY_URL)
            timeout: Request timeout in seconds (default: config.ESPN_REQUEST_TIMEOUT)
        """
        self.scoreboard_url = scoreboard_url or config.ESPN_SCOREBOARD_URL
        self.summary_url = summary_url or config.ESPN_SUMMARY_URL
        self.timeout = timeout or config.ESPN_REQUEST_TIMEOUT

        # Session for connection pooling
        self.session = requests.Session()

    def fetch_scoreboard(self) -> List[Dict]:
        """
        Fetch the current scoreboard.

        Returns:
            List of raw event dicts

        Raises:
            UpstreamFetchError: If the request fails or the response has no events list
        """
        try:
            data = self._make_request(self.scoreboard_url)
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Failed to fetch scoreboard: {e}")
            raise UpstreamFetchError(f"Failed to fetch scoreboard: {e}") from e

        events = data.get('events') if isinstance(data, dict) else None
        if not isinstance(events, list):
            logger.error("Scoreboard response has no events list")
            raise UpstreamFetchError("Malformed scoreboard response: missing events")

        logger.debug(f"Fetched scoreboard: {len(events)} games")
        return events

    def fetch_boxscore(self, event_id: str) -> Dict:
        """
        Fetch the summary (including boxscore) for one game.

        Args:
            event_id: ESPN event identifier

        Returns:
            Raw summary JSON

        Raises:
            PerGameParseError: If the request fails or the body is not a JSON object
        """
        try:
            data = self._make_request(self.summary_url, params={'event': event_id})
        except (requests.RequestException, ValueError) as e:
            raise PerGameParseError(event_id, f"fetch failed: {e}") from e

        if not isinstance(data, dict):
            raise PerGameParseError(event_id, "summary is not a JSON object")

        return data

    def _make_request(self, endpoint: str, params: Optional[Dict] = None) -> Dict:
        """
        GET an endpoint and decode its JSON body. No retries.

        Raises:
            requests.RequestException: On connection errors or non-2xx status
            ValueError: If the body is not valid JSON
        """
        logger.debug(f"GET {endpoint} {params or ''}")
        response = self.session.get(endpoint, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
