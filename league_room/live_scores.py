"""
Live fantasy scores for the tracked NFL teams.

Pipeline:
1. Fetch the scoreboard (failure fails the whole request)
2. Keep games involving a tracked team
3. Fetch and parse the boxscore of every in-progress or final game
   (a failing game is logged and left out)
4. Merge player stat lines and score them
"""

import logging
from typing import Dict, Iterable, List, Optional

from . import config
from .boxscore_parser import parse_boxscore
from .errors import PerGameParseError
from .espn_client import EspnClient
from .scoring import StatRecord, score_stat_records

logger = logging.getLogger(__name__)


def _game_state(event: Dict) -> str:
    return ((event.get('status') or {}).get('type') or {}).get('state', '')


def _game_status_text(event: Dict) -> str:
    status_type = (event.get('status') or {}).get('type') or {}
    return status_type.get('shortDetail') or status_type.get('detail') or status_type.get('description', '')


def _event_teams(event: Dict) -> List[str]:
    """Team abbreviations playing in a scoreboard event."""
    teams = []
    for competition in event.get('competitions') or []:
        for competitor in competition.get('competitors') or []:
            abbreviation = (competitor.get('team') or {}).get('abbreviation')
            if abbreviation:
                teams.append(abbreviation.upper())
    return teams


def filter_tracked_games(events: List[Dict], tracked_teams: Iterable[str]) -> List[Dict]:
    """
    Keep scoreboard events that involve at least one tracked team.

    Args:
        events: Raw scoreboard events
        tracked_teams: Team abbreviations of interest

    Returns:
        Matching events in scoreboard order
    """
    tracked = {code.upper() for code in tracked_teams}
    return [event for event in events if tracked.intersection(_event_teams(event))]


def build_live_scores(
    client: EspnClient,
    tracked_teams: Optional[Iterable[str]] = None
) -> Dict:
    """
    Build the live scores payload.

    Args:
        client: ESPN client
        tracked_teams: Team abbreviations to score (default: config.TRACKED_TEAMS)

    Returns:
        Dict with success, players, gamesCount, allGamesFinal and games

    Raises:
        UpstreamFetchError: If the scoreboard cannot be fetched
    """
    tracked = set(tracked_teams if tracked_teams is not None else config.TRACKED_TEAMS)

    events = client.fetch_scoreboard()
    games = filter_tracked_games(events, tracked)

    records: Dict[str, StatRecord] = {}
    for event in games:
        if _game_state(event) not in config.SCORED_GAME_STATES:
            continue

        event_id = str(event.get('id', ''))
        try:
            summary = client.fetch_boxscore(event_id)
            game_records = parse_boxscore(summary, event_id=event_id, tracked_teams=tracked)
        except PerGameParseError as e:
            logger.warning(f"Skipping game {event.get('shortName', event_id)}: {e}")
            continue
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            logger.warning(f"Skipping game {event.get('shortName', event_id)}: malformed boxscore ({e})")
            continue

        for record in game_records:
            existing = records.setdefault(record.key, StatRecord(name=record.name, team=record.team))
            existing.add(record.stats)

    scored = score_stat_records(list(records.values()))

    players = {}
    for row in scored.to_dict('records'):
        players[row['key']] = {
            'name': row['name'],
            'team': row['team'],
            'stats': {stat: _to_python_number(row[stat]) for stat in config.STAT_KEYS},
            'points': float(row['points'])
        }

    all_final = bool(games) and all(_game_state(event) == config.FINAL_GAME_STATE for event in games)

    logger.info(
        f"Live scores: {len(players)} players from {len(games)} tracked games "
        f"(all final: {all_final})"
    )

    return {
        'success': True,
        'players': players,
        'gamesCount': len(games),
        'allGamesFinal': all_final,
        'games': [
            {'name': event.get('name') or event.get('shortName', ''), 'status': _game_status_text(event)}
            for event in games
        ]
    }


def _to_python_number(value):
    """Convert numpy scalars to plain int/float for JSON."""
    if hasattr(value, 'item'):
        value = value.item()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
