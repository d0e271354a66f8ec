"""
Parse ESPN game summaries into per-player stat records.

ESPN boxscores list, per team, one block per stat category ("passing",
"rushing", "receiving", "fumbles"). Each athlete in a block carries a list of
stat strings whose meaning is positional (see config.STAT_LINE_LAYOUT).
"""

import logging
import math
from typing import Dict, Iterable, List, Optional

from . import config
from .errors import PerGameParseError
from .scoring import StatRecord

logger = logging.getLogger(__name__)


def parse_stat_value(cell) -> float:
    """
    Convert one ESPN stat cell to a number.

    Returns:
        The numeric value, or 0 for missing/malformed cells ('--', '', None)
    """
    if cell is None:
        return 0
    if isinstance(cell, (int, float)):
        return cell
    try:
        value = float(str(cell).replace(',', '').strip())
    except ValueError:
        return 0
    if not math.isfinite(value):
        return 0
    return int(value) if value.is_integer() else value


def parse_stat_line(category: str, stat_line: List) -> Dict[str, float]:
    """
    Read a category's stat line positionally.

    Args:
        category: ESPN category name (e.g. 'passing')
        stat_line: List of stat strings for one athlete

    Returns:
        Dict of stat key -> value; cells that are absent or malformed are zero
    """
    layout = config.STAT_LINE_LAYOUT.get(category, {})
    stats = {}

    for stat, position in layout.items():
        if isinstance(position, tuple):
            index, part = position
            cell = stat_line[index] if index < len(stat_line) else None
            pieces = str(cell).split('/') if cell is not None else []
            stats[stat] = parse_stat_value(pieces[part]) if part < len(pieces) else 0
        else:
            cell = stat_line[position] if position < len(stat_line) else None
            stats[stat] = parse_stat_value(cell)

    return stats


def parse_boxscore(
    summary: Dict,
    event_id: str = '',
    tracked_teams: Optional[Iterable[str]] = None
) -> List[StatRecord]:
    """
    Extract player stat records from an ESPN game summary.

    Args:
        summary: Raw JSON from the ESPN summary endpoint
        event_id: Game identifier (for error messages)
        tracked_teams: If given, only players on these teams are returned

    Returns:
        One StatRecord per (name, team), categories merged

    Raises:
        PerGameParseError: If the summary has no boxscore player section
    """
    boxscore = summary.get('boxscore') if isinstance(summary, dict) else None
    team_blocks = boxscore.get('players') if isinstance(boxscore, dict) else None
    if not isinstance(team_blocks, list):
        raise PerGameParseError(event_id, "summary has no boxscore players")

    tracked = {code.upper() for code in tracked_teams} if tracked_teams is not None else None
    records: Dict[str, StatRecord] = {}

    for team_block in team_blocks:
        if not isinstance(team_block, dict):
            continue
        team_info = team_block.get('team')
        team = team_info.get('abbreviation') if isinstance(team_info, dict) else None
        if not isinstance(team, str) or not team:
            logger.warning(f"Game {event_id}: skipping team block without abbreviation")
            continue
        if tracked is not None and team.upper() not in tracked:
            continue

        for category_block in team_block.get('statistics') or []:
            if not isinstance(category_block, dict):
                continue
            category = category_block.get('name', '')
            if category not in config.STAT_LINE_LAYOUT:
                continue

            for athlete_entry in category_block.get('athletes') or []:
                try:
                    name = athlete_entry['athlete']['displayName']
                    stat_line = athlete_entry.get('stats') or []
                    stats = parse_stat_line(category, stat_line)
                except (KeyError, TypeError, AttributeError) as e:
                    logger.warning(f"Game {event_id}: skipping malformed {category} entry: {e}")
                    continue
                if not isinstance(name, str) or not name.strip():
                    logger.warning(f"Game {event_id}: skipping {category} entry without a player name")
                    continue

                record = StatRecord(name=name, team=team)
                record = records.setdefault(record.key, record)
                record.add(stats)

    logger.debug(f"Game {event_id}: parsed {len(records)} players")
    return list(records.values())
