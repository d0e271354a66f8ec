"""
Fantasy point scoring for NFL player stat lines.

Applies the linear rule table in config.FANTASY_SCORING plus the yardage
threshold bonuses in config.YARDAGE_BONUSES, then rounds to one decimal.
"""

from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np
import pandas as pd

from . import config


@dataclass
class StatRecord:
    """Raw counting stats for one player, keyed by (name, team)."""

    name: str                                   # ESPN displayName
    team: str                                   # Team abbreviation (e.g. 'KC')
    stats: Dict[str, float] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return f"{self.name}|{self.team}"

    def add(self, stats: Dict[str, float]) -> None:
        """Accumulate stats from another line (another category or game)."""
        for stat, value in stats.items():
            self.stats[stat] = self.stats.get(stat, 0) + value

    def full_stats(self) -> Dict[str, float]:
        """Stats with every known key present (missing ones as zero)."""
        return {stat: self.stats.get(stat, 0) for stat in config.STAT_KEYS}


def calculate_fantasy_points(stats: Dict[str, float]) -> float:
    """
    Score a single stat line.

    Args:
        stats: Mapping of stat key to value; missing stats count as zero

    Returns:
        Fantasy points rounded to one decimal

    Example:
        320 passing yards, 2 passing TDs, 1 interception
        -> 12.8 + 8 - 1 + 3 (300-yard bonus) = 22.8
    """
    points = 0.0
    for stat, multiplier in config.FANTASY_SCORING.items():
        points += stats.get(stat, 0) * multiplier

    for stat, (threshold, bonus) in config.YARDAGE_BONUSES.items():
        if stats.get(stat, 0) >= threshold:
            points += bonus

    return round(points, config.POINTS_DECIMALS)


def score_stat_records(records: List[StatRecord]) -> pd.DataFrame:
    """
    Score many players at once.

    Args:
        records: Player stat records

    Returns:
        DataFrame with columns name, team, key, every stat in config.STAT_KEYS,
        and points (rounded to one decimal)
    """
    columns = ['name', 'team', 'key'] + config.STAT_KEYS + ['points']
    if not records:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame([
        {'name': r.name, 'team': r.team, 'key': r.key, **r.full_stats()}
        for r in records
    ])
    df[config.STAT_KEYS] = df[config.STAT_KEYS].fillna(0)

    points = np.zeros(len(df))
    for stat, multiplier in config.FANTASY_SCORING.items():
        points += df[stat].to_numpy(dtype=float) * multiplier

    for stat, (threshold, bonus) in config.YARDAGE_BONUSES.items():
        points += np.where(df[stat].to_numpy(dtype=float) >= threshold, bonus, 0)

    df['points'] = np.round(points, config.POINTS_DECIMALS)
    return df[columns]
