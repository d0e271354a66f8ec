"""
Configuration constants for the league room service.

Values that depend on the deployment can be overridden with environment
variables prefixed with LEAGUE_ROOM_.
"""

import os

# ===== ROOM STATE CONFIGURATION =====

# Directory holding the persisted room document
DATA_DIR = os.getenv('LEAGUE_ROOM_DATA_DIR', 'data/room')
STATE_FILENAME = 'league_room.json'

# ===== STREAMING CONFIGURATION =====

# Seconds of idle time before a keep-alive frame is written to a listener
HEARTBEAT_INTERVAL_SECONDS = float(os.getenv('LEAGUE_ROOM_HEARTBEAT_SECONDS', '30'))

# Frames a listener may have queued before it is considered dead and dropped
MAX_PENDING_FRAMES = int(os.getenv('LEAGUE_ROOM_MAX_PENDING_FRAMES', '100'))

KEEP_ALIVE_FRAME = ': keep-alive\n\n'

# ===== API SERVER CONFIGURATION =====

API_HOST = os.getenv('LEAGUE_ROOM_HOST', '127.0.0.1')
API_PORT = int(os.getenv('LEAGUE_ROOM_PORT', '8000'))

SERVICE_NAME = 'League Room API'
SERVICE_VERSION = '1.0.0'

# Front-end build served at "/" when present
STATIC_DIR = os.getenv('LEAGUE_ROOM_STATIC_DIR', 'public')

# ===== ESPN FEED CONFIGURATION =====

ESPN_SCOREBOARD_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl/scoreboard"
ESPN_SUMMARY_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl/summary"
ESPN_REQUEST_TIMEOUT = 10  # seconds

# NFL teams whose games are scored
DEFAULT_TRACKED_TEAMS = 'KC,BUF,PHI,SF,DAL,DET,BAL,CIN'
TRACKED_TEAMS = {
    code.strip().upper()
    for code in os.getenv('LEAGUE_ROOM_TRACKED_TEAMS', DEFAULT_TRACKED_TEAMS).split(',')
    if code.strip()
}

# ESPN game states worth fetching a boxscore for
SCORED_GAME_STATES = {'in', 'post'}
FINAL_GAME_STATE = 'post'

# Positional layout of ESPN boxscore stat lines, per category.
# "C/ATT" style cells are split into two stats.
STAT_LINE_LAYOUT = {
    'passing': {
        'passing_completions': (0, 0),   # C/ATT -> completions
        'passing_attempts': (0, 1),      # C/ATT -> attempts
        'passing_yards': 1,
        'passing_tds': 3,
        'interceptions': 4,
    },
    'rushing': {
        'rushing_attempts': 0,
        'rushing_yards': 1,
        'rushing_tds': 3,
    },
    'receiving': {
        'receptions': 0,
        'receiving_yards': 1,
        'receiving_tds': 3,
        'targets': 5,
    },
    'fumbles': {
        'fumbles': 0,
        'fumbles_lost': 1,
    },
}

# Every stat a player record carries, in display order
STAT_KEYS = [
    'passing_completions', 'passing_attempts', 'passing_yards', 'passing_tds',
    'interceptions', 'rushing_attempts', 'rushing_yards', 'rushing_tds',
    'receptions', 'receiving_yards', 'receiving_tds', 'targets',
    'fumbles', 'fumbles_lost',
]

# ===== FANTASY SCORING =====

# Points per unit of each stat (stats not listed score zero)
FANTASY_SCORING = {
    'passing_yards': 0.04,
    'passing_tds': 4,
    'interceptions': -1,
    'rushing_yards': 0.1,
    'rushing_tds': 6,
    'receptions': 0.5,
    'receiving_yards': 0.1,
    'receiving_tds': 6,
    'fumbles_lost': -2,
}

# stat -> (threshold, bonus points) awarded once the threshold is reached
YARDAGE_BONUSES = {
    'passing_yards': (300, 3),
    'rushing_yards': (100, 3),
    'receiving_yards': (100, 3),
}

POINTS_DECIMALS = 1

# Logging
LOG_LEVEL = os.getenv('LEAGUE_ROOM_LOG_LEVEL', 'INFO')
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
