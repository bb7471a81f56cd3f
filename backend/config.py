import json
import os


def _load_event_file(path):
    """Read the organisers' JSON event file, if one is configured."""
    if not path:
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


_event = _load_event_file(os.environ.get('FLAGBOT_CONFIG'))


def _keys(raw):
    if isinstance(raw, (list, tuple)):
        return tuple(raw)
    return tuple(key.strip() for key in str(raw).split(',') if key.strip())


def _setting(key, default=None):
    # JSON event file wins over the environment
    if key.lower() in _event:
        return _event[key.lower()]
    return os.environ.get(key, default)


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = _setting('DATABASE_URL') or 'sqlite:///flagbot.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Slack credentials
    SLACK_API_TOKEN = _setting('SLACK_API_TOKEN', '')
    SLACK_SIGNING_SECRET = _setting('SLACK_SIGNING_SECRET', '')
    BOT_NAME = _setting('BOT_NAME', 'flagbot')
    # Announcements go here; validating here is refused
    PUBLIC_CHANNEL = _setting('PUBLIC_CHANNEL', 'ctf')
    # Skips the name lookup at startup when set
    PUBLIC_CHANNEL_ID = _setting('PUBLIC_CHANNEL_ID', '')
    PUZZLE_LINK = _setting('PUZZLE_LINK', '')
    # Flag secrets for the default level table
    FLAG1 = _setting('FLAG1', '')
    FLAG2 = _setting('FLAG2', '')
    FLAG3 = _setting('FLAG3', '')
    # Optional full level table (list of dicts), see flagbot.levels
    LEVELS = _event.get('levels')
    # Highest level currently unlocked
    OPEN_LEVEL = int(_setting('OPEN_LEVEL', '2'))
    # Teams at or above this id are organiser test teams
    SCOREBOARD_TEAM_ID_LIMIT = int(_setting('SCOREBOARD_TEAM_ID_LIMIT', '666'))
    # Leaderboard tiebreak order after flag count
    SCOREBOARD_TIEBREAK = _keys(_setting('SCOREBOARD_TIEBREAK', 'tries,time'))
