"""Game domain services: event log, team registry, rules and scoring.

This package holds the game mechanics. Command handlers and HTTP routes
import from here, keeping chat transport concerns separated from the
rules themselves.
"""

from .eventlog import EventLog
from .registry import TeamRegistry
from .rules import GameRules, StartResult, ValidateResult
from .leaderboard import TeamScore, build_leaderboard, format_leaderboard

__all__ = [
    'EventLog',
    'TeamRegistry',
    'GameRules',
    'StartResult',
    'ValidateResult',
    'TeamScore',
    'build_leaderboard',
    'format_leaderboard',
]
