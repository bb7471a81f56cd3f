"""Per-level flag policy.

A level maps each accepted secret to the name of the flag it earns, and
optionally caps the number of attempts a team gets and refuses repeated
wrong guesses. The default table is the two-level event the bot was
written for: level 1 has two flags and is scored by time, level 2 has one
flag, ten tries, and is scored by how few tries a team needed.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

SCORING_TIME = 'time'
SCORING_TRIES = 'tries'


@dataclass(frozen=True)
class LevelPolicy:
    number: int
    flags: Dict[str, str] = field(default_factory=dict)  # secret -> flag name
    max_attempts: Optional[int] = None
    reject_duplicates: bool = False
    scoring: str = SCORING_TIME

    def match(self, submitted: str) -> Optional[str]:
        # Exact, case-sensitive comparison; empty secrets never match
        for secret, name in self.flags.items():
            if secret and submitted == secret:
                return name
        return None

    @property
    def flag_names(self) -> List[str]:
        return list(self.flags.values())


def default_levels(config) -> Dict[int, LevelPolicy]:
    return {
        1: LevelPolicy(
            number=1,
            flags={config.get('FLAG1', ''): 'flag 1', config.get('FLAG2', ''): 'flag 2'},
            scoring=SCORING_TIME,
        ),
        2: LevelPolicy(
            number=2,
            flags={config.get('FLAG3', ''): 'flag 3'},
            max_attempts=10,
            reject_duplicates=True,
            scoring=SCORING_TRIES,
        ),
    }


def levels_from_config(config) -> Dict[int, LevelPolicy]:
    """Build the level table from app config.

    ``LEVELS`` may hold a list of dicts such as
    ``{"level": 2, "flags": {"FLAG{x}": "flag 3"}, "max_attempts": 10,
    "reject_duplicates": true, "scoring": "tries"}``; without it the
    default two-level table is built from ``FLAG1``..``FLAG3``.
    """
    raw = config.get('LEVELS')
    if not raw:
        return default_levels(config)
    table = {}
    for entry in raw:
        number = int(entry['level'])
        scoring = entry.get('scoring', SCORING_TIME)
        if scoring not in (SCORING_TIME, SCORING_TRIES):
            raise ValueError(f'level {number}: unknown scoring {scoring!r}')
        max_attempts = entry.get('max_attempts')
        table[number] = LevelPolicy(
            number=number,
            flags=dict(entry.get('flags') or {}),
            max_attempts=int(max_attempts) if max_attempts is not None else None,
            reject_duplicates=bool(entry.get('reject_duplicates', False)),
            scoring=scoring,
        )
    return table
