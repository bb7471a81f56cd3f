from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Set

from flagbot.levels import LevelPolicy, SCORING_TIME, SCORING_TRIES
from flagbot.models import Event, EVENT_FLAG, EVENT_START

TIEBREAK_KEYS = (SCORING_TRIES, SCORING_TIME)


@dataclass
class TeamScore:
    team_id: int
    team_name: str
    flags: Set[str] = field(default_factory=set)
    levels: Set[int] = field(default_factory=set)
    # Attempts per level, counted up to and including the first flag
    tries: Dict[int, int] = field(default_factory=dict)
    # Seconds from the team's start to its first flag on a level
    elapsed: Dict[int, float] = field(default_factory=dict)
    started_at: Optional[datetime] = None

    @property
    def flag_count(self) -> int:
        return len(self.flags)

    def to_dict(self) -> dict:
        return {
            'team_id': self.team_id,
            'team_name': self.team_name,
            'flags': sorted(self.flags),
            'levels': sorted(self.levels),
            'tries': {str(k): v for k, v in sorted(self.tries.items())},
            'elapsed': {str(k): v for k, v in sorted(self.elapsed.items())},
        }


def _tries_key(score: TeamScore, levels: Dict[int, LevelPolicy]):
    # More solved tries-scored levels first, so a try count is only ever
    # weighed against teams that solved as many of those levels
    solved = [
        level for level in score.levels
        if level in levels and levels[level].scoring == SCORING_TRIES
    ]
    return (-len(solved), sum(score.tries.get(level, 0) for level in solved))


def _time_key(score: TeamScore, levels: Dict[int, LevelPolicy]) -> float:
    total = 0.0
    for level in score.levels:
        if level in levels and levels[level].scoring == SCORING_TIME:
            if level not in score.elapsed:
                # Flag without a recorded start sorts after every timed team
                return float('inf')
            total += score.elapsed[level]
    return total


_KEY_FUNCS = {
    SCORING_TRIES: _tries_key,
    SCORING_TIME: _time_key,
}


def build_leaderboard(events: Iterable[Event], team_names: Dict[int, str],
                      levels: Dict[int, LevelPolicy],
                      tiebreak: Sequence[str] = TIEBREAK_KEYS) -> List[TeamScore]:
    """Aggregate the event log into ranked team scores.

    ``events`` must be in log order. Teams rank by flag count (most first),
    then by each key in ``tiebreak``. ``tries`` ranks teams that solved more
    tries-scored levels first, then by the attempts spent on those levels,
    fewest first. ``time`` sums the seconds from start to flag on solved
    time-scored levels, shortest first. Remaining ties keep the order in
    which teams first appear in the log.
    """
    unknown = [key for key in tiebreak if key not in _KEY_FUNCS]
    if unknown:
        raise ValueError(f"unknown tiebreak key(s): {', '.join(unknown)}")

    scores: Dict[int, TeamScore] = {}
    pending: Dict[int, Dict[int, int]] = {}

    for event in events:
        team_id = event.team_id
        if team_id is None:
            continue
        score = scores.get(team_id)
        if score is None:
            score = TeamScore(team_id=team_id, team_name=team_names.get(team_id, f'#{team_id}'))
            scores[team_id] = score
            pending[team_id] = {}

        if event.kind == EVENT_START:
            if score.started_at is None:
                score.started_at = event.created_at
            continue
        if event.level is None:
            continue

        level = event.level
        if level in score.levels:
            # Attempts after the level's first flag don't count against it
            if event.kind == EVENT_FLAG:
                score.flags.add(event.detail)
            continue

        attempts = pending[team_id].get(level, 0) + 1
        pending[team_id][level] = attempts
        score.tries[level] = attempts
        if event.kind == EVENT_FLAG:
            score.flags.add(event.detail)
            score.levels.add(level)
            if score.started_at is not None and event.created_at is not None:
                score.elapsed[level] = (event.created_at - score.started_at).total_seconds()

    def rank_key(score: TeamScore):
        return (-score.flag_count,) + tuple(_KEY_FUNCS[key](score, levels) for key in tiebreak)

    return sorted(scores.values(), key=rank_key)


def format_leaderboard(scores: List[TeamScore]) -> str:
    if not scores:
        return 'No teams have started yet.'
    lines = []
    for rank, score in enumerate(scores, start=1):
        noun = 'flag' if score.flag_count == 1 else 'flags'
        lines.append(f"# {rank}: Team '{score.team_name}' found {score.flag_count} {noun}")
    return '\n'.join(lines)
