"""Registration and flag validation.

Both flows check their preconditions against the event log and finish
with a single write. A rejected precondition raises the matching
``GameError`` and writes nothing.
"""
from dataclasses import dataclass
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from flagbot import db
from flagbot.directory import Participant, ParticipantDirectory
from flagbot.errors import (
    AlreadyStarted,
    AttemptsExhausted,
    DuplicateAttempt,
    Forbidden,
    InvalidLevel,
    NoSuchUser,
    NotStarted,
    StorageError,
)
from flagbot.levels import LevelPolicy
from flagbot.models import Team, User, EVENT_START
from .eventlog import EventLog
from .registry import TeamRegistry


@dataclass(frozen=True)
class StartResult:
    participant: Participant
    team_id: int
    team_name: str


@dataclass(frozen=True)
class ValidateResult:
    participant: Participant
    team_id: int
    team_name: str
    level: int
    flag_name: Optional[str] = None
    # Tries left after this one, for capped levels
    remaining: Optional[int] = None
    # True only for the miss that used up the last try
    exhausted: bool = False

    @property
    def found(self) -> bool:
        return self.flag_name is not None


class GameRules:
    def __init__(self, directory: ParticipantDirectory, event_log: EventLog,
                 registry: TeamRegistry, levels: Dict[int, LevelPolicy],
                 open_level: int, logger=None):
        self.directory = directory
        self.event_log = event_log
        self.registry = registry
        self.levels = levels
        self.open_level = open_level
        self.logger = logger

    def _log(self, message: str) -> None:
        if self.logger:
            self.logger.info(message)

    def _team_of(self, username: str) -> int:
        try:
            user = User.query.filter_by(user=username).first()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError() from exc
        if user is None:
            raise NoSuchUser()
        return user.team

    def parse_level(self, text: str) -> LevelPolicy:
        try:
            level = int(text)
        except (TypeError, ValueError):
            raise InvalidLevel(f'{text} is not a valid puzzle number') from None
        if level < 1:
            raise InvalidLevel(
                'you give us too much credit for starting puzzle enumeration from 0; '
                'humans designed this, not chat bots'
            )
        if level > self.open_level or level not in self.levels:
            raise InvalidLevel(f"woaaaaah nelly! puzzle {level} hasn't started yet!")
        return self.levels[level]

    def start(self, identity: str, team_name: str) -> StartResult:
        participant = self.directory.resolve(identity)
        self._log(f"[start] {participant.username} as {team_name}")
        team_id = self._team_of(participant.username)

        try:
            prior = self.event_log.find_start(team_id)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError() from exc
        if prior is not None:
            raise AlreadyStarted(prior.user)

        # Team row and Start event commit together
        self.registry.register_once(team_id, team_name, commit=False)
        try:
            self.event_log.add(participant.username, EVENT_START, team_id=team_id)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError() from exc

        self._log(f"[start] done ({participant.username}, team={team_id})")
        return StartResult(participant=participant, team_id=team_id, team_name=team_name)

    def validate(self, identity: str, channel: str, public_channel: Optional[str],
                 level_text: str, submitted: str) -> ValidateResult:
        if public_channel and channel == public_channel:
            raise Forbidden()

        participant = self.directory.resolve(identity)
        self._log(f"[validate] {participant.username} solving puzzle {level_text}: {submitted}")
        team_id = self._team_of(participant.username)
        team = db.session.get(Team, team_id)
        if team is None:
            raise NotStarted()

        policy = self.parse_level(level_text)

        try:
            count = self.event_log.count_attempts(team_id, policy.number)
            if policy.max_attempts is not None and count >= policy.max_attempts:
                raise AttemptsExhausted(policy.max_attempts)
            if policy.reject_duplicates and self.event_log.has_incorrect(team_id, policy.number, submitted):
                raise DuplicateAttempt()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError() from exc

        flag_name = policy.match(submitted)
        if flag_name is not None:
            self.event_log.append_flag(participant.username, flag_name, policy.number, team_id)
        else:
            self.event_log.append_incorrect(participant.username, submitted, policy.number, team_id)

        remaining = None
        exhausted = False
        if policy.max_attempts is not None and flag_name is None:
            remaining = policy.max_attempts - (count + 1)
            exhausted = (count + 1) == policy.max_attempts

        self._log(f"[validate] done ({participant.username}, level={policy.number}, found={flag_name})")
        return ValidateResult(
            participant=participant,
            team_id=team_id,
            team_name=team.name,
            level=policy.number,
            flag_name=flag_name,
            remaining=remaining,
            exhausted=exhausted,
        )


__all__ = ['GameRules', 'StartResult', 'ValidateResult']
