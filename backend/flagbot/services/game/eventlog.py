from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from flagbot import db
from flagbot.errors import StorageError
from flagbot.models import Event, EVENT_FLAG, EVENT_INCORRECT, EVENT_START


class EventLog:
    """Append-only access to the ``logs`` table.

    Rows are inserted and read, never updated or deleted. Derived state
    (who started, attempt counts, flags held) is always computed from here.
    """

    def add(self, username: str, kind: str, detail: str = '',
            level: Optional[int] = None, team_id: Optional[int] = None) -> Event:
        """Stage an event in the current session without committing."""
        event = Event(user=username, kind=kind, detail=detail, level=level, team_id=team_id)
        db.session.add(event)
        return event

    def _append(self, *args, **kwargs) -> Event:
        try:
            event = self.add(*args, **kwargs)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError() from exc
        return event

    def append_start(self, username: str, team_id: int) -> Event:
        return self._append(username, EVENT_START, team_id=team_id)

    def append_flag(self, username: str, flag_name: str, level: int, team_id: int) -> Event:
        return self._append(username, EVENT_FLAG, flag_name, level=level, team_id=team_id)

    def append_incorrect(self, username: str, submitted: str, level: int, team_id: int) -> Event:
        return self._append(username, EVENT_INCORRECT, submitted, level=level, team_id=team_id)

    def find_start(self, team_id: int) -> Optional[Event]:
        return (
            Event.query.filter_by(team_id=team_id, kind=EVENT_START)
            .order_by(Event.id)
            .first()
        )

    def count_attempts(self, team_id: int, level: int) -> int:
        return Event.query.filter_by(team_id=team_id, level=level).count()

    def has_incorrect(self, team_id: int, level: int, submitted: str) -> bool:
        return db.session.query(
            Event.query.filter_by(
                team_id=team_id, level=level, kind=EVENT_INCORRECT, detail=submitted
            ).exists()
        ).scalar()

    def scoreboard_events(self, team_id_limit: Optional[int] = None) -> List[Event]:
        query = Event.query.filter(Event.team_id.isnot(None))
        if team_id_limit is not None:
            query = query.filter(Event.team_id < team_id_limit)
        return query.order_by(Event.id).all()

    def count(self) -> int:
        return Event.query.count()
