from typing import Dict, Optional

from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from flagbot import db
from flagbot.errors import AlreadyRegistered, StorageError
from flagbot.models import Team, utcnow


class TeamRegistry:
    """Team names, set exactly once per team.

    Uniqueness is left to the database: registering inserts a row keyed on
    the team id, and a second insert for the same id fails rather than
    overwriting the name.
    """

    def register_once(self, team_id: int, name: str, commit: bool = True) -> None:
        """Insert the team row.

        With ``commit=False`` the insert is only flushed, so the caller can
        add further rows to the same transaction before committing.
        """
        try:
            db.session.execute(insert(Team).values(id=team_id, name=name, created_at=utcnow()))
            if commit:
                db.session.commit()
            else:
                db.session.flush()
        except IntegrityError as exc:
            db.session.rollback()
            raise AlreadyRegistered() from exc
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError() from exc

    def name_of(self, team_id: int) -> Optional[str]:
        team = db.session.get(Team, team_id)
        return team.name if team else None

    def names(self) -> Dict[int, str]:
        return {team.id: team.name for team in Team.query.all()}
