from datetime import datetime, timezone

from flagbot import db

EVENT_START = 'start'
EVENT_FLAG = 'flag'
EVENT_INCORRECT = 'incorrect'


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(db.Model):
    """A participant, provisioned by the organisers before the event."""
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    user = db.Column(db.String(64), unique=True, nullable=False, index=True)
    team = db.Column(db.Integer, nullable=False, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'user': self.user,
            'team': self.team,
        }


class Team(db.Model):
    """A registered team. The primary key makes registration first-write-wins."""
    __tablename__ = 'teams'
    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    name = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
        }


class Event(db.Model):
    """One row of the append-only game log."""
    __tablename__ = 'logs'
    id = db.Column(db.Integer, primary_key=True)
    user = db.Column(db.String(64), nullable=False, index=True)
    kind = db.Column(db.String(16), nullable=False)  # start, flag, incorrect
    detail = db.Column(db.Text, nullable=False, default='')
    level = db.Column(db.Integer, nullable=True)
    team_id = db.Column(db.Integer, nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        db.Index('ix_logs_team_level', 'team_id', 'level'),
    )

    @property
    def label(self):
        if self.kind == EVENT_INCORRECT:
            return f'incorrect:{self.detail}'
        if self.kind == EVENT_FLAG:
            return self.detail
        return self.kind

    def to_dict(self):
        return {
            'id': self.id,
            'user': self.user,
            'event': self.label,
            'level': self.level,
            'team_id': self.team_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
