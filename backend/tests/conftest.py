import os
import sys
import threading
import pytest

# Ensure the backend root (containing the `flagbot` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from flagbot import create_app, db, socketio
from flagbot.errors import IdentityLookupError, TransportError
from flagbot.transport import InboundMessage, Transport, UserInfo

PUBLIC = 'CPUBLIC'
TEAM_CHANNEL = 'CTEAM'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SLACK_SIGNING_SECRET = ''
    PUBLIC_CHANNEL = 'ctf'
    PUBLIC_CHANNEL_ID = PUBLIC
    PUZZLE_LINK = 'https://puzzles.example.com/1'
    FLAG1 = 'FLAG{abc}'
    FLAG2 = 'FLAG{bonus}'
    FLAG3 = 'FLAG{level2}'
    LEVELS = None
    OPEN_LEVEL = 2
    SCOREBOARD_TEAM_ID_LIMIT = 666
    SCOREBOARD_TIEBREAK = ('tries', 'time')


class FakeTransport(Transport):
    """Records everything the bot sends; users are registered by tests."""

    def __init__(self):
        self.identity = 'UBOT'
        self.bot_id = self.identity
        self.connects = 0
        self.names = {}
        self.channels = {'ctf': PUBLIC}
        self.fail_lookup = set()
        self.fail_open = set()
        self.fail_send = set()
        self.lookups = 0
        self.sent = []
        self._lock = threading.Lock()

    def connect(self):
        self.connects += 1
        self.bot_id = self.identity
        return self.bot_id

    def user_info(self, user_id):
        with self._lock:
            self.lookups += 1
        if user_id in self.fail_lookup or user_id not in self.names:
            raise IdentityLookupError()
        return UserInfo(user_id=user_id, name=self.names[user_id])

    def open_private_channel(self, user_id):
        if user_id in self.fail_open:
            raise IdentityLookupError()
        return f'D{user_id}'

    def resolve_channel_by_name(self, name):
        return self.channels.get(name)

    def send(self, channel, text):
        if channel in self.fail_send:
            raise TransportError('chat.postMessage: channel_not_found')
        with self._lock:
            self.sent.append((channel, text))

    def is_private(self, channel):
        return channel.startswith('D')

    def to(self, channel):
        return [text for c, text in self.sent if c == channel]


@pytest.fixture()
def transport():
    return FakeTransport()


@pytest.fixture()
def flask_app(transport):
    application = create_app(TestConfig, transport=transport)
    with application.app_context():
        # Ensure models are imported so tables are created
        import flagbot.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def bot(flask_app):
    return flask_app.extensions['flagbot']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def add_user(transport):
    """Provision a participant: chat id -> username -> team."""
    from flagbot.models import User

    def _add(user_id, username, team):
        transport.names[user_id] = username
        db.session.add(User(user=username, team=team))
        db.session.commit()
        return user_id
    return _add


@pytest.fixture()
def say(bot):
    """Deliver a chat message to the bot as `user` in `channel`."""
    def _say(user, text, channel=None):
        channel = channel or f'D{user}'
        return bot.router.dispatch(InboundMessage(user=user, channel=channel, text=text))
    return _say
