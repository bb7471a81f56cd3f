import threading
from typing import List, Optional

from flask import current_app

from flagbot import socketio
from flagbot.directory import ParticipantDirectory
from flagbot.levels import levels_from_config
from flagbot.router import CommandRouter
from flagbot.services.game import (
    EventLog,
    GameRules,
    TeamRegistry,
    TeamScore,
    build_leaderboard,
)
from flagbot.transport import Transport


class Bot:
    """Everything a command task needs, built once per app.

    Command tasks only share state through the database and the
    participant directory held here.
    """

    def __init__(self, app, transport: Transport):
        self.app = app
        self.transport = transport
        self.directory = ParticipantDirectory(transport, logger=app.logger)
        self.levels = levels_from_config(app.config)
        self.event_log = EventLog()
        self.registry = TeamRegistry()
        self.rules = GameRules(
            self.directory,
            self.event_log,
            self.registry,
            self.levels,
            open_level=int(app.config.get('OPEN_LEVEL', 2)),
            logger=app.logger,
        )
        self.router = CommandRouter(self)
        self._public_channel: Optional[str] = app.config.get('PUBLIC_CHANNEL_ID') or None
        self._channel_lock = threading.Lock()
        self._connect_lock = threading.Lock()

    @property
    def config(self):
        return self.app.config

    def connect(self) -> None:
        """Authenticate with the chat service and resolve the public channel.

        Called once at process start; failures here are fatal.
        """
        bot_id = self.ensure_connected()
        channel = self.public_channel
        self.app.logger.info(f"[bot] connected as {bot_id}, public channel {channel}")

    def ensure_connected(self) -> str:
        """Learn the bot's own user id, once, before the first message is routed."""
        if not self.transport.bot_id:
            with self._connect_lock:
                if not self.transport.bot_id:
                    self.transport.connect()
        return self.transport.bot_id

    @property
    def public_channel(self) -> str:
        if self._public_channel is None:
            with self._channel_lock:
                if self._public_channel is None:
                    name = self.config.get('PUBLIC_CHANNEL')
                    self.app.logger.info(f"[bot] resolving channel: {name}")
                    channel = self.transport.resolve_channel_by_name(name)
                    if not channel:
                        raise RuntimeError(f"public channel {name!r} not found")
                    self._public_channel = channel
        return self._public_channel

    def announce(self, text: str) -> None:
        """Post to the public channel and the live feed."""
        self.transport.send(self.public_channel, text)
        socketio.emit('announcement', {'text': text}, to='feed', namespace='/ws')

    def reply(self, channel: str, text: str) -> None:
        self.transport.send(channel, text)

    def reply_error(self, channel: str, user: str, text: str) -> None:
        if not self.transport.is_private(channel):
            text = f"{self.transport.mention(user)}: {text}"
        current_app.logger.info(f"[error] {text}")
        self.transport.send(channel, text)

    def leaderboard(self) -> List[TeamScore]:
        events = self.event_log.scoreboard_events(self.config.get('SCOREBOARD_TEAM_ID_LIMIT'))
        return build_leaderboard(
            events,
            self.registry.names(),
            self.levels,
            tiebreak=tuple(self.config.get('SCOREBOARD_TIEBREAK') or ('tries', 'time')),
        )


def get_bot() -> Bot:
    return current_app.extensions['flagbot']
