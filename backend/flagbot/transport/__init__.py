"""Chat transport interface.

The game never talks to a chat service directly; it goes through a
``Transport``. ``SlackTransport`` is the production implementation.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UserInfo:
    user_id: str
    name: str


@dataclass(frozen=True)
class InboundMessage:
    user: str
    channel: str
    text: str
    subtype: Optional[str] = None


class Transport:
    bot_id: str = ''

    def connect(self) -> str:
        """Authenticate and return the bot's own user id."""
        raise NotImplementedError

    def user_info(self, user_id: str) -> UserInfo:
        raise NotImplementedError

    def open_private_channel(self, user_id: str) -> str:
        raise NotImplementedError

    def resolve_channel_by_name(self, name: str) -> Optional[str]:
        raise NotImplementedError

    def send(self, channel: str, text: str) -> None:
        raise NotImplementedError

    def is_private(self, channel: str) -> bool:
        raise NotImplementedError

    def mention(self, user_id: str) -> str:
        return f'<@{user_id}>'


__all__ = ['Transport', 'UserInfo', 'InboundMessage']
