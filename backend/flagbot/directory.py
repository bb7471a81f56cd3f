import threading
from dataclasses import dataclass
from typing import Dict

from flagbot.transport import Transport


@dataclass(frozen=True)
class Participant:
    username: str
    private_channel: str


class ParticipantDirectory:
    """Maps a chat user id to a username and a private reply channel.

    Records are cached for the life of the process. A miss costs two
    transport lookups; if either fails nothing is cached and the
    ``IdentityLookupError`` propagates.
    """

    def __init__(self, transport: Transport, logger=None):
        self.transport = transport
        self.logger = logger
        self._cache: Dict[str, Participant] = {}
        self._lock = threading.Lock()

    def resolve(self, identity: str) -> Participant:
        with self._lock:
            cached = self._cache.get(identity)
        if cached is not None:
            return cached

        if self.logger:
            self.logger.info(f"[directory] resolving user {identity}")
        info = self.transport.user_info(identity)
        private_channel = self.transport.open_private_channel(identity)
        participant = Participant(username=info.name, private_channel=private_channel)
        with self._lock:
            # Another task may have resolved the same user meanwhile
            return self._cache.setdefault(identity, participant)

    def __len__(self):
        with self._lock:
            return len(self._cache)
