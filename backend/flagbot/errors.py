"""Game errors.

Each error carries the message shown to the participant. Command handlers
catch ``GameError`` and reply with ``str(exc)``; anything else is treated
as an internal failure.
"""


class GameError(Exception):
    message = 'sorry, something went wrong.'

    def __init__(self, message=None):
        super().__init__(message or self.message)


class IdentityLookupError(GameError):
    """The transport could not resolve a user or channel."""


class TransportError(Exception):
    """The chat service rejected or failed a request."""


class StorageError(GameError):
    """An unexpected database failure. The user sees the generic message."""


class NoSuchUser(GameError):
    message = "sorry, I don't know which team you are on."


class NotStarted(GameError):
    message = "your team hasn't started yet! use `start <team name>` first."


class AlreadyStarted(GameError):
    def __init__(self, teammate):
        self.teammate = teammate
        super().__init__(f'sorry, {teammate} of your team already started the ctf!')


class AlreadyRegistered(GameError):
    message = 'sorry, your team already has a name!'


class Forbidden(GameError):
    message = 'shush!'


class InvalidLevel(GameError):
    pass


class AttemptsExhausted(GameError):
    def __init__(self, max_attempts):
        self.max_attempts = max_attempts
        super().__init__(f"you've exhausted your {max_attempts} tries! no points 4 u")


class DuplicateAttempt(GameError):
    message = 'you (or a teammate) already tried that guess'
