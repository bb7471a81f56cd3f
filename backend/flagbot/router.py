from dataclasses import dataclass
from typing import Optional, Tuple

from flagbot import socketio
from flagbot import commands
from flagbot.errors import TransportError
from flagbot.transport import InboundMessage

UNKNOWN = 'unknown'


@dataclass(frozen=True)
class Command:
    verb: str
    args: Tuple[str, ...] = ()


def parse_command(text: str, bot_id: str, is_private: bool) -> Optional[Command]:
    """Parse a chat message into a command.

    Messages in shared channels must start by mentioning the bot; private
    messages need no mention. Returns None for messages not addressed to
    the bot, and an ``unknown`` command for ones it can't make sense of.
    """
    text = text or ''
    mention = f'<@{bot_id}>'
    if bot_id and text.startswith(mention):
        rest = text[len(mention):]
        # The mention must stand alone: "<@BOT> help" or "<@BOT>: help"
        if rest.startswith(':'):
            rest = rest[1:]
        elif rest and not rest[0].isspace():
            return Command(UNKNOWN)
    elif is_private:
        rest = text
    else:
        return None

    parts = rest.split()
    verb = parts[0] if parts else ''
    args = parts[1:]
    if verb == 'help':
        return Command('help')
    if verb == 'start' and len(args) >= 1:
        return Command('start', (' '.join(args),))
    if verb == 'validate' and len(args) >= 2:
        return Command('validate', (args[0], ' '.join(args[1:])))
    if verb == 'scores':
        return Command('scores')
    return Command(UNKNOWN)


_HANDLERS = {
    'help': commands.do_help,
    'start': commands.do_start,
    'validate': commands.do_validate,
    'scores': commands.do_scores,
    UNKNOWN: commands.do_unknown,
}


class CommandRouter:
    """Turns inbound messages into one background task each.

    The router keeps no state of its own and never waits on a command.
    """

    def __init__(self, bot):
        self.bot = bot

    def dispatch(self, message: InboundMessage) -> Optional[Command]:
        transport = self.bot.transport
        if message.subtype or not message.user:
            return None
        try:
            bot_id = self.bot.ensure_connected()
        except TransportError:
            # Without our own id we can't tell our replies from commands
            self.bot.app.logger.exception(f"[router] dropping message from {message.user}: not connected")
            return None
        if message.user == bot_id:
            return None
        command = parse_command(message.text, bot_id, transport.is_private(message.channel))
        if command is None:
            return None
        self.bot.app.logger.info(f"[router] {message.user} in {message.channel}: {command.verb}")
        self._spawn(_HANDLERS[command.verb], message.user, message.channel, *command.args)
        return command

    def _spawn(self, handler, *args) -> None:
        app = self.bot.app
        bot = self.bot

        def _task():
            with app.app_context():
                handler(bot, *args)

        # Inline in tests so assertions see the finished command
        if app.config.get('TESTING') and not app.config.get('ASYNC_DISPATCH_IN_TESTS'):
            _task()
        else:
            socketio.start_background_task(_task)
