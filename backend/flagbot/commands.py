"""Command handlers.

Each handler runs in its own task and is terminal: it either completes its
flow or sends exactly one error reply.
"""
import functools

from flask import current_app

from flagbot.errors import GameError, TransportError
from flagbot.services.game import format_leaderboard

HELP_TEXT = """start _team name_: sets your team's name and PMs you a link to a puzzle. This starts your clock.
validate _level_ _flag_: tells you if a flag for a level is correct (message or invite me to a private channel first!).
scores: tells you the current top scores (beta)"""

NOT_UNDERSTOOD = "sorry, I didn't understand that."
SOMETHING_WENT_WRONG = 'sorry, something went wrong.'


def terminal(handler):
    """Turn any failure into a single reply to the caller."""
    @functools.wraps(handler)
    def wrapper(bot, user, channel, *args):
        try:
            return handler(bot, user, channel, *args)
        except GameError as exc:
            if exc.__cause__ is not None:
                current_app.logger.warning(f"[{handler.__name__}] {type(exc).__name__}: {exc.__cause__!r}")
            message = str(exc)
        except Exception:
            current_app.logger.exception(f"[{handler.__name__}] failed")
            message = SOMETHING_WENT_WRONG
        try:
            bot.reply_error(channel, user, message)
        except Exception:
            current_app.logger.exception(f"[{handler.__name__}] could not deliver error reply")
    return wrapper


def _post(label, send, *args):
    """Send a message for a flow that has already been written.

    Each such message stands alone; a failed one is logged and the rest
    still go out.
    """
    try:
        send(*args)
    except (TransportError, RuntimeError):
        current_app.logger.exception(f"[{label}] could not deliver message")


@terminal
def do_help(bot, user, channel):
    bot.reply(channel, HELP_TEXT)


@terminal
def do_unknown(bot, user, channel):
    bot.reply_error(channel, user, NOT_UNDERSTOOD)


@terminal
def do_start(bot, user, channel, team_name):
    result = bot.rules.start(user, team_name)

    link = f"Here is a link to the puzzle: {bot.config.get('PUZZLE_LINK')}"
    destination = channel if bot.transport.is_private(channel) else result.participant.private_channel
    _post('start', bot.reply, destination, link)
    _post('start', bot.announce, f"Team {result.team_name} has entered the competition!")


@terminal
def do_validate(bot, user, channel, level, flag):
    result = bot.rules.validate(user, channel, bot.public_channel, level, flag)

    if result.found:
        _post('validate', bot.announce, f"Team {result.team_name} found {result.flag_name}!")
    if result.exhausted:
        _post('validate', bot.announce, f"Team {result.team_name} ran out of tries! :(")

    if result.found:
        text = f"Congrats, you found {result.flag_name}!"
    else:
        text = "Sorry, that's not right."
        if result.remaining is not None:
            text += f" You have {result.remaining} tries left."
    _post('validate', bot.reply, channel, text)


@terminal
def do_scores(bot, user, channel):
    bot.reply(channel, format_leaderboard(bot.leaderboard()))
