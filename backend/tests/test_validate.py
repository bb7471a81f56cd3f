import pytest

from flagbot.models import Event

from conftest import PUBLIC, TEAM_CHANNEL


@pytest.fixture()
def red_team(bot, add_user, say, transport):
    add_user('UALICE', 'alice', 7)
    add_user('UBOB', 'bob', 7)
    say('UALICE', 'start Red Team')
    transport.sent.clear()
    return 7


def test_correct_flag_is_announced(red_team, transport, say):
    say('UALICE', 'validate 1 FLAG{abc}')

    found = Event.query.filter_by(kind='flag').all()
    assert len(found) == 1
    assert found[0].detail == 'flag 1'
    assert found[0].level == 1
    assert found[0].team_id == 7
    assert transport.to(PUBLIC) == ['Team Red Team found flag 1!']
    assert transport.to('DUALICE') == ['Congrats, you found flag 1!']


def test_level_accepts_either_secret(red_team, transport, say):
    say('UBOB', 'validate 1 FLAG{bonus}')

    assert Event.query.filter_by(kind='flag').one().detail == 'flag 2'
    assert transport.to('DUBOB') == ['Congrats, you found flag 2!']


def test_wrong_flag_on_uncapped_level(red_team, transport, say):
    say('UALICE', 'validate 1 flag{abc}')

    miss = Event.query.filter_by(kind='incorrect').one()
    assert miss.detail == 'flag{abc}'
    assert transport.to(PUBLIC) == []
    assert transport.to('DUALICE') == ["Sorry, that's not right."]


def test_flag_with_spaces_is_rejoined(red_team, say):
    say('UALICE', 'validate 1 two   words')
    assert Event.query.filter_by(kind='incorrect').one().detail == 'two words'


def test_validate_in_public_channel_is_refused(red_team, transport, say):
    before = Event.query.count()

    say('UALICE', '<@UBOT> validate 1 FLAG{abc}', channel=PUBLIC)

    assert Event.query.count() == before
    assert transport.to(PUBLIC) == ['<@UALICE>: shush!']


def test_validate_in_team_channel_is_allowed(red_team, transport, say):
    say('UALICE', '<@UBOT> validate 1 FLAG{abc}', channel=TEAM_CHANNEL)
    assert transport.to(TEAM_CHANNEL) == ['Congrats, you found flag 1!']


@pytest.mark.parametrize('level, message', [
    ('one', 'one is not a valid puzzle number'),
    ('0', 'you give us too much credit for starting puzzle enumeration from 0; '
          'humans designed this, not chat bots'),
    ('-3', 'you give us too much credit for starting puzzle enumeration from 0; '
           'humans designed this, not chat bots'),
    ('3', "woaaaaah nelly! puzzle 3 hasn't started yet!"),
])
def test_invalid_levels(red_team, transport, say, level, message):
    before = Event.query.count()

    say('UALICE', f'validate {level} FLAG{{abc}}')

    assert Event.query.count() == before
    assert transport.to('DUALICE') == [message]


def test_validate_before_start(bot, add_user, transport, say):
    add_user('UCAROL', 'carol', 9)

    say('UCAROL', 'validate 1 FLAG{abc}')

    assert Event.query.count() == 0
    assert transport.to('DUCAROL') == ["your team hasn't started yet! use `start <team name>` first."]


def test_remaining_tries_are_reported(red_team, transport, say):
    say('UALICE', 'validate 2 guess-1')
    say('UBOB', 'validate 2 guess-2')

    assert transport.to('DUALICE') == ["Sorry, that's not right. You have 9 tries left."]
    assert transport.to('DUBOB') == ["Sorry, that's not right. You have 8 tries left."]


def test_duplicate_wrong_guess_is_not_counted(red_team, transport, say):
    say('UALICE', 'validate 2 same-guess')
    say('UBOB', 'validate 2 same-guess')

    assert Event.query.filter_by(kind='incorrect', level=2).count() == 1
    assert transport.to('DUBOB') == ['you (or a teammate) already tried that guess']


def test_duplicates_allowed_where_not_suppressed(red_team, say):
    say('UALICE', 'validate 1 same-guess')
    say('UALICE', 'validate 1 same-guess')

    assert Event.query.filter_by(kind='incorrect', level=1).count() == 2


def test_attempt_cap(red_team, transport, say):
    for i in range(9):
        say('UALICE', f'validate 2 wrong-{i}')
    assert transport.to(PUBLIC) == []

    # Tenth miss uses the last try
    say('UALICE', 'validate 2 wrong-9')
    assert transport.to(PUBLIC) == ['Team Red Team ran out of tries! :(']
    assert transport.to('DUALICE')[-1] == "Sorry, that's not right. You have 0 tries left."

    before = Event.query.count()
    say('UBOB', 'validate 2 FLAG{level2}')
    assert Event.query.count() == before
    assert transport.to('DUBOB') == ["you've exhausted your 10 tries! no points 4 u"]
    assert transport.to(PUBLIC) == ['Team Red Team ran out of tries! :(']


def test_capped_level_success_on_last_try(red_team, transport, say):
    for i in range(9):
        say('UALICE', f'validate 2 wrong-{i}')

    say('UALICE', 'validate 2 FLAG{level2}')

    assert transport.to(PUBLIC) == ['Team Red Team found flag 3!']
    assert transport.to('DUALICE')[-1] == 'Congrats, you found flag 3!'


def test_storage_failure_replies_generically(red_team, bot, transport, say, monkeypatch):
    from flagbot.errors import StorageError

    def broken(*args, **kwargs):
        raise StorageError()

    monkeypatch.setattr(bot.event_log, 'append_flag', broken)
    say('UALICE', 'validate 1 FLAG{abc}')

    assert transport.to(PUBLIC) == []
    assert transport.to('DUALICE') == ['sorry, something went wrong.']


def test_reply_still_sent_when_announcement_fails(red_team, transport, say):
    transport.fail_send.add(PUBLIC)

    say('UALICE', 'validate 1 FLAG{abc}')

    assert Event.query.filter_by(kind='flag').count() == 1
    assert transport.to('DUALICE') == ['Congrats, you found flag 1!']
