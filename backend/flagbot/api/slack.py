from flask import Blueprint, jsonify, request, current_app
from flagbot.bot import get_bot
from flagbot.transport import InboundMessage
from flagbot.transport.slack import verify_signature


slack = Blueprint('slack', __name__)


@slack.route('/events', methods=['POST'])
def events():
    """Slack Events API endpoint.

    Answers the url_verification handshake and hands message events to the
    router. Commands run in background tasks so the endpoint replies well
    inside Slack's three second window.
    """
    secret = current_app.config.get('SLACK_SIGNING_SECRET')
    if secret:
        ok = verify_signature(
            secret,
            request.headers.get('X-Slack-Request-Timestamp', ''),
            request.get_data(),
            request.headers.get('X-Slack-Signature', ''),
        )
        if not ok:
            return jsonify({'error': 'invalid signature'}), 401

    payload = request.get_json(silent=True) or {}
    kind = payload.get('type')

    if kind == 'url_verification':
        return jsonify({'challenge': payload.get('challenge')})

    if kind != 'event_callback':
        return jsonify({'error': f'unsupported payload type: {kind}'}), 400

    # Slack re-sends events it thinks we missed; the first delivery already ran
    if request.headers.get('X-Slack-Retry-Num'):
        return jsonify({'ok': True, 'retry': True})

    event = payload.get('event') or {}
    if event.get('type') != 'message':
        return jsonify({'ok': True})
    # Posts by bots, ours included, are never commands
    if event.get('bot_id'):
        return jsonify({'ok': True, 'command': None})

    message = InboundMessage(
        user=event.get('user') or '',
        channel=event.get('channel') or '',
        text=event.get('text') or '',
        subtype=event.get('subtype'),
    )
    command = get_bot().router.dispatch(message)
    return jsonify({'ok': True, 'command': command.verb if command else None})
