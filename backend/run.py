from flagbot import create_app, db, socketio
from flagbot.bot import get_bot

app = create_app()

if __name__ == '__main__':
    # Fail fast if the database or Slack can't be reached
    with app.app_context():
        db.session.execute(db.text('SELECT 1'))
        get_bot().connect()
    socketio.run(app, host='0.0.0.0', port=5000)
