import csv

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config, transport=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app)

    # Chat transport and game services, shared by every command task
    from flagbot.bot import Bot
    if transport is None:
        from flagbot.transport.slack import SlackTransport
        transport = SlackTransport(flask_app.config['SLACK_API_TOKEN'])
    flask_app.extensions['flagbot'] = Bot(flask_app, transport)

    # Import and register blueprints here
    from flagbot.main import main
    flask_app.register_blueprint(main)

    from flagbot.api.slack import slack
    flask_app.register_blueprint(slack, url_prefix='/slack')

    from flagbot.api.scores import scores
    flask_app.register_blueprint(scores, url_prefix='/api/scores')

    from flagbot.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the database tables."""
        import flagbot.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('users-import')
    @click.argument('csv_path', type=click.Path(exists=True, dir_okay=False))
    def users_import_command(csv_path):
        """Loads participants from a CSV file of username,team rows."""
        from flagbot.models import User
        added = 0
        with flask_app.app_context(), open(csv_path, newline='', encoding='utf-8') as f:
            for row in csv.reader(f):
                if not row or row[0].strip().lower() in ('', 'user', 'username'):
                    continue
                username, team = row[0].strip(), int(row[1])
                user = User.query.filter_by(user=username).first()
                if user:
                    user.team = team
                else:
                    db.session.add(User(user=username, team=team))
                    added += 1
            db.session.commit()
        print(f'Imported users ({added} new)')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(users_import_command)

    return flask_app
