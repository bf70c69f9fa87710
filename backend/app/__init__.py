from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

from app.services.scores.persistence import ScoreStore  # noqa: E402

score_store = ScoreStore()

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    score_store.init_app(flask_app)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from app.main import main
    flask_app.register_blueprint(main)

    from app.api.scores import scores
    # Mounted at the root so the game can POST to /submitScore
    flask_app.register_blueprint(scores)

    try:
        from app.socketio_events import register_socketio_handlers
        register_socketio_handlers()
    except Exception as exc:
        flask_app.logger.warning(f"SocketIO events not loaded: {exc}")

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the leaderboard tables."""
        import app.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
