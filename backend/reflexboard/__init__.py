from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
import json
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(cors_allowed_origins='*', async_mode=None)

CORS_METHODS = ['GET', 'POST', 'OPTIONS']
CORS_HEADERS = ['Content-Type', 'Authorization', 'X-Admin-Token']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins='*', methods=CORS_METHODS, allow_headers=CORS_HEADERS)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins='*')

    # Any path answers a cross-origin preflight, even unknown ones
    @flask_app.before_request
    def answer_preflight():
        if request.method == 'OPTIONS':
            return jsonify({'ok': True}), 200

    @flask_app.errorhandler(404)
    def not_found(exc):
        return jsonify({'error': 'Not found'}), 404

    @flask_app.errorhandler(405)
    def method_not_allowed(exc):
        return jsonify({'error': 'Method not allowed'}), 405

    @flask_app.errorhandler(413)
    def body_too_large(exc):
        return jsonify({'error': 'Request body too large'}), 413

    from reflexboard.services.store import create_store
    flask_app.extensions['score_store'] = create_store(flask_app)

    from reflexboard.api.scores import scores
    flask_app.register_blueprint(scores, url_prefix='/api')

    from reflexboard.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    if not flask_app.config.get('ADMIN_TOKEN'):
        flask_app.logger.warning("[config] ADMIN_TOKEN is not set; admin leaderboard is disabled")

    @click.command('init-store')
    def init_store_command():
        """Creates the empty score collection if it does not exist yet."""
        with flask_app.app_context():
            store = flask_app.extensions['score_store']
            store.ensure()
            print(f'Score store ready ({store.describe()})')

    @click.command('export-scores')
    def export_scores_command():
        """Prints every stored score, most recent first, as JSON."""
        from reflexboard.services.leaderboard import recent_first
        with flask_app.app_context():
            records = flask_app.extensions['score_store'].read_all()
            print(json.dumps(recent_first(records), indent=2))

    flask_app.cli.add_command(init_store_command)
    flask_app.cli.add_command(export_scores_command)

    return flask_app
