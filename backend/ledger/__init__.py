from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    # Fall back to in-memory storage when the configured database can't be opened
    from ledger.storage import prepare_storage
    prepare_storage(flask_app)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from ledger.main import main
    flask_app.register_blueprint(main)

    from ledger.api.sessions import ledger_api
    flask_app.register_blueprint(ledger_api, url_prefix='/api')

    from ledger.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    if flask_app.config.get('LEDGER_AUTO_INIT'):
        # ConfigurationError from a bad built-in template is fatal here
        from ledger.services.templates import TemplateCatalog, DEFAULT_TEMPLATES
        with flask_app.app_context():
            from ledger import models  # noqa: F401
            db.create_all()
            TemplateCatalog(db.session).seed(DEFAULT_TEMPLATES)

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from ledger.services.templates import TemplateCatalog, DEFAULT_TEMPLATES
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            seeded = TemplateCatalog(db.session).seed(DEFAULT_TEMPLATES)
            print(f'Database has been reset and seeded with {len(seeded)} templates!')

    @click.command('export-snapshot')
    @click.argument('path', type=click.Path(dir_okay=False, writable=True))
    def export_snapshot_command(path):
        """Writes a full backup of the ledger to PATH."""
        from ledger.storage import export_snapshot
        with flask_app.app_context():
            blob = export_snapshot(db.session)
        with open(path, 'wb') as fh:
            fh.write(blob)
        print(f'Snapshot written to {path} ({len(blob)} bytes)')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(export_snapshot_command)

    return flask_app
