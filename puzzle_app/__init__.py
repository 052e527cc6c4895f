from flask import Flask
import logging

from puzzle_app.config import AppConfig


def create_app(config: AppConfig | None = None):
    """Flask application factory."""
    config = config or AppConfig()

    app = Flask(__name__,
                template_folder='static/templates',
                static_folder='static')
    app.config['SECRET_KEY'] = config.secret_key
    app.config['MAX_CONTENT_LENGTH'] = config.max_upload_mb * 1024 * 1024

    logging.getLogger('puzzle_app').setLevel(config.log_level.upper())

    from puzzle_app.main.service import PuzzleService
    from puzzle_app.storage import FileImageStore, PuzzleStore

    image_store = FileImageStore(
        config.storage.root_dir,
        image_format=config.storage.image_format,
        jpeg_quality=config.storage.jpeg_quality,
    )
    app.extensions['puzzle_config'] = config
    app.extensions['puzzle_service'] = PuzzleService(config, image_store, PuzzleStore())

    # Register blueprints
    from puzzle_app.main import board_bp, puzzles_bp
    app.register_blueprint(board_bp)
    app.register_blueprint(puzzles_bp)

    return app
