from flask import Blueprint

board_bp = Blueprint('board', __name__)
puzzles_bp = Blueprint('puzzles', __name__, url_prefix='/api/puzzles')

from puzzle_app.main import routes
