from io import BytesIO
import logging

from flask import render_template, request, jsonify, send_file, current_app
from werkzeug.utils import secure_filename
import cv2
import numpy as np

from puzzle_app.main import board_bp, puzzles_bp
from puzzle_app.main.session import get_or_create_session_id
from puzzle_app.main.puzzle_solver.solver.errors import (
    PuzzleError,
    PreconditionViolation,
    NotFoundError,
    StorageFailure,
    InvalidArrangement,
)
from puzzle_app.main.puzzle_solver.solver.models import Placement

logger = logging.getLogger(__name__)

UPLOAD_FIELD = 'image'
ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg'}

ERROR_STATUS = {
    InvalidArrangement: 400,
    NotFoundError: 404,
    PreconditionViolation: 500,
    StorageFailure: 500,
}


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def get_service():
    return current_app.extensions['puzzle_service']


def error_response(error: PuzzleError):
    """JSON error body with the status of the error's class."""
    status = next((code for cls, code in ERROR_STATUS.items() if isinstance(error, cls)), 500)
    if isinstance(error, PreconditionViolation):
        logger.error("Internal consistency failure: %s", error)
        return jsonify({'error': 'internal consistency failure', 'detail': str(error)}), status
    return jsonify({'error': str(error)}), status


def decode_upload(file) -> np.ndarray:
    """Decode an uploaded file into an (H, W, 3) RGB array."""
    file_bytes = np.frombuffer(file.read(), np.uint8)
    img = cv2.imdecode(file_bytes, cv2.IMREAD_COLOR) if file_bytes.size else None
    if img is None:
        raise InvalidArrangement('Uploaded file is not a decodable image')
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def parse_placements(data) -> list[Placement]:
    if not isinstance(data, list):
        raise InvalidArrangement('Expected a JSON list of placements')
    try:
        return [Placement.from_dict(item) for item in data]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise InvalidArrangement(f'Malformed placement: {e}') from e


@board_bp.route('/')
def index():
    return render_template("index.html")


@puzzles_bp.route('/upload', methods=['POST'])
def upload_image():
    """Slice an uploaded image into a new puzzle for this session."""
    if UPLOAD_FIELD not in request.files:
        return jsonify({'error': 'No file provided'}), 400

    file = request.files[UPLOAD_FIELD]

    if file.filename == '':
        return jsonify({'error': 'No file selected'}), 400

    if not allowed_file(file.filename):
        return jsonify({'error': 'Invalid file type. Please upload PNG, JPG, or JPEG'}), 400

    try:
        image = decode_upload(file)
        session_id = get_or_create_session_id()
        instance = get_service().upload(session_id, image, secure_filename(UPLOAD_FIELD))

        return jsonify({
            'success': True,
            'fragments': len(instance.fragments),
            'fragment_width': instance.fragment_width,
            'fragment_height': instance.fragment_height,
        })

    except PuzzleError as e:
        return error_response(e)


@puzzles_bp.route('/', methods=['GET'])
def list_fragments():
    """Fragments of this session's puzzle with their current bounds."""
    try:
        fragments = get_service().list_fragments(get_or_create_session_id())
        return jsonify([fragment.to_dict() for fragment in fragments])

    except PuzzleError as e:
        return error_response(e)


@puzzles_bp.route('/<int:fragment_id>/image', methods=['GET'])
def fragment_image(fragment_id):
    """Stored image of a single fragment."""
    try:
        service = get_service()
        data = service.fragment_image(get_or_create_session_id(), fragment_id)
        return send_file(BytesIO(data), mimetype=service.image_store.mimetype)

    except PuzzleError as e:
        return error_response(e)


@puzzles_bp.route('/check', methods=['POST'])
def check_arrangement():
    """Whether the posted placements form the solved picture."""
    try:
        placements = parse_placements(request.get_json(silent=True))
        return jsonify(get_service().check(get_or_create_session_id(), placements))

    except PuzzleError as e:
        return error_response(e)


@puzzles_bp.route('/assemble', methods=['POST'])
def assemble():
    """Solve the puzzle and return every fragment at its solved position."""
    try:
        fragments = get_service().assemble(get_or_create_session_id())
        return jsonify([fragment.to_dict() for fragment in fragments])

    except PuzzleError as e:
        return error_response(e)


@puzzles_bp.route('/reset', methods=['POST'])
def reset():
    """Forget this session's puzzle and its stored images."""
    try:
        get_service().reset(get_or_create_session_id())
        return jsonify({'success': True})

    except PuzzleError as e:
        return error_response(e)
