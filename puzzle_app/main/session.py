"""Session identity: an opaque uuid4 kept in Flask's signed-cookie session."""
import uuid

from flask import session

SESSION_KEY = 'user_id'


def get_or_create_session_id() -> str:
    """Session id of the current request, assigning a fresh one on first contact."""
    session_id = session.get(SESSION_KEY)
    if session_id is None:
        session_id = str(uuid.uuid4())
        session[SESSION_KEY] = session_id
    return session_id