"""Session-keyed store of puzzle instances."""
import threading
from typing import Optional

from puzzle_app.main.puzzle_solver.solver.errors import NotFoundError
from puzzle_app.main.puzzle_solver.solver.models import PuzzleInstance


class PuzzleStore:
    """
    Holds at most one PuzzleInstance per session id.

    The session map is guarded by a lock; instances of different sessions
    are independent. Operations within one session are not serialized.
    """

    def __init__(self):
        self._instances: dict[str, PuzzleInstance] = {}
        self._lock = threading.Lock()

    def put(self, instance: PuzzleInstance) -> Optional[PuzzleInstance]:
        """Store an instance, returning the one it replaced."""
        with self._lock:
            previous = self._instances.get(instance.session_id)
            self._instances[instance.session_id] = instance
            return previous

    def find(self, session_id: str) -> Optional[PuzzleInstance]:
        with self._lock:
            return self._instances.get(session_id)

    def get(self, session_id: str) -> PuzzleInstance:
        """
        Raises:
            NotFoundError: No puzzle for this session
        """
        instance = self.find(session_id)
        if instance is None:
            raise NotFoundError(f"No puzzle for session {session_id}")
        return instance

    def remove(self, session_id: str) -> Optional[PuzzleInstance]:
        with self._lock:
            return self._instances.pop(session_id, None)

    def __contains__(self, session_id):
        with self._lock:
            return session_id in self._instances

    def __len__(self):
        with self._lock:
            return len(self._instances)
