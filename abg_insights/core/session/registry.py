"""
In-memory session registry.

Sessions are process-local and lost on restart.
"""
from typing import Dict, List

from abg_insights.utils import get_logger, SessionNotFoundError
from .state import SessionState

logger = get_logger(__name__)


class SessionRegistry:
    """Holds independent SessionState objects keyed by session id."""

    def __init__(self):
        self._sessions: Dict[str, SessionState] = {}

    def create(self) -> SessionState:
        session = SessionState()
        self._sessions[session.session_id] = session
        logger.info(f"Session {session.session_id} created")
        return session

    def get(self, session_id: str) -> SessionState:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def discard(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def ids(self) -> List[str]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)
