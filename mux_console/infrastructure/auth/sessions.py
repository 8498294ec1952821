"""Session-backed caller resolution."""

import logging

from mux_console.domain.models import CallerIdentity
from mux_console.domain.protocols import SessionStore

logger = logging.getLogger(__name__)


class SessionAuthorizer:
    """Resolves the caller from a session cookie value."""

    def __init__(self, sessions: SessionStore) -> None:
        self._sessions = sessions

    async def resolve_caller(self, session_token: str | None) -> CallerIdentity | None:
        if not session_token:
            return None

        session = await self._sessions.get_session(session_token)
        if session is None:
            logger.debug("Rejected invalid or expired session")
            return None

        return CallerIdentity(user_id=session.user_id, email=session.email)
