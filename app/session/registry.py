"""In-memory registry of active sessions."""

from __future__ import annotations

import logging
import uuid

from app.core.errors import SessionNotFound
from app.profile.merge import normalize_profile
from app.profile.models import UserProfile
from app.session.context import SessionContext

LOGGER = logging.getLogger(__name__)


class SessionRegistry:
    def __init__(self) -> None:
        self._sessions: dict[str, SessionContext] = {}

    def create(self, profile: UserProfile | None = None) -> SessionContext:
        context = SessionContext(session_id=uuid.uuid4().hex)
        if profile is not None:
            context.profile = normalize_profile(profile)
        self._sessions[context.session_id] = context
        LOGGER.info("Session created", extra={"session_id": context.session_id})
        return context

    def get(self, session_id: str) -> SessionContext:
        context = self._sessions.get(session_id)
        if context is None:
            raise SessionNotFound(f"Session not found: {session_id}")
        return context

    def close(self, session_id: str) -> None:
        self.get(session_id)
        del self._sessions[session_id]
        LOGGER.info("Session closed", extra={"session_id": session_id})
