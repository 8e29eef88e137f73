# app/core/session_store.py

import uuid
from datetime import datetime, timedelta
from typing import Optional

from loguru import logger

from app.core.config import settings
from app.core.storage import remove_downloads
from app.models.session import ApplicationSession


class ApplicationSessionStore:
    """
    In-memory registry of in-progress applications.
    Nothing here outlives the process: a reload starts every applicant afresh.
    Sessions idle for longer than SESSION_TTL_MINUTES are purged, together
    with their download folder, whenever the registry is used.
    """

    def __init__(self, ttl_minutes: Optional[int] = None):
        self._sessions: dict[uuid.UUID, ApplicationSession] = {}
        self._ttl_minutes = ttl_minutes

    @property
    def ttl(self) -> Optional[timedelta]:
        minutes = self._ttl_minutes if self._ttl_minutes is not None else settings.SESSION_TTL_MINUTES
        return timedelta(minutes=minutes) if minutes > 0 else None

    def _is_expired(self, session: ApplicationSession, now: datetime) -> bool:
        ttl = self.ttl
        if ttl is None or session.submission.in_flight:
            return False
        return now - session.updated_at > ttl

    def purge_expired(self, now: Optional[datetime] = None) -> list[uuid.UUID]:
        now = now or datetime.utcnow()
        expired = [sid for sid, s in self._sessions.items() if self._is_expired(s, now)]
        for session_id in expired:
            self._sessions.pop(session_id, None)
            remove_downloads(session_id)

        if expired:
            logger.info(f"Purged {len(expired)} idle application session(s)")
        return expired

    def add(self, session: ApplicationSession) -> ApplicationSession:
        self.purge_expired()
        self._sessions[session.id] = session
        logger.info(f"Application session opened: {session.id}")
        return session

    def get(self, session_id: uuid.UUID) -> Optional[ApplicationSession]:
        self.purge_expired()
        return self._sessions.get(session_id)

    def discard(self, session_id: uuid.UUID) -> bool:
        removed = self._sessions.pop(session_id, None)
        if removed:
            logger.info(f"Application session discarded: {session_id}")
        return removed is not None

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


session_store = ApplicationSessionStore()
