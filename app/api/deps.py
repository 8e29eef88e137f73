# app/api/deps.py

from uuid import UUID

from fastapi import Depends, HTTPException, status

from app.core.session_store import ApplicationSessionStore, session_store
from app.models.session import ApplicationSession
from app.services.submission_client import SubmissionClient, get_submission_client


# ------------------------------------------------------------
# Session registry
# ------------------------------------------------------------
def get_session_store() -> ApplicationSessionStore:
    return session_store


# ------------------------------------------------------------
# Resolve the application session from the path
# ------------------------------------------------------------
async def get_application_session(
    session_id: UUID,
    store: ApplicationSessionStore = Depends(get_session_store),
) -> ApplicationSession:
    session = store.get(session_id)
    if not session:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application session not found")
    session.touch()
    return session


# ------------------------------------------------------------
# Remote submission client (overridden in tests)
# ------------------------------------------------------------
def get_client() -> SubmissionClient:
    return get_submission_client()
