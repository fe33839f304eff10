"""
Session endpoints.

Sandi Metz Principles:
- Single Responsibility: Session inspection over HTTP
- Dependency Injection: Store injected
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from voicegate.api.deps import get_session_store
from voicegate.models.session import Session
from voicegate.session.base import SessionStore

router = APIRouter()


@router.get("/sessions/{session_id}", response_model=Session)
async def get_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),  # noqa: B008
) -> Session:
    """Get a session with its recent turns."""
    session = await store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.delete("/sessions/{session_id}")
async def delete_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),  # noqa: B008
) -> Dict[str, Any]:
    """End a session."""
    deleted = await store.delete(session_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"sessionId": session_id, "deleted": True}
