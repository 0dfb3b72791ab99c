"""Merge mode API endpoints"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, HTTPException

from diffcommit_backend.models.diff import DiffRequest, MergeState, SessionResponse
from diffcommit_backend.services.errors import MalformedAdapterOutputError
from diffcommit_backend.services.merge_session import MergeSession

router = APIRouter()

# In-memory merge sessions, one per open document
sessions: dict[str, MergeSession] = {}


def get_session(session_id: str) -> MergeSession:
    """Look up a session or fail with 404"""
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return session


@router.post("/sessions", response_model=SessionResponse)
async def create_session() -> SessionResponse:
    """Open a new merge session"""
    session_id = str(uuid.uuid4())
    sessions[session_id] = MergeSession()
    return SessionResponse(session_id=session_id)


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str) -> dict:
    """Close a session, cancelling any in-flight edit"""
    session = get_session(session_id)
    session.reset()
    del sessions[session_id]
    return {"status": "success", "message": "Session closed"}


@router.post("/{session_id}/diff", response_model=MergeState)
async def run_diff(session_id: str, request: DiffRequest) -> MergeState:
    """Diff two texts, replacing the session's segments and history"""
    session = get_session(session_id)
    try:
        session.run_diff(request.source, request.target)
    except MalformedAdapterOutputError as e:
        raise HTTPException(status_code=500, detail=f"Word diff failed: {e}")
    return session.state()


@router.get("/{session_id}/segments", response_model=MergeState)
async def current_segments(session_id: str) -> MergeState:
    """Get the current segment snapshot"""
    return get_session(session_id).state()


@router.get("/{session_id}/preview")
async def preview_text(session_id: str) -> dict:
    """Get the text built from the included segments"""
    return {"preview_text": get_session(session_id).preview_text()}


@router.post("/{session_id}/segments/{segment_id}/toggle", response_model=MergeState)
async def toggle_segment(session_id: str, segment_id: str) -> MergeState:
    """Toggle one segment (and its group partner)"""
    session = get_session(session_id)
    session.toggle(segment_id)
    return session.state()


@router.post("/{session_id}/accept-all", response_model=MergeState)
async def accept_all(session_id: str) -> MergeState:
    """Take every change"""
    session = get_session(session_id)
    session.accept_all()
    return session.state()


@router.post("/{session_id}/reject-all", response_model=MergeState)
async def reject_all(session_id: str) -> MergeState:
    """Drop every change"""
    session = get_session(session_id)
    session.reject_all()
    return session.state()


@router.post("/{session_id}/undo", response_model=MergeState)
async def undo(session_id: str) -> MergeState:
    session = get_session(session_id)
    session.undo()
    return session.state()


@router.post("/{session_id}/redo", response_model=MergeState)
async def redo(session_id: str) -> MergeState:
    session = get_session(session_id)
    session.redo()
    return session.state()
