"""Selection range API endpoints"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from diffcommit_backend.models.edit import EditMode, EditOutcome, EditRangesRequest
from diffcommit_backend.models.selection import (
    AddRangeRequest,
    ApplyResultsRequest,
    RangesResponse,
)
from diffcommit_backend.services.config_manager import ConfigManager
from diffcommit_backend.services.errors import InvalidRangeError, NoSelectionError, RangeEditError
from diffcommit_backend.services.range_edit_service import LLMRangeEditService, RangeEditService

from .merge import get_session

logger = logging.getLogger(__name__)

router = APIRouter()


def get_edit_service() -> RangeEditService:
    """Range edit service built from the current configuration"""
    config = ConfigManager.get_instance().get_config()
    return LLMRangeEditService(config)


def _ranges_response(session) -> RangesResponse:
    return RangesResponse(
        ranges=session.current_ranges(),
        concatenated_text=session.tracker.concatenated_text(),
    )


@router.get("/{session_id}/ranges", response_model=RangesResponse)
async def current_ranges(session_id: str) -> RangesResponse:
    """Get the live selection ranges"""
    return _ranges_response(get_session(session_id))


@router.post("/{session_id}/ranges", response_model=RangesResponse)
async def add_range(session_id: str, request: AddRangeRequest) -> RangesResponse:
    """Add a selection range, snapped to word boundaries"""
    session = get_session(session_id)
    try:
        session.add_range(request.start, request.end, request.additive, request.full_text)
    except InvalidRangeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _ranges_response(session)


@router.delete("/{session_id}/ranges/{range_id}", response_model=RangesResponse)
async def remove_range(session_id: str, range_id: str) -> RangesResponse:
    session = get_session(session_id)
    session.remove_range(range_id)
    return _ranges_response(session)


@router.delete("/{session_id}/ranges", response_model=RangesResponse)
async def clear_ranges(session_id: str) -> RangesResponse:
    session = get_session(session_id)
    session.clear_ranges()
    return _ranges_response(session)


@router.post("/{session_id}/ranges/apply")
async def apply_results(session_id: str, request: ApplyResultsRequest) -> dict:
    """Splice externally computed results into the text and clear the ranges"""
    session = get_session(session_id)
    try:
        text = session.apply_range_results(request.results, request.full_text)
    except InvalidRangeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"text": text}


@router.post("/{session_id}/ranges/edit", response_model=EditOutcome)
async def edit_ranges(
    session_id: str,
    request: EditRangesRequest,
    service: RangeEditService = Depends(get_edit_service),
) -> EditOutcome:
    """Edit the selected ranges with the LLM and re-diff the result"""
    session = get_session(session_id)
    session.use_edit_service(service)

    mode = request.mode
    if mode is None:
        default_mode = ConfigManager.get_instance().get_config().get("editing", {}).get("defaultMode", "polish")
        try:
            mode = EditMode(default_mode)
        except ValueError:
            logger.warning("[Selection] Unknown default edit mode %r, using polish", default_mode)
            mode = EditMode.POLISH

    try:
        return await session.edit_selection(mode, request.full_text)
    except NoSelectionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except InvalidRangeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except RangeEditError as e:
        raise HTTPException(status_code=502, detail=f"Range edit failed: {e}")


@router.post("/{session_id}/ranges/edit/cancel")
async def cancel_edit(session_id: str) -> dict:
    """Cancel the in-flight range edit, if any"""
    return {"cancelled": get_session(session_id).cancel_edit()}
