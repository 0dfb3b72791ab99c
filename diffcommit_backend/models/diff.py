"""Diff-related data models"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class SegmentType(str, Enum):
    """Classification of a diff segment"""

    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"


class DiffToken(BaseModel):
    """A single token produced by the word diff adapter"""

    value: str
    added: bool = False
    removed: bool = False


class DiffSegment(BaseModel):
    """One toggleable piece of a word-level diff"""

    model_config = ConfigDict(frozen=True)

    id: str
    value: str
    type: SegmentType
    included: bool
    group_id: str | None = None  # Shared by an adjacent removed/added pair


class MergeState(BaseModel):
    """Current segment snapshot plus history position"""

    segments: list[DiffSegment]
    preview_text: str
    cursor: int
    history_length: int
    can_undo: bool
    can_redo: bool


class DiffRequest(BaseModel):
    """Request to diff two versions of a document"""

    source: str
    target: str


class SessionResponse(BaseModel):
    """Identifier of a newly created merge session"""

    session_id: str
