"""Models module - Pydantic data models"""

from .diff import DiffRequest, DiffSegment, DiffToken, MergeState, SegmentType, SessionResponse
from .edit import EditMode, EditOutcome, EditRangesRequest
from .selection import (
    AddRangeRequest,
    ApplyResultsRequest,
    RangeInput,
    RangeResult,
    RangesResponse,
    SelectionRange,
)

__all__ = [
    # Diff models
    "DiffRequest",
    "DiffSegment",
    "DiffToken",
    "MergeState",
    "SegmentType",
    "SessionResponse",
    # Selection models
    "AddRangeRequest",
    "ApplyResultsRequest",
    "RangeInput",
    "RangeResult",
    "RangesResponse",
    "SelectionRange",
    # Edit models
    "EditMode",
    "EditOutcome",
    "EditRangesRequest",
]
