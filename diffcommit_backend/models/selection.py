"""Selection range data models"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SelectionRange(BaseModel):
    """A half-open span of the current output text"""

    model_config = ConfigDict(frozen=True)

    id: str  # "sel_0", "sel_1", ...
    start: int
    end: int
    text: str  # Cached substring of the full text


class RangeInput(BaseModel):
    """Range payload handed to the edit service"""

    id: str
    text: str


class RangeResult(BaseModel):
    """Replacement text produced for one range"""

    id: str
    result: str


class AddRangeRequest(BaseModel):
    """Request to add a selection range"""

    start: int
    end: int
    additive: bool = False  # Keep existing ranges (Ctrl+drag)
    full_text: str | None = None  # Defaults to the session preview


class ApplyResultsRequest(BaseModel):
    """Externally computed replacements for the live ranges"""

    results: list[RangeResult]
    full_text: str


class RangesResponse(BaseModel):
    """Live selection ranges of a session"""

    ranges: list[SelectionRange]
    concatenated_text: str
