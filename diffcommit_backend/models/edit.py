"""Range edit data models"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel


class EditMode(str, Enum):
    """Kind of edit requested from the range edit service"""

    SPELLING = "spelling"
    GRAMMAR = "grammar"
    POLISH = "polish"
    PROMPT = "prompt"
    EXECUTE = "execute"


class EditOutcome(BaseModel):
    """Result of one range edit request"""

    status: Literal["applied", "cancelled"]
    text: str | None = None
    applied_ids: list[str] = []
    unmatched_ids: list[str] = []


class EditRangesRequest(BaseModel):
    """Request to edit the selected ranges with the configured LLM"""

    mode: EditMode | None = None  # Defaults to editing.defaultMode
    full_text: str | None = None
