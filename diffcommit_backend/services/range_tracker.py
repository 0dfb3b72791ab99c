"""
Range Tracker - Non-overlapping selection ranges over the current text
"""

from __future__ import annotations

import itertools
import logging

from diffcommit_backend.models.selection import SelectionRange

from .errors import InvalidRangeError

logger = logging.getLogger(__name__)

# Characters that end a word (whitespace is checked separately)
BOUNDARY_CHARS = frozenset(".,;:!?'\"()[]{}<>/\\|@#$%^&*+=~`-_")


def is_boundary(char: str) -> bool:
    """Check whether a character separates words"""
    return char.isspace() or char in BOUNDARY_CHARS


def expand_to_word_boundaries(start: int, end: int, text: str) -> tuple[int, int]:
    """Grow [start, end) outwards until both edges sit on a word boundary"""
    if not text or start >= len(text):
        return start, end

    while start > 0 and not is_boundary(text[start - 1]):
        start -= 1
    while end < len(text) and not is_boundary(text[end]):
        end += 1

    return start, end


def coalesce_ranges(ranges: list[SelectionRange], full_text: str) -> list[SelectionRange]:
    """Sort ranges by start and merge any that overlap or touch.

    A merged range keeps the id of its earliest member and re-reads its text
    from ``full_text``, since it may cover characters between the originals.
    """
    if not ranges:
        return []

    ordered = sorted(ranges, key=lambda r: r.start)
    merged = [ordered[0]]
    dirty: set[int] = set()

    for current in ordered[1:]:
        last = merged[-1]
        if current.start <= last.end + 1:
            merged[-1] = last.model_copy(update={"end": max(last.end, current.end)})
            dirty.add(len(merged) - 1)
        else:
            merged.append(current)

    return [
        r.model_copy(update={"text": full_text[r.start : r.end]}) if i in dirty else r
        for i, r in enumerate(merged)
    ]


class RangeTracker:
    """Manage the live set of user-selected ranges"""

    def __init__(self):
        self._ranges: list[SelectionRange] = []
        self._ids = itertools.count()

    def add_range(self, start: int, end: int, additive: bool, full_text: str) -> SelectionRange | None:
        """Add a selection, snapped to whole words.

        Non-additive selections replace the whole set. Returns the range as
        stored (possibly merged with neighbours), or None for an empty span.
        """
        start, end = min(start, end), max(start, end)
        if start == end:
            return None
        if start < 0 or end > len(full_text):
            raise InvalidRangeError(
                f"Range ({start}, {end}) lies outside text of length {len(full_text)}"
            )

        start, end = expand_to_word_boundaries(start, end, full_text)
        new_range = SelectionRange(
            id=f"sel_{next(self._ids)}",
            start=start,
            end=end,
            text=full_text[start:end],
        )

        based = [*self._ranges, new_range] if additive else [new_range]
        self._ranges = coalesce_ranges(based, full_text)
        logger.debug("[RangeTracker] %d live ranges after adding %s", len(self._ranges), new_range.id)

        for stored in self._ranges:
            if stored.start <= new_range.start and new_range.end <= stored.end:
                return stored
        return new_range

    def remove_range(self, range_id: str) -> bool:
        before = len(self._ranges)
        self._ranges = [r for r in self._ranges if r.id != range_id]
        return len(self._ranges) != before

    def clear(self) -> None:
        self._ranges = []

    def current_ranges(self) -> list[SelectionRange]:
        return list(self._ranges)

    def has_selection(self) -> bool:
        return bool(self._ranges)

    def concatenated_text(self) -> str:
        """Text of every range in order, separated by blank lines"""
        return "\n\n".join(r.text for r in self._ranges)
