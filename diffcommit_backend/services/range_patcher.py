"""
Range Patcher - Splice edit results back into the text
"""

from __future__ import annotations

import logging

from diffcommit_backend.models.selection import RangeResult, SelectionRange

from .errors import InvalidRangeError
from .range_tracker import RangeTracker

logger = logging.getLogger(__name__)


def apply_range_results(
    ranges: list[SelectionRange],
    results: list[RangeResult],
    full_text: str,
) -> str:
    """Replace each range that has a result, highest offset first.

    Working from the end keeps the offsets of the ranges still to be
    processed valid. Ranges without a result keep their original text.
    """
    for r in ranges:
        if r.start < 0 or r.end > len(full_text) or r.start > r.end:
            raise InvalidRangeError(
                f"Range {r.id} ({r.start}, {r.end}) lies outside text of length {len(full_text)}"
            )

    replacements: dict[str, str] = {}
    for result in results:
        replacements.setdefault(result.id, result.result)

    text = full_text
    for r in sorted(ranges, key=lambda r: r.start, reverse=True):
        if r.id in replacements:
            text = text[: r.start] + replacements[r.id] + text[r.end :]

    return text


class RangePatcher:
    """Apply edit results for a tracker's ranges, then clear the tracker"""

    def __init__(self, tracker: RangeTracker):
        self._tracker = tracker

    def apply(
        self,
        results: list[RangeResult],
        full_text: str,
        ranges: list[SelectionRange] | None = None,
    ) -> str:
        """Patch full_text and drop every tracked range.

        ``ranges`` is the snapshot taken when the edit was requested; the
        tracker's live set is used when it is omitted.
        """
        snapshot = self._tracker.current_ranges() if ranges is None else ranges
        new_text = apply_range_results(snapshot, results, full_text)

        matched = {r.id for r in snapshot} & {res.id for res in results}
        logger.info(
            "[RangePatcher] Applied %d of %d ranges (text %d -> %d chars)",
            len(matched),
            len(snapshot),
            len(full_text),
            len(new_text),
        )

        # Offsets no longer match the new text
        self._tracker.clear()
        return new_text
