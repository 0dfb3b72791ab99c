"""
Edit Coordinator - Issue cancellable range edits and apply their results
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from diffcommit_backend.models.edit import EditMode, EditOutcome
from diffcommit_backend.models.selection import RangeInput

from .errors import InvalidRangeError, NoSelectionError
from .range_edit_service import RangeEditService
from .range_patcher import RangePatcher
from .range_tracker import RangeTracker

logger = logging.getLogger(__name__)


@dataclass
class _PendingEdit:
    task: asyncio.Future
    cancelled: bool = False


class RangeEditCoordinator:
    """Keep at most one authoritative range edit in flight.

    Ranges and text are captured when a request is issued. A request that
    is cancelled, or superseded by a newer one, leaves both untouched.
    """

    def __init__(self, service: RangeEditService, tracker: RangeTracker, patcher: RangePatcher):
        self.service = service
        self._tracker = tracker
        self._patcher = patcher
        self._pending: _PendingEdit | None = None

    @property
    def in_flight(self) -> bool:
        return self._pending is not None

    def cancel(self) -> bool:
        """Cancel the in-flight request, if any"""
        pending, self._pending = self._pending, None
        if pending is None:
            return False
        pending.cancelled = True
        pending.task.cancel()
        logger.info("[EditCoordinator] Cancelled in-flight range edit")
        return True

    async def run(self, full_text: str, mode: EditMode = EditMode.POLISH) -> EditOutcome:
        """Edit every live range of full_text and return the patched text"""
        ranges = self._tracker.current_ranges()
        if not ranges:
            raise NoSelectionError("No ranges selected")
        for r in ranges:
            if full_text[r.start : r.end] != r.text:
                raise InvalidRangeError(f"Range {r.id} no longer matches the text at {r.start}-{r.end}")

        self.cancel()

        inputs = [RangeInput(id=r.id, text=r.text) for r in ranges]
        pending = _PendingEdit(task=asyncio.ensure_future(self.service.edit_ranges(inputs, mode)))
        self._pending = pending
        logger.info("[EditCoordinator] Requested %s edit for %d ranges", mode.value, len(inputs))

        try:
            results = await pending.task
        except asyncio.CancelledError:
            if pending.cancelled:
                return EditOutcome(status="cancelled")
            raise
        finally:
            if self._pending is pending:
                self._pending = None

        # Cancellation may land after the service answered but before we resumed
        if pending.cancelled:
            return EditOutcome(status="cancelled")

        new_text = self._patcher.apply(results, full_text, ranges=ranges)
        returned = {r.id for r in results}
        return EditOutcome(
            status="applied",
            text=new_text,
            applied_ids=[r.id for r in ranges if r.id in returned],
            unmatched_ids=[r.id for r in ranges if r.id not in returned],
        )
