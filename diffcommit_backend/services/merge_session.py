"""
Merge Session - One document's diff, merge choices and selection ranges
"""

from __future__ import annotations

import logging

from diffcommit_backend.models.diff import DiffSegment, MergeState
from diffcommit_backend.models.edit import EditMode, EditOutcome
from diffcommit_backend.models.selection import RangeResult, SelectionRange

from .edit_coordinator import RangeEditCoordinator
from .merge_history import MergeHistory
from .range_edit_service import RangeEditService
from .range_patcher import RangePatcher
from .range_tracker import RangeTracker
from .segment_builder import DiffAdapter, SegmentBuilder

logger = logging.getLogger(__name__)


class MergeSession:
    """Framework-agnostic owner of the merge core for one document"""

    def __init__(self, edit_service: RangeEditService | None = None, adapter: DiffAdapter | None = None):
        self.builder = SegmentBuilder(adapter)
        self.history = MergeHistory()
        self.tracker = RangeTracker()
        self.patcher = RangePatcher(self.tracker)
        self.coordinator = RangeEditCoordinator(edit_service, self.tracker, self.patcher) if edit_service else None
        self.source_text = ""
        self.target_text = ""

    # ========== Diff & merge ==========

    def run_diff(self, source: str, target: str) -> list[DiffSegment]:
        """Diff source against target, discarding the previous history"""
        self.cancel_edit()
        segments = self.builder.build(source, target)
        self.history.initialize(segments)
        self.source_text = source
        self.target_text = target
        return segments

    def toggle(self, segment_id: str) -> bool:
        return self.history.toggle(segment_id)

    def accept_all(self) -> None:
        self.history.accept_all()

    def reject_all(self) -> None:
        self.history.reject_all()

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def current_segments(self) -> list[DiffSegment]:
        return self.history.current()

    def preview_text(self) -> str:
        return self.history.materialize()

    def state(self) -> MergeState:
        return MergeState(
            segments=self.current_segments(),
            preview_text=self.preview_text(),
            cursor=self.history.cursor,
            history_length=len(self.history),
            can_undo=self.can_undo,
            can_redo=self.can_redo,
        )

    def reset(self) -> None:
        """Forget the diff, its history and every range"""
        if self.coordinator:
            self.coordinator.cancel()
        self.history.reset()
        self.tracker.clear()
        self.source_text = ""
        self.target_text = ""

    # ========== Selection ranges ==========

    def add_range(
        self,
        start: int,
        end: int,
        additive: bool = False,
        full_text: str | None = None,
    ) -> SelectionRange | None:
        text = self.preview_text() if full_text is None else full_text
        return self.tracker.add_range(start, end, additive, text)

    def remove_range(self, range_id: str) -> bool:
        return self.tracker.remove_range(range_id)

    def clear_ranges(self) -> None:
        self.tracker.clear()

    def current_ranges(self) -> list[SelectionRange]:
        return self.tracker.current_ranges()

    def apply_range_results(self, results: list[RangeResult], full_text: str) -> str:
        return self.patcher.apply(results, full_text)

    # ========== Range edits ==========

    def use_edit_service(self, service: RangeEditService) -> None:
        """Route later range edits through service, keeping any in-flight request cancellable"""
        if self.coordinator is None:
            self.coordinator = RangeEditCoordinator(service, self.tracker, self.patcher)
        else:
            self.coordinator.service = service

    async def edit_selection(self, mode: EditMode = EditMode.POLISH, full_text: str | None = None) -> EditOutcome:
        """Edit the selected ranges and re-diff the source against the result"""
        if self.coordinator is None:
            raise RuntimeError("MergeSession has no range edit service")

        text = self.preview_text() if full_text is None else full_text
        source = self.source_text
        outcome = await self.coordinator.run(text, mode)
        if outcome.status == "applied":
            self.run_diff(source, outcome.text)
            logger.info(
                "[MergeSession] %d selection(s) updated with %s edit",
                len(outcome.applied_ids),
                mode.value,
            )
        return outcome

    def cancel_edit(self) -> bool:
        return self.coordinator.cancel() if self.coordinator else False
