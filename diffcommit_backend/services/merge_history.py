"""
Merge History Engine - Undoable segment inclusion choices
"""

from __future__ import annotations

import logging

from diffcommit_backend.models.diff import DiffSegment, SegmentType

logger = logging.getLogger(__name__)


class MergeHistory:
    """Stack of segment-list snapshots with a cursor.

    Every snapshot of one diff run holds the same segment ids in the same
    order, so the id index and the group lookup are built once in
    ``initialize`` and shared by all of them.
    """

    def __init__(self):
        self._snapshots: list[list[DiffSegment]] = []
        self._cursor = -1
        self._index_by_id: dict[str, int] = {}
        self._groups: dict[str, tuple[int, int]] = {}

    # ========== State ==========

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def current(self) -> list[DiffSegment]:
        """Segments of the snapshot under the cursor"""
        if self._cursor < 0:
            return []
        return list(self._snapshots[self._cursor])

    def materialize(self) -> str:
        """Preview text: included segment values in sequence order"""
        return "".join(s.value for s in self.current() if s.included)

    # ========== Lifecycle ==========

    def initialize(self, segments: list[DiffSegment]) -> None:
        """Start a fresh history with a single snapshot"""
        self._snapshots = [list(segments)]
        self._cursor = 0
        self._index_by_id = {s.id: i for i, s in enumerate(segments)}

        members: dict[str, list[int]] = {}
        for i, segment in enumerate(segments):
            if segment.group_id:
                members.setdefault(segment.group_id, []).append(i)
        self._groups = {gid: (idx[0], idx[1]) for gid, idx in members.items() if len(idx) == 2}

        logger.info("[MergeHistory] Initialized with %d segments", len(segments))

    def reset(self) -> None:
        """Drop every snapshot"""
        self._snapshots = []
        self._cursor = -1
        self._index_by_id = {}
        self._groups = {}

    # ========== Edits ==========

    def toggle(self, segment_id: str) -> bool:
        """Flip a segment's inclusion; its group partner takes the opposite value.

        Unknown ids are ignored and return False.
        """
        index = self._index_by_id.get(segment_id)
        if index is None or self._cursor < 0:
            logger.debug("[MergeHistory] Ignoring toggle of unknown segment %s", segment_id)
            return False

        segments = self.current()
        segment = segments[index]
        included = not segment.included
        segments[index] = segment.model_copy(update={"included": included})

        if segment.group_id in self._groups:
            first, second = self._groups[segment.group_id]
            partner = second if first == index else first
            segments[partner] = segments[partner].model_copy(update={"included": not included})

        self._push(segments)
        return True

    def accept_all(self) -> None:
        """Include every added segment and exclude every removed one"""
        self._set_changes(added=True, removed=False)

    def reject_all(self) -> None:
        """Exclude every added segment and include every removed one"""
        self._set_changes(added=False, removed=True)

    def _set_changes(self, added: bool, removed: bool) -> None:
        if self._cursor < 0:
            return

        wanted = {SegmentType.ADDED: added, SegmentType.REMOVED: removed}
        segments = [
            s.model_copy(update={"included": wanted[s.type]})
            if s.type in wanted and s.included != wanted[s.type]
            else s
            for s in self.current()
        ]
        self._push(segments)

    def _push(self, segments: list[DiffSegment]) -> None:
        """Truncate redo entries, append a snapshot, move the cursor to it"""
        del self._snapshots[self._cursor + 1 :]
        self._snapshots.append(segments)
        self._cursor = len(self._snapshots) - 1

    # ========== Navigation ==========

    def undo(self) -> bool:
        if not self.can_undo:
            return False
        self._cursor -= 1
        return True

    def redo(self) -> bool:
        if not self.can_redo:
            return False
        self._cursor += 1
        return True
