"""
Segment Builder - Turn word diff tokens into toggleable, grouped segments
"""

from __future__ import annotations

import itertools
import logging
from typing import Callable

from diffcommit_backend.models.diff import DiffSegment, DiffToken, SegmentType

from .errors import MalformedAdapterOutputError
from .word_diff import diff_words

logger = logging.getLogger(__name__)

DiffAdapter = Callable[[str, str], list[DiffToken]]

# Removed text starts out excluded from the preview
DEFAULT_INCLUSION = {
    SegmentType.UNCHANGED: True,
    SegmentType.ADDED: True,
    SegmentType.REMOVED: False,
}


class SegmentBuilder:
    """Build classified, grouped diff segments from two texts.

    Id counters belong to the builder and keep increasing across diff runs,
    so an id handed out by an earlier run never names a segment of a later one.
    """

    def __init__(self, adapter: DiffAdapter | None = None):
        self._adapter = adapter or diff_words
        self._segment_ids = itertools.count()
        self._group_ids = itertools.count()

    def build(self, source: str, target: str) -> list[DiffSegment]:
        """Diff source against target and return the initial segment list"""
        tokens = [token for token in self._adapter(source, target) if token.value]
        self._validate(tokens, source, target)

        segments = [self._make_segment(token) for token in tokens]
        segments = self._group_substitutions(segments)

        logger.debug(
            "[SegmentBuilder] Built %d segments (%d groups)",
            len(segments),
            len({s.group_id for s in segments if s.group_id}),
        )
        return segments

    def _make_segment(self, token: DiffToken) -> DiffSegment:
        if token.added:
            segment_type = SegmentType.ADDED
        elif token.removed:
            segment_type = SegmentType.REMOVED
        else:
            segment_type = SegmentType.UNCHANGED

        return DiffSegment(
            id=f"seg-{next(self._segment_ids)}",
            value=token.value,
            type=segment_type,
            included=DEFAULT_INCLUSION[segment_type],
        )

    def _group_substitutions(self, segments: list[DiffSegment]) -> list[DiffSegment]:
        """Pair each removed/added neighbour couple under a shared group id"""
        grouped = list(segments)
        changed = {SegmentType.ADDED, SegmentType.REMOVED}

        i = 0
        while i < len(grouped) - 1:
            current, following = grouped[i], grouped[i + 1]
            if {current.type, following.type} == changed:
                group_id = f"group-{next(self._group_ids)}"
                grouped[i] = current.model_copy(update={"group_id": group_id})
                grouped[i + 1] = following.model_copy(update={"group_id": group_id})
                i += 2
            else:
                i += 1

        return grouped

    def _validate(self, tokens: list[DiffToken], source: str, target: str) -> None:
        """Reject adapter output that cannot describe source and target"""
        for index, token in enumerate(tokens):
            if token.added and token.removed:
                raise MalformedAdapterOutputError(
                    f"Token {index} ({token.value!r}) is marked both added and removed"
                )

        rebuilt_source = "".join(t.value for t in tokens if not t.added)
        if rebuilt_source != source:
            raise MalformedAdapterOutputError("Unchanged and removed tokens do not reproduce the source text")

        rebuilt_target = "".join(t.value for t in tokens if not t.removed)
        if rebuilt_target != target:
            raise MalformedAdapterOutputError("Unchanged and added tokens do not reproduce the target text")
