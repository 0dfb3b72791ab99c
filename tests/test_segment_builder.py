"""Tests for building grouped diff segments."""

from __future__ import annotations

import pytest

from diffcommit_backend.models.diff import DiffToken, SegmentType
from diffcommit_backend.services.errors import MalformedAdapterOutputError
from diffcommit_backend.services.segment_builder import SegmentBuilder


def _fixed_adapter(tokens: list[DiffToken]):
    return lambda source, target: tokens


def test_sky_scenario_segments() -> None:
    """The substitution is grouped and defaults to the target text."""

    segments = SegmentBuilder().build("The sky was red.", "The sky was blue today.")

    assert [(s.value, s.type) for s in segments] == [
        ("The sky was ", SegmentType.UNCHANGED),
        ("red", SegmentType.REMOVED),
        ("blue today", SegmentType.ADDED),
        (".", SegmentType.UNCHANGED),
    ]
    assert [s.included for s in segments] == [True, False, True, True]
    assert segments[1].group_id is not None
    assert segments[1].group_id == segments[2].group_id
    assert segments[0].group_id is None and segments[3].group_id is None


@pytest.mark.parametrize(
    ("source", "target"),
    [
        ("The sky was red.", "The sky was blue today."),
        ("alpha beta gamma", "gamma beta alpha delta"),
        ("", "brand new text"),
        ("line one\nline two\n", "line one\nline 2\nline three\n"),
    ],
)
def test_segments_reproduce_source_and_target(source: str, target: str) -> None:
    segments = SegmentBuilder().build(source, target)

    assert "".join(s.value for s in segments if s.type != SegmentType.ADDED) == source
    assert "".join(s.value for s in segments if s.type != SegmentType.REMOVED) == target


def test_ids_are_unique_across_runs() -> None:
    builder = SegmentBuilder()

    first = builder.build("a b", "a c")
    second = builder.build("a b", "a c")

    first_ids = {s.id for s in first}
    assert len(first_ids) == len(first)
    assert first_ids.isdisjoint({s.id for s in second})
    assert {s.group_id for s in first if s.group_id}.isdisjoint({s.group_id for s in second if s.group_id})


def test_grouping_pairs_each_segment_at_most_once() -> None:
    """removed, added, removed pairs only the first two."""

    tokens = [
        DiffToken(value="x", removed=True),
        DiffToken(value="y", added=True),
        DiffToken(value="z", removed=True),
    ]
    segments = SegmentBuilder(_fixed_adapter(tokens)).build("xz", "y")

    assert segments[0].group_id == segments[1].group_id
    assert segments[2].group_id is None


def test_added_then_removed_is_grouped_and_unchanged_breaks_adjacency() -> None:
    tokens = [
        DiffToken(value="new", added=True),
        DiffToken(value="old", removed=True),
        DiffToken(value=" "),
        DiffToken(value="gone", removed=True),
        DiffToken(value=" "),
        DiffToken(value="here", added=True),
    ]
    segments = SegmentBuilder(_fixed_adapter(tokens)).build("old gone ", "new  here")

    assert segments[0].group_id is not None
    assert segments[0].group_id == segments[1].group_id
    assert segments[3].group_id is None
    assert segments[5].group_id is None


def test_zero_length_tokens_are_dropped() -> None:
    tokens = [DiffToken(value="a"), DiffToken(value="", added=True), DiffToken(value="b", added=True)]

    segments = SegmentBuilder(_fixed_adapter(tokens)).build("a", "ab")

    assert [s.value for s in segments] == ["a", "b"]
    assert [s.id for s in segments] == ["seg-0", "seg-1"]


def test_token_both_added_and_removed_fails_fast() -> None:
    tokens = [DiffToken(value="a", added=True, removed=True)]

    with pytest.raises(MalformedAdapterOutputError):
        SegmentBuilder(_fixed_adapter(tokens)).build("a", "a")


def test_tokens_not_matching_the_texts_fail_fast() -> None:
    tokens = [DiffToken(value="abc")]

    with pytest.raises(MalformedAdapterOutputError):
        SegmentBuilder(_fixed_adapter(tokens)).build("ab", "ab")
