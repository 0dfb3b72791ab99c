"""Error types raised by the merge services"""

from __future__ import annotations


class MergeError(Exception):
    """Base class for merge service errors"""


class MalformedAdapterOutputError(MergeError):
    """The word diff adapter broke its output contract"""


class InvalidRangeError(MergeError, ValueError):
    """A selection range does not fit the text it refers to"""


class NoSelectionError(MergeError):
    """A range edit was requested without any live range"""


class RangeEditError(MergeError):
    """The range edit service failed or returned an unusable answer"""
