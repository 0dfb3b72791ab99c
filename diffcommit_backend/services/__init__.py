"""Services module - Business logic layer"""

from .config_manager import ConfigManager
from .edit_coordinator import RangeEditCoordinator
from .errors import (
    InvalidRangeError,
    MalformedAdapterOutputError,
    MergeError,
    NoSelectionError,
    RangeEditError,
)
from .llm_service import LLMService
from .merge_history import MergeHistory
from .merge_session import MergeSession
from .range_edit_service import LLMRangeEditService, RangeEditService
from .range_patcher import RangePatcher, apply_range_results
from .range_tracker import RangeTracker
from .segment_builder import SegmentBuilder
from .word_diff import WordDiffAdapter, diff_words

__all__ = [
    "ConfigManager",
    "InvalidRangeError",
    "LLMRangeEditService",
    "LLMService",
    "MalformedAdapterOutputError",
    "MergeError",
    "MergeHistory",
    "MergeSession",
    "NoSelectionError",
    "RangeEditCoordinator",
    "RangeEditError",
    "RangeEditService",
    "RangePatcher",
    "RangeTracker",
    "SegmentBuilder",
    "WordDiffAdapter",
    "apply_range_results",
    "diff_words",
]
