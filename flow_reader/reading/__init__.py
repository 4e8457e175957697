"""
Reading-position subsystem exports.
"""

from .mutex import AsyncMutex, storage_mutex
from .positions import (
    Boundary,
    PacingPosition,
    PositionLookup,
    get_total_word_count,
    pacing_to_word_count,
    resolve_word_count,
    rsvp_index_to_word_count,
    word_count_to_pacing,
    word_count_to_rsvp_index,
)
from .progress import (
    ProgressTracker,
    ReadingProgress,
    calculate_progress,
    estimate_minutes_remaining,
    format_duration,
)
from .search import (
    SearchMatch,
    find_match_index,
    get_match_for_word,
    get_next_match_index,
    get_prev_match_index,
    search_blocks,
)

__all__ = [
    "AsyncMutex",
    "Boundary",
    "PacingPosition",
    "PositionLookup",
    "ProgressTracker",
    "ReadingProgress",
    "SearchMatch",
    "calculate_progress",
    "estimate_minutes_remaining",
    "find_match_index",
    "format_duration",
    "get_match_for_word",
    "get_next_match_index",
    "get_prev_match_index",
    "get_total_word_count",
    "pacing_to_word_count",
    "resolve_word_count",
    "rsvp_index_to_word_count",
    "search_blocks",
    "storage_mutex",
    "word_count_to_pacing",
    "word_count_to_rsvp_index",
]
