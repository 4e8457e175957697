from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from flow_reader.parsing.models import Block, ReadingProgressRecord
from flow_reader.parsing.repository import ReadingRepository

from .mutex import AsyncMutex, storage_mutex
from .positions import (
    PacingPosition,
    get_total_word_count,
    pacing_to_word_count,
    rsvp_index_to_word_count,
    word_count_to_pacing,
    word_count_to_rsvp_index,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadingProgress:
    percent: int
    label: str


def calculate_progress(word_count: int, total_words: int) -> ReadingProgress:
    if total_words <= 0:
        percent = 0
    else:
        percent = round(min(max(word_count, 0), total_words) / total_words * 100)
    return ReadingProgress(percent=percent, label=f"{percent}%")


def estimate_minutes_remaining(blocks: Sequence[Block], word_count: int, wpm: int) -> float:
    if wpm <= 0:
        return 0.0
    remaining = max(0, get_total_word_count(blocks) - max(0, word_count))
    return remaining / wpm


def format_duration(minutes: float) -> str:
    if minutes < 1:
        return f"{round(minutes * 60)}s"
    if minutes < 60:
        return f"{round(minutes)}m"
    hours = int(minutes // 60)
    mins = round(minutes % 60)
    return f"{hours}h {mins}m" if mins > 0 else f"{hours}h"


class ProgressTracker:
    """
    Persists reading progress as one canonical word count per document.

    Pacing positions and RSVP indices are converted to word counts before they
    are stored, and derived again on load, so a change of chunk size never
    invalidates saved progress. Every read-modify-write goes through the mutex.
    """

    def __init__(self, repository: ReadingRepository, mutex: Optional[AsyncMutex] = None):
        self.repo = repository
        self.mutex = mutex or storage_mutex

    async def save_word_count(self, document_id: str, word_count: int, total_words: int) -> ReadingProgressRecord:
        # the repository is synchronous; its read-modify-write runs in the default executor
        loop = asyncio.get_running_loop()
        return await self.mutex.run_exclusive(
            loop.run_in_executor, None, self._update, document_id, word_count, total_words
        )

    async def save_pacing_position(
        self, document_id: str, blocks: Sequence[Block], block_index: int, word_index: int
    ) -> ReadingProgressRecord:
        word_count = pacing_to_word_count(blocks, block_index, word_index)
        return await self.save_word_count(document_id, word_count, get_total_word_count(blocks))

    async def save_rsvp_index(
        self, document_id: str, blocks: Sequence[Block], rsvp_index: int, chunk_size: int
    ) -> ReadingProgressRecord:
        word_count = rsvp_index_to_word_count(rsvp_index, chunk_size)
        return await self.save_word_count(document_id, word_count, get_total_word_count(blocks))

    def load_progress(self, document_id: str) -> ReadingProgressRecord:
        """Stored record, or a fresh one at word 0 for documents never opened."""
        return self.repo.get_progress(document_id) or ReadingProgressRecord(document_id=document_id)

    def load_word_count(self, document_id: str) -> int:
        return self.load_progress(document_id).word_count

    def load_pacing_position(self, document_id: str, blocks: Sequence[Block]) -> PacingPosition:
        return word_count_to_pacing(blocks, self.load_word_count(document_id))

    def load_rsvp_index(self, document_id: str, chunk_size: int) -> int:
        return word_count_to_rsvp_index(self.load_word_count(document_id), chunk_size)

    def _update(self, document_id: str, word_count: int, total_words: int) -> ReadingProgressRecord:
        current = self.load_progress(document_id)
        total_words = max(0, total_words)
        clamped = min(max(0, word_count), total_words)
        if clamped != word_count:
            logger.debug("Clamped word count %d to %d for %s", word_count, clamped, document_id)

        current.word_count = clamped
        current.total_words = total_words
        current.furthest_word_count = min(max(current.furthest_word_count, clamped), total_words)
        current.completed = current.completed or (total_words > 0 and clamped >= total_words)
        current.updated_at = datetime.utcnow()
        self.repo.save_progress(current)
        return current
