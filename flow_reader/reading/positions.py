"""
Conversions between the three reading-position representations.

- pacing position: `(block_index, word_index)` within the block sequence
- word count: number of words strictly before the pacing position; the
  canonical unit, independent of the RSVP chunk size
- RSVP index: position in flashes of `chunk_size` words

Every function is total: out-of-range input is clamped, never rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Sequence

from flow_reader.parsing.blocks import get_block_word_count
from flow_reader.parsing.models import Block


class PacingPosition(NamedTuple):
    block_index: int
    word_index: int


class Boundary(str, Enum):
    EMPTY = "empty"
    WITHIN = "within"
    AT_END = "at_end"
    PAST_END = "past_end"


@dataclass(frozen=True)
class PositionLookup:
    position: PacingPosition
    boundary: Boundary


def get_total_word_count(blocks: Sequence[Block]) -> int:
    return sum(get_block_word_count(block) for block in blocks)


def pacing_to_word_count(blocks: Sequence[Block], block_index: int, word_index: int) -> int:
    """
    Words in every block before `block_index` plus `word_index`. A block index
    at or past the end counts the whole sequence and still adds `word_index`.
    """
    if not blocks:
        return 0
    word_count = 0
    for block in blocks[: max(0, min(block_index, len(blocks)))]:
        word_count += get_block_word_count(block)
    return word_count + word_index


def word_count_to_pacing(blocks: Sequence[Block], word_count: int) -> PacingPosition:
    """
    Locate the block holding the word at offset `word_count`. Counts at or past
    the total clamp to the last word of the last block.
    """
    return resolve_word_count(blocks, word_count).position


def resolve_word_count(blocks: Sequence[Block], word_count: int) -> PositionLookup:
    """
    Same walk as `word_count_to_pacing`, but reports whether the count fell
    inside the document, exactly on its end, or past it.
    """
    if not blocks:
        return PositionLookup(PacingPosition(0, 0), Boundary.EMPTY)
    if word_count <= 0:
        return PositionLookup(PacingPosition(0, 0), Boundary.WITHIN)

    cumulative = 0
    for index, block in enumerate(blocks):
        block_words = get_block_word_count(block)
        if cumulative + block_words > word_count:
            return PositionLookup(PacingPosition(index, word_count - cumulative), Boundary.WITHIN)
        cumulative += block_words

    last_words = get_block_word_count(blocks[-1])
    position = PacingPosition(len(blocks) - 1, max(0, last_words - 1))
    boundary = Boundary.AT_END if word_count == cumulative else Boundary.PAST_END
    return PositionLookup(position, boundary)


def word_count_to_rsvp_index(word_count: int, chunk_size: int = 1) -> int:
    if chunk_size <= 0:
        return 0
    return word_count // chunk_size


def rsvp_index_to_word_count(rsvp_index: int, chunk_size: int = 1) -> int:
    """Word count at the start of the given RSVP flash."""
    if chunk_size <= 0:
        return 0
    return rsvp_index * chunk_size
