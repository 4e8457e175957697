from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import List, Optional, Sequence

from flow_reader.parsing.blocks import get_block_text, get_block_word_count
from flow_reader.parsing.models import Block
from flow_reader.parsing.tokenizer import tokenize_into_words

_NON_ALNUM_RE = re.compile(r"[\W_]+", re.UNICODE)


@dataclass(frozen=True)
class SearchMatch:
    block_index: int
    start_word_index: int
    end_word_index: int  # inclusive
    text: str
    word_count: int


def normalize_for_search(text: str) -> str:
    """Lowercase and strip combining accents so "Café" matches "cafe"."""
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _clean(word: str) -> str:
    return _NON_ALNUM_RE.sub("", normalize_for_search(word))


def search_block(block: Block, query: str, block_index: int, word_offset: int = 0) -> List[SearchMatch]:
    """
    Sliding-window match of the query words against the block words. Each
    query word must be contained in the document word at the same offset.
    """
    query_words = [w for w in (_clean(q) for q in query.split()) if w]
    if not query_words:
        return []
    words = tokenize_into_words(get_block_text(block))
    if len(words) < len(query_words):
        return []

    cleaned = [_clean(w.text) for w in words]
    matches: List[SearchMatch] = []
    for start in range(len(words) - len(query_words) + 1):
        if all(q in cleaned[start + j] for j, q in enumerate(query_words)):
            end = start + len(query_words) - 1
            matches.append(
                SearchMatch(
                    block_index=block_index,
                    start_word_index=start,
                    end_word_index=end,
                    text=" ".join(w.text for w in words[start : end + 1]),
                    word_count=word_offset + start,
                )
            )
    return matches


def search_blocks(blocks: Sequence[Block], query: str) -> List[SearchMatch]:
    """All matches in document order."""
    if not query or not query.strip():
        return []
    matches: List[SearchMatch] = []
    offset = 0
    for index, block in enumerate(blocks):
        matches.extend(search_block(block, query, index, word_offset=offset))
        offset += get_block_word_count(block)
    return matches


def get_match_for_word(block_index: int, word_index: int, matches: Sequence[SearchMatch]) -> Optional[SearchMatch]:
    for match in matches:
        if match.block_index == block_index and match.start_word_index <= word_index <= match.end_word_index:
            return match
    return None


def find_match_index(block_index: int, word_index: int, matches: Sequence[SearchMatch]) -> int:
    for index, match in enumerate(matches):
        if match.block_index == block_index and match.start_word_index <= word_index <= match.end_word_index:
            return index
    return -1


def get_next_match_index(current_index: int, total_matches: int) -> int:
    if total_matches == 0:
        return -1
    return (current_index + 1) % total_matches


def get_prev_match_index(current_index: int, total_matches: int) -> int:
    if total_matches == 0:
        return -1
    if current_index <= 0:
        return total_matches - 1
    return current_index - 1
