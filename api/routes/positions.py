from __future__ import annotations

import asyncio
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from flow_reader.parsing import Block, ReadingProgressRecord, ReadingRepository
from flow_reader.reading import (
    ProgressTracker,
    calculate_progress,
    get_total_word_count,
    pacing_to_word_count,
    resolve_word_count,
    rsvp_index_to_word_count,
    word_count_to_pacing,
    word_count_to_rsvp_index,
)

from api.dependencies import DEFAULT_CHUNK_SIZE, get_repo, get_tracker
from api.routes.documents import get_document_or_404

router = APIRouter(prefix="/documents", tags=["positions"])


class ProgressUpdate(BaseModel):
    word_count: Optional[int] = None
    block_index: Optional[int] = None
    word_index: Optional[int] = None
    rsvp_index: Optional[int] = None
    chunk_size: Optional[int] = None


def _chunk_size_or_400(chunk_size: Optional[int]) -> int:
    chunk_size = DEFAULT_CHUNK_SIZE if chunk_size is None else chunk_size
    if chunk_size < 1:
        raise HTTPException(status_code=400, detail="chunk_size must be at least 1")
    return chunk_size


def requested_word_count(
    blocks: List[Block],
    word_count: Optional[int],
    block_index: Optional[int],
    word_index: Optional[int],
    rsvp_index: Optional[int],
    chunk_size: int,
) -> int:
    """
    Convert exactly one position representation to a word count. Mixing
    representations, giving half a pacing position or negative values is a
    client error.
    """
    pacing_given = block_index is not None or word_index is not None
    given = sum([word_count is not None, pacing_given, rsvp_index is not None])
    if given != 1:
        raise HTTPException(
            status_code=400,
            detail="Provide exactly one of word_count, block_index+word_index or rsvp_index",
        )

    if word_count is not None:
        if word_count < 0:
            raise HTTPException(status_code=400, detail="word_count must not be negative")
        return word_count

    if pacing_given:
        if block_index is None or word_index is None:
            raise HTTPException(status_code=400, detail="block_index and word_index must be given together")
        if block_index < 0 or word_index < 0:
            raise HTTPException(status_code=400, detail="block_index and word_index must not be negative")
        return pacing_to_word_count(blocks, block_index, word_index)

    if rsvp_index < 0:
        raise HTTPException(status_code=400, detail="rsvp_index must not be negative")
    return rsvp_index_to_word_count(rsvp_index, chunk_size)


@router.get("/{document_id}/position")
def get_position(
    document_id: str,
    word_count: Optional[int] = None,
    block_index: Optional[int] = None,
    word_index: Optional[int] = None,
    rsvp_index: Optional[int] = None,
    chunk_size: Optional[int] = None,
    repo: ReadingRepository = Depends(get_repo),
):
    get_document_or_404(document_id, repo)
    chunk_size = _chunk_size_or_400(chunk_size)
    blocks = repo.list_blocks(document_id)
    count = requested_word_count(blocks, word_count, block_index, word_index, rsvp_index, chunk_size)
    lookup = resolve_word_count(blocks, count)
    return {
        "word_count": count,
        "block_index": lookup.position.block_index,
        "word_index": lookup.position.word_index,
        "rsvp_index": word_count_to_rsvp_index(count, chunk_size),
        "chunk_size": chunk_size,
        "total_words": get_total_word_count(blocks),
        "boundary": lookup.boundary.value,
    }


def _document_blocks_or_404(repo: ReadingRepository, document_id: str) -> List[Block]:
    get_document_or_404(document_id, repo)
    return repo.list_blocks(document_id)


def _progress_body(record: ReadingProgressRecord, blocks: List[Block], chunk_size: int) -> dict:
    total_words = get_total_word_count(blocks)
    position = word_count_to_pacing(blocks, record.word_count)
    return {
        "document_id": record.document_id,
        "word_count": record.word_count,
        "furthest_word_count": record.furthest_word_count,
        "block_index": position.block_index,
        "word_index": position.word_index,
        "rsvp_index": word_count_to_rsvp_index(record.word_count, chunk_size),
        "total_words": total_words,
        "percent": calculate_progress(record.word_count, total_words).percent,
        "completed": record.completed,
    }


@router.get("/{document_id}/progress")
def get_progress(
    document_id: str,
    chunk_size: Optional[int] = None,
    repo: ReadingRepository = Depends(get_repo),
    tracker: ProgressTracker = Depends(get_tracker),
):
    chunk_size = _chunk_size_or_400(chunk_size)
    blocks = _document_blocks_or_404(repo, document_id)
    return _progress_body(tracker.load_progress(document_id), blocks, chunk_size)


@router.put("/{document_id}/progress")
async def update_progress(
    document_id: str,
    payload: ProgressUpdate,
    repo: ReadingRepository = Depends(get_repo),
    tracker: ProgressTracker = Depends(get_tracker),
):
    chunk_size = _chunk_size_or_400(payload.chunk_size)
    loop = asyncio.get_running_loop()
    blocks = await loop.run_in_executor(None, _document_blocks_or_404, repo, document_id)
    count = requested_word_count(
        blocks, payload.word_count, payload.block_index, payload.word_index, payload.rsvp_index, chunk_size
    )
    record = await tracker.save_word_count(document_id, count, get_total_word_count(blocks))
    return _progress_body(record, blocks, chunk_size)
