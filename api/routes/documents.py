from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from flow_reader.parsing import (
    DocumentImporter,
    DocumentMetadata,
    DocumentRecord,
    DocumentSource,
    HtmlParsingEngine,
    ParseOptions,
    PasteParsingEngine,
    ReadingRepository,
    WhooshIndexer,
    blocks_to_dicts,
    build_document_id,
)
from flow_reader.reading import search_blocks

from api.dependencies import get_importer, get_indexer, get_parse_options, get_repo

router = APIRouter(prefix="/documents", tags=["documents"])
search_router = APIRouter(prefix="/search", tags=["search"])


class DocumentCreate(BaseModel):
    title: str
    html: Optional[str] = None
    text: Optional[str] = None
    markdown: Optional[bool] = None
    author: Optional[str] = None
    url: Optional[str] = None
    source: Optional[DocumentSource] = None
    handle_tables: Optional[bool] = None


def _document_summary(document: DocumentRecord) -> dict:
    return {
        "id": document.id,
        "title": document.title,
        "author": document.author,
        "url": document.url,
        "source": document.source,
        "block_count": document.block_count,
        "total_words": document.total_words,
        "created_at": document.created_at,
        "updated_at": document.updated_at,
    }


def get_document_or_404(document_id: str, repo: ReadingRepository) -> DocumentRecord:
    document = repo.get_document(document_id)
    if not document:
        raise HTTPException(status_code=404, detail=f"Document not found: {document_id}")
    return document


@router.post("", status_code=201)
def create_document(
    payload: DocumentCreate,
    importer: DocumentImporter = Depends(get_importer),
    options: ParseOptions = Depends(get_parse_options),
):
    if not payload.title.strip():
        raise HTTPException(status_code=400, detail="Title must not be empty")
    if (payload.html is None) == (payload.text is None):
        raise HTTPException(status_code=400, detail="Provide exactly one of html or text")

    document_id = build_document_id(payload.title)
    if importer.repo.get_document(document_id):
        raise HTTPException(status_code=409, detail=f"Document already exists: {document_id}")

    if payload.handle_tables is not None:
        options = ParseOptions(handle_tables=payload.handle_tables)
    if payload.text is not None:
        engine = PasteParsingEngine(options, markdown=payload.markdown)
        markup, default_source = payload.text, DocumentSource.PASTE
    else:
        engine = HtmlParsingEngine(options)
        markup, default_source = payload.html, DocumentSource.WEB
    importer = DocumentImporter(repository=importer.repo, engine=engine, indexer=importer.indexer)

    metadata = DocumentMetadata(
        title=payload.title,
        source=payload.source or default_source,
        author=payload.author,
        url=payload.url,
    )
    try:
        result = importer.import_source(markup, metadata, document_id=document_id)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    return {
        "id": result.document_id,
        "title": payload.title,
        "block_count": len(result.document.blocks),
        "total_words": result.total_words,
    }


@router.get("")
def list_documents(repo: ReadingRepository = Depends(get_repo)):
    return [_document_summary(d) for d in repo.list_documents()]


@router.get("/{document_id}")
def get_document(document_id: str, repo: ReadingRepository = Depends(get_repo)):
    document = get_document_or_404(document_id, repo)
    summary = _document_summary(document)
    summary["blocks"] = blocks_to_dicts(repo.list_blocks(document_id))
    return summary


@router.delete("/{document_id}", status_code=204)
def delete_document(document_id: str, importer: DocumentImporter = Depends(get_importer)):
    try:
        importer.remove(document_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/{document_id}/search")
def search_document(document_id: str, query: str, repo: ReadingRepository = Depends(get_repo)):
    if not query or not query.strip():
        raise HTTPException(status_code=400, detail="Query must not be empty")
    get_document_or_404(document_id, repo)
    matches = search_blocks(repo.list_blocks(document_id), query)
    return {"matches": [asdict(m) for m in matches]}


@search_router.get("")
def search_library(query: str, limit: int = 20, indexer: WhooshIndexer = Depends(get_indexer)):
    if not query or not query.strip():
        raise HTTPException(status_code=400, detail="Query must not be empty")
    return {"hits": indexer.search(query, limit=limit)}
