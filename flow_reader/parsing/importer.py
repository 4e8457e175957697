from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .blocks import create_document, get_block_word_count
from .engine import ParsingEngine
from .indexing import Indexer
from .models import DocumentMetadata, DocumentRecord, FlowDocument
from .repository import ReadingRepository

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    document_id: str
    document: FlowDocument
    total_words: int


def build_document_id(title: str) -> str:
    normalized = title.strip().lower()
    slug = "".join(ch if ch.isalnum() else "-" for ch in normalized).strip("-") or "document"
    digest = hashlib.md5(normalized.encode("utf-8")).hexdigest()[:8]
    return f"{slug}-{digest}"


class DocumentImporter:
    """
    Drives a source through parse -> persist -> index. The importer is
    stateless; the repository owns documents and block sequences and the
    indexer owns full-text search.
    """

    def __init__(self, repository: ReadingRepository, engine: ParsingEngine, indexer: Indexer):
        self.repo = repository
        self.engine = engine
        self.indexer = indexer

    def import_source(self, source, metadata: DocumentMetadata, document_id: Optional[str] = None) -> ImportResult:
        document_id = document_id or build_document_id(metadata.title)
        try:
            blocks = self.engine.parse(source)
            if not blocks:
                raise ValueError(f"No readable content in document {document_id}")
            document = create_document(blocks, metadata)
            total_words = sum(get_block_word_count(b) for b in document.blocks)

            existing = self.repo.get_document(document_id)
            record = DocumentRecord(
                id=document_id,
                title=metadata.title,
                source=metadata.source,
                author=metadata.author,
                url=metadata.url,
                block_count=len(document.blocks),
                total_words=total_words,
                created_at=existing.created_at if existing else metadata.created_at,
                updated_at=datetime.utcnow(),
            )
            self.repo.save_document(record)
            self.repo.replace_blocks(document_id, document.blocks)
            self.indexer.index_document(document_id, document.blocks)
        except Exception:
            logger.exception("Import of document %s failed", document_id)
            raise

        logger.info("Imported document %s: %d blocks, %d words", document_id, len(document.blocks), total_words)
        return ImportResult(document_id=document_id, document=document, total_words=total_words)

    def remove(self, document_id: str) -> None:
        if not self.repo.get_document(document_id):
            raise ValueError(f"Document {document_id} not found")
        self.indexer.delete_document(document_id)
        self.repo.delete_document(document_id)
