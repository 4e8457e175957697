from __future__ import annotations

import json
from copy import deepcopy
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String, Text, create_engine, delete, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .blocks import block_from_dict, block_to_dict
from .models import Block, DocumentRecord, DocumentSource, ReadingProgressRecord

Base = declarative_base()


class DocumentModel(Base):
    __tablename__ = "documents"
    id = Column(String, primary_key=True)
    title = Column(String)
    source = Column(Enum(DocumentSource))
    author = Column(String)
    url = Column(String)
    block_count = Column(Integer)
    total_words = Column(Integer)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)


class BlockModel(Base):
    __tablename__ = "blocks"
    document_id = Column(String, primary_key=True)
    block_id = Column(String, primary_key=True)
    reading_order = Column(Integer, index=True)
    block_type = Column(String)
    content = Column(Text)
    items_json = Column(Text)
    level = Column(Integer)
    ordered = Column(Boolean)
    language = Column(String)


class ReadingProgressModel(Base):
    __tablename__ = "reading_progress"
    document_id = Column(String, primary_key=True)
    word_count = Column(Integer)
    furthest_word_count = Column(Integer)
    total_words = Column(Integer)
    completed = Column(Boolean)
    updated_at = Column(DateTime)


class ReadingRepository:
    """
    Persistence boundary for documents, their block sequences and the single
    canonical word count stored per document as reading progress. All methods
    are synchronous; async callers serialize writes through `AsyncMutex`.
    """

    # Document operations
    def get_document(self, document_id: str) -> Optional[DocumentRecord]:
        raise NotImplementedError

    def save_document(self, document: DocumentRecord) -> None:
        raise NotImplementedError

    def list_documents(self) -> List[DocumentRecord]:
        raise NotImplementedError

    def delete_document(self, document_id: str) -> None:
        raise NotImplementedError

    # Block sequences
    def replace_blocks(self, document_id: str, blocks: Sequence[Block]) -> None:
        raise NotImplementedError

    def list_blocks(self, document_id: str) -> List[Block]:
        raise NotImplementedError

    # Reading progress
    def get_progress(self, document_id: str) -> Optional[ReadingProgressRecord]:
        raise NotImplementedError

    def save_progress(self, progress: ReadingProgressRecord) -> None:
        raise NotImplementedError


class InMemoryReadingRepository(ReadingRepository):
    """
    In-memory store for local runs and tests. Keeps copies of records to avoid
    cross-mutation between calls; blocks are immutable and stored as tuples.
    """

    def __init__(self):
        self.documents: Dict[str, DocumentRecord] = {}
        self.blocks: Dict[str, tuple] = {}
        self.progress: Dict[str, ReadingProgressRecord] = {}

    def _clone(self, obj):
        return deepcopy(obj)

    def get_document(self, document_id: str) -> Optional[DocumentRecord]:
        document = self.documents.get(document_id)
        return self._clone(document) if document else None

    def save_document(self, document: DocumentRecord) -> None:
        self.documents[document.id] = self._clone(document)

    def list_documents(self) -> List[DocumentRecord]:
        return [self._clone(d) for d in sorted(self.documents.values(), key=lambda d: d.created_at)]

    def delete_document(self, document_id: str) -> None:
        self.documents.pop(document_id, None)
        self.blocks.pop(document_id, None)
        self.progress.pop(document_id, None)

    def replace_blocks(self, document_id: str, blocks: Sequence[Block]) -> None:
        self.blocks[document_id] = tuple(blocks)

    def list_blocks(self, document_id: str) -> List[Block]:
        return list(self.blocks.get(document_id, ()))

    def get_progress(self, document_id: str) -> Optional[ReadingProgressRecord]:
        progress = self.progress.get(document_id)
        return self._clone(progress) if progress else None

    def save_progress(self, progress: ReadingProgressRecord) -> None:
        self.progress[progress.document_id] = self._clone(progress)


class SqlAlchemyReadingRepository(ReadingRepository):
    """
    SQL-backed repository using SQLAlchemy. Works with SQLite/Postgres URLs.
    """

    def __init__(self, database_url: str):
        self.engine = create_engine(database_url, future=True)
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False, future=True)

    def _session(self) -> Session:
        return self.SessionLocal()

    # region Document operations
    def _to_document(self, model: DocumentModel) -> DocumentRecord:
        return DocumentRecord(
            id=model.id,
            title=model.title,
            source=model.source,
            author=model.author,
            url=model.url,
            block_count=int(model.block_count or 0),
            total_words=int(model.total_words or 0),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def get_document(self, document_id: str) -> Optional[DocumentRecord]:
        with self._session() as session:
            model = session.get(DocumentModel, document_id)
            if not model:
                return None
            return self._to_document(model)

    def save_document(self, document: DocumentRecord) -> None:
        with self._session() as session:
            model = DocumentModel(
                id=document.id,
                title=document.title,
                source=document.source,
                author=document.author,
                url=document.url,
                block_count=document.block_count,
                total_words=document.total_words,
                created_at=document.created_at,
                updated_at=document.updated_at,
            )
            session.merge(model)
            session.commit()

    def list_documents(self) -> List[DocumentRecord]:
        with self._session() as session:
            stmt = select(DocumentModel).order_by(DocumentModel.created_at)
            return [self._to_document(m) for m in session.execute(stmt).scalars().all()]

    def delete_document(self, document_id: str) -> None:
        with self._session() as session:
            session.execute(delete(BlockModel).where(BlockModel.document_id == document_id))
            session.execute(delete(ReadingProgressModel).where(ReadingProgressModel.document_id == document_id))
            session.execute(delete(DocumentModel).where(DocumentModel.id == document_id))
            session.commit()

    # endregion

    # region Block sequences
    def replace_blocks(self, document_id: str, blocks: Sequence[Block]) -> None:
        with self._session() as session:
            session.execute(delete(BlockModel).where(BlockModel.document_id == document_id))
            for order, block in enumerate(blocks):
                data = block_to_dict(block)
                items = data.get("items")
                session.add(
                    BlockModel(
                        document_id=document_id,
                        block_id=block.id,
                        reading_order=order,
                        block_type=data["type"],
                        content=data.get("content"),
                        items_json=json.dumps(items, ensure_ascii=False) if items is not None else None,
                        level=data.get("level"),
                        ordered=data.get("ordered"),
                        language=data.get("language"),
                    )
                )
            session.commit()

    def list_blocks(self, document_id: str) -> List[Block]:
        with self._session() as session:
            stmt = (
                select(BlockModel)
                .where(BlockModel.document_id == document_id)
                .order_by(BlockModel.reading_order)
            )
            models = session.execute(stmt).scalars().all()
            return [
                block_from_dict(
                    {
                        "type": m.block_type,
                        "id": m.block_id,
                        "content": m.content,
                        "items": json.loads(m.items_json) if m.items_json else [],
                        "level": m.level,
                        "ordered": m.ordered,
                        "language": m.language,
                    }
                )
                for m in models
            ]

    # endregion

    # region Reading progress
    def get_progress(self, document_id: str) -> Optional[ReadingProgressRecord]:
        with self._session() as session:
            model = session.get(ReadingProgressModel, document_id)
            if not model:
                return None
            return ReadingProgressRecord(
                document_id=model.document_id,
                word_count=int(model.word_count or 0),
                furthest_word_count=int(model.furthest_word_count or 0),
                total_words=int(model.total_words or 0),
                completed=bool(model.completed),
                updated_at=model.updated_at or datetime.utcnow(),
            )

    def save_progress(self, progress: ReadingProgressRecord) -> None:
        with self._session() as session:
            model = ReadingProgressModel(
                document_id=progress.document_id,
                word_count=progress.word_count,
                furthest_word_count=progress.furthest_word_count,
                total_words=progress.total_words,
                completed=progress.completed,
                updated_at=progress.updated_at,
            )
            session.merge(model)
            session.commit()

    # endregion
