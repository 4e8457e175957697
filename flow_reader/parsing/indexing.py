from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Protocol, Sequence

from whoosh import index
from whoosh.fields import ID, NUMERIC, TEXT, Schema
from whoosh.qparser import QueryParser

from .blocks import get_block_text
from .models import Block


class Indexer(Protocol):
    def index_document(self, document_id: str, blocks: Sequence[Block]) -> None:
        ...

    def delete_document(self, document_id: str) -> None:
        ...


class NoopIndexer:
    """
    Default indexer stub. Keeps the importer wired without pulling in Whoosh.
    """

    def index_document(self, document_id: str, blocks: Sequence[Block]) -> None:
        return None

    def delete_document(self, document_id: str) -> None:
        return None


class WhooshIndexer:
    """
    File-system backed Whoosh indexer. One Whoosh document per block, keyed by
    `<document_id>/<block_id>`; re-indexing a document first deletes its
    previous entries.
    """

    def __init__(self, index_dir: Path):
        self.index_dir = Path(index_dir)
        self.index_dir.mkdir(parents=True, exist_ok=True)
        self.schema = Schema(
            document_id=ID(stored=True),
            key=ID(stored=True, unique=True),
            block_id=ID(stored=True),
            block_index=NUMERIC(stored=True, sortable=True),
            block_type=ID(stored=True),
            text=TEXT(stored=True),
        )
        if index.exists_in(self.index_dir):
            self.ix = index.open_dir(self.index_dir)
        else:
            self.ix = index.create_in(self.index_dir, self.schema)

    def index_document(self, document_id: str, blocks: Sequence[Block]) -> None:
        writer = self.ix.writer()
        writer.delete_by_term("document_id", document_id)
        for block_index, block in enumerate(blocks):
            writer.add_document(
                document_id=document_id,
                key=f"{document_id}/{block.id}",
                block_id=block.id,
                block_index=block_index,
                block_type=block.type.value,
                text=get_block_text(block),
            )
        writer.commit()

    def delete_document(self, document_id: str) -> None:
        writer = self.ix.writer()
        writer.delete_by_term("document_id", document_id)
        writer.commit()

    def search(self, query_str: str, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Return a list of plain dicts so callers are safe after the searcher closes.
        """
        qp = QueryParser("text", schema=self.schema)
        q = qp.parse(query_str)
        with self.ix.searcher() as searcher:
            results = searcher.search(q, limit=limit)
            hits = []
            for hit in results:
                fields = hit.fields()
                hits.append(
                    {
                        "document_id": fields.get("document_id"),
                        "block_id": fields.get("block_id"),
                        "block_index": int(fields.get("block_index") or 0),
                        "block_type": fields.get("block_type"),
                        "text": fields.get("text"),
                    }
                )
            return hits
