"""
Parsing subsystem exports.
"""

from .blocks import (
    block_from_dict,
    block_to_dict,
    blocks_to_dicts,
    create_document,
    get_block_text,
    get_block_word_count,
    get_plain_text,
)
from .docling_engine import DoclingParsingEngine
from .engine import (
    BlockSequenceBuilder,
    ExtractionError,
    HtmlParsingEngine,
    ParsingEngine,
    parse_html_to_blocks,
)
from .importer import DocumentImporter, ImportResult, build_document_id
from .indexing import Indexer, NoopIndexer, WhooshIndexer
from .models import (
    Block,
    BlockType,
    CodeBlock,
    DocumentMetadata,
    DocumentRecord,
    DocumentSource,
    FlowDocument,
    HeadingBlock,
    ListBlock,
    ParagraphBlock,
    ParseOptions,
    QuoteBlock,
    ReadingProgressRecord,
)
from .paste_engine import PasteParsingEngine, looks_like_markdown
from .repository import InMemoryReadingRepository, ReadingRepository, SqlAlchemyReadingRepository

__all__ = [
    "Block",
    "BlockSequenceBuilder",
    "BlockType",
    "CodeBlock",
    "DoclingParsingEngine",
    "DocumentImporter",
    "DocumentMetadata",
    "DocumentRecord",
    "DocumentSource",
    "ExtractionError",
    "FlowDocument",
    "HeadingBlock",
    "HtmlParsingEngine",
    "ImportResult",
    "InMemoryReadingRepository",
    "Indexer",
    "ListBlock",
    "NoopIndexer",
    "ParagraphBlock",
    "ParseOptions",
    "ParsingEngine",
    "PasteParsingEngine",
    "QuoteBlock",
    "ReadingProgressRecord",
    "ReadingRepository",
    "SqlAlchemyReadingRepository",
    "WhooshIndexer",
    "block_from_dict",
    "block_to_dict",
    "blocks_to_dicts",
    "build_document_id",
    "create_document",
    "get_block_text",
    "get_block_word_count",
    "get_plain_text",
    "looks_like_markdown",
    "parse_html_to_blocks",
]
