from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union


class BlockType(str, Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    QUOTE = "quote"
    CODE = "code"


class DocumentSource(str, Enum):
    WEB = "web"
    PASTE = "paste"
    PDF = "pdf"
    DOCX = "docx"
    SELECTION = "selection"


@dataclass(frozen=True)
class HeadingBlock:
    type: ClassVar[BlockType] = BlockType.HEADING

    id: str
    content: str
    level: int


@dataclass(frozen=True)
class ParagraphBlock:
    type: ClassVar[BlockType] = BlockType.PARAGRAPH

    id: str
    content: str


@dataclass(frozen=True)
class ListBlock:
    type: ClassVar[BlockType] = BlockType.LIST

    id: str
    items: Tuple[str, ...]
    ordered: bool = False


@dataclass(frozen=True)
class QuoteBlock:
    type: ClassVar[BlockType] = BlockType.QUOTE

    id: str
    content: str


@dataclass(frozen=True)
class CodeBlock:
    type: ClassVar[BlockType] = BlockType.CODE

    id: str
    content: str
    language: Optional[str] = None


Block = Union[HeadingBlock, ParagraphBlock, ListBlock, QuoteBlock, CodeBlock]

BLOCK_CLASSES = {
    BlockType.HEADING: HeadingBlock,
    BlockType.PARAGRAPH: ParagraphBlock,
    BlockType.LIST: ListBlock,
    BlockType.QUOTE: QuoteBlock,
    BlockType.CODE: CodeBlock,
}


@dataclass(frozen=True)
class ParseOptions:
    handle_tables: bool = False


@dataclass
class DocumentMetadata:
    title: str
    source: DocumentSource = DocumentSource.WEB
    author: Optional[str] = None
    url: Optional[str] = None
    published_at: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class FlowDocument:
    metadata: DocumentMetadata
    blocks: Tuple[Block, ...]
    plain_text: str


@dataclass
class DocumentRecord:
    id: str
    title: str
    source: DocumentSource
    author: Optional[str] = None
    url: Optional[str] = None
    block_count: int = 0
    total_words: int = 0
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class ReadingProgressRecord:
    document_id: str
    word_count: int = 0
    furthest_word_count: int = 0
    total_words: int = 0
    completed: bool = False
    updated_at: datetime = field(default_factory=datetime.utcnow)
