from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence

from .models import (
    BLOCK_CLASSES,
    Block,
    BlockType,
    CodeBlock,
    DocumentMetadata,
    FlowDocument,
    HeadingBlock,
    ListBlock,
)
from .tokenizer import get_word_count


def get_block_text(block: Block) -> str:
    """
    Effective text of a block: list items joined by a single space, the
    `content` field for every other variant.
    """
    if isinstance(block, ListBlock):
        return " ".join(block.items)
    return block.content


def get_block_word_count(block: Block) -> int:
    return get_word_count(get_block_text(block))


def get_plain_text(blocks: Iterable[Block]) -> str:
    return " ".join(get_block_text(block) for block in blocks)


def create_document(blocks: Sequence[Block], metadata: DocumentMetadata) -> FlowDocument:
    frozen = tuple(blocks)
    return FlowDocument(metadata=metadata, blocks=frozen, plain_text=get_plain_text(frozen))


def block_to_dict(block: Block) -> Dict[str, Any]:
    data: Dict[str, Any] = {"type": block.type.value, "id": block.id}
    if isinstance(block, ListBlock):
        data["items"] = list(block.items)
        data["ordered"] = block.ordered
        return data
    data["content"] = block.content
    if isinstance(block, HeadingBlock):
        data["level"] = block.level
    elif isinstance(block, CodeBlock):
        data["language"] = block.language
    return data


def block_from_dict(data: Dict[str, Any]) -> Block:
    block_type = BlockType(data["type"])
    cls = BLOCK_CLASSES[block_type]
    if block_type == BlockType.LIST:
        return cls(id=data["id"], items=tuple(data.get("items") or ()), ordered=bool(data.get("ordered", False)))
    if block_type == BlockType.HEADING:
        return cls(id=data["id"], content=data["content"], level=int(data["level"]))
    if block_type == BlockType.CODE:
        return cls(id=data["id"], content=data["content"], language=data.get("language"))
    return cls(id=data["id"], content=data["content"])


def blocks_to_dicts(blocks: Iterable[Block]) -> List[Dict[str, Any]]:
    return [block_to_dict(block) for block in blocks]
