from datetime import datetime

from flow_reader.parsing import (
    CodeBlock,
    DocumentMetadata,
    DocumentSource,
    HeadingBlock,
    ListBlock,
    ParagraphBlock,
    QuoteBlock,
    block_from_dict,
    block_to_dict,
    create_document,
    get_block_text,
    get_block_word_count,
    get_plain_text,
)


def test_block_text_per_variant():
    assert get_block_text(ParagraphBlock(id="b", content="This is a paragraph.")) == "This is a paragraph."
    assert get_block_text(HeadingBlock(id="b", content="Main Title", level=1)) == "Main Title"
    assert get_block_text(QuoteBlock(id="b", content="A famous quote.")) == "A famous quote."
    assert get_block_text(CodeBlock(id="b", content="const x = 1;", language="js")) == "const x = 1;"


def test_list_text_joins_items_with_spaces():
    block = ListBlock(id="b", items=("First item", "Second item", "Third item"))
    assert get_block_text(block) == "First item Second item Third item"
    assert get_block_word_count(block) == 6
    assert get_block_text(ListBlock(id="b", items=())) == ""
    assert get_block_word_count(ListBlock(id="b", items=())) == 0


def test_plain_text_of_mixed_blocks():
    blocks = [
        HeadingBlock(id="block-0", content="Title", level=1),
        ParagraphBlock(id="block-1", content="Content here."),
        ListBlock(id="block-2", items=("Item one", "Item two")),
    ]
    assert get_plain_text(blocks) == "Title Content here. Item one Item two"
    assert get_plain_text([]) == ""


def test_create_document():
    before = datetime.utcnow()
    blocks = [
        HeadingBlock(id="block-0", content="Chapter One", level=1),
        ParagraphBlock(id="block-1", content="Introduction text."),
    ]
    metadata = DocumentMetadata(title="Test Document", url="https://example.com", author="John Doe")
    doc = create_document(blocks, metadata)

    assert doc.metadata.title == "Test Document"
    assert doc.metadata.source == DocumentSource.WEB
    assert doc.metadata.published_at is None
    assert doc.metadata.created_at >= before
    assert doc.blocks == tuple(blocks)
    assert doc.plain_text == "Chapter One Introduction text."


def test_block_dict_shape():
    assert block_to_dict(ListBlock(id="block-3", items=("a", "b"), ordered=True)) == {
        "type": "list",
        "id": "block-3",
        "items": ["a", "b"],
        "ordered": True,
    }
    assert block_to_dict(HeadingBlock(id="block-0", content="H", level=2)) == {
        "type": "heading",
        "id": "block-0",
        "content": "H",
        "level": 2,
    }
    code = CodeBlock(id="block-1", content="x = 1", language="python")
    assert block_from_dict(block_to_dict(code)) == code
