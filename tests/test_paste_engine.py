from flow_reader.parsing import (
    CodeBlock,
    HeadingBlock,
    ListBlock,
    ParagraphBlock,
    ParseOptions,
    PasteParsingEngine,
    QuoteBlock,
    looks_like_markdown,
)


def test_plain_text_splits_on_blank_lines():
    text = "First para\nstill first.\n\n\nSecond para.\n\n   \n"
    assert PasteParsingEngine().parse(text) == [
        ParagraphBlock(id="block-0", content="First para still first."),
        ParagraphBlock(id="block-1", content="Second para."),
    ]


def test_plain_text_with_windows_line_endings():
    blocks = PasteParsingEngine().parse("One.\r\n\r\nTwo.")
    assert [b.content for b in blocks] == ["One.", "Two."]


def test_empty_paste():
    engine = PasteParsingEngine()
    assert engine.parse("") == []
    assert engine.parse(None) == []
    assert engine.parse(" \n\n \n") == []


def test_markdown_detection():
    assert looks_like_markdown("# Heading only")
    assert looks_like_markdown("```\ncode\n```")
    assert looks_like_markdown("Some **bold** and `code` here.")
    assert not looks_like_markdown("Just a sentence - with a dash.")
    assert not looks_like_markdown("One *star here.")


def test_markdown_is_rendered_into_blocks():
    text = "# Title\n\nSome *text* here.\n\n- one\n- two\n\n> Quoted line.\n\n```python\nprint(1)\n```\n"
    assert PasteParsingEngine().parse(text) == [
        HeadingBlock(id="block-0", content="Title", level=1),
        ParagraphBlock(id="block-1", content="Some text here."),
        ListBlock(id="block-2", items=("one", "two"), ordered=False),
        QuoteBlock(id="block-3", content="Quoted line."),
        CodeBlock(id="block-4", content="print(1)", language="python"),
    ]


def test_explicit_format_overrides_detection():
    text = "# Not a heading\n\nBody."
    assert [b.content for b in PasteParsingEngine(markdown=False).parse(text)] == ["# Not a heading", "Body."]
    assert [b.type.value for b in PasteParsingEngine(markdown=True).parse(text)] == ["heading", "paragraph"]


def test_markdown_tables_follow_options():
    text = "| a | b |\n|---|---|\n| 1 | 2 |\n"
    assert PasteParsingEngine(markdown=True).parse(text) == []
    blocks = PasteParsingEngine(ParseOptions(handle_tables=True), markdown=True).parse(text)
    assert [b.content for b in blocks] == ["a | b", "1 | 2"]
