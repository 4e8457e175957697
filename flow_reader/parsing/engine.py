from __future__ import annotations

import logging
import re
from typing import AbstractSet, Iterable, List, Optional, Union

from bs4 import BeautifulSoup, Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag

from .models import (
    Block,
    CodeBlock,
    HeadingBlock,
    ListBlock,
    ParagraphBlock,
    ParseOptions,
    QuoteBlock,
)

logger = logging.getLogger(__name__)

Markup = Union[str, bytes, Tag, None]

HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
LIST_TAGS = {"ul", "ol"}
SKIPPED_TAGS = {"script", "style", "noscript", "template", "head"}
# Elements whose boundaries separate words even when the markup has no whitespace.
BOUNDARY_TAGS = {
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt", "figcaption",
    "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr", "li", "main", "nav",
    "ol", "p", "pre", "section", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
}
NON_TEXT_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)

_LANGUAGE_CLASS_RE = re.compile(r"^language-(\w+)")
_BOUNDARY = object()


class ExtractionError(RuntimeError):
    """Raised when a producer fails to convert an external document into blocks."""


class ParsingEngine:
    """
    Abstract block producer. Implementations must be stateless and reusable and
    emit conformant block sequences (see `BlockSequenceBuilder`).
    """

    def parse(self, source) -> List[Block]:
        raise NotImplementedError


def normalize_whitespace(text: Optional[str]) -> str:
    if not text:
        return ""
    return " ".join(text.split())


class BlockSequenceBuilder:
    """
    Collects candidate blocks, drops the ones whose text is empty after
    normalization and assigns `block-<n>` ids in emission order.
    """

    def __init__(self):
        self._blocks: List[Block] = []

    def __len__(self) -> int:
        return len(self._blocks)

    def _next_id(self) -> str:
        return f"block-{len(self._blocks)}"

    def heading(self, text: Optional[str], level: int) -> Optional[Block]:
        content = normalize_whitespace(text)
        if not content:
            return None
        level = min(max(int(level), 1), 6)
        return self._emit(HeadingBlock(id=self._next_id(), content=content, level=level))

    def paragraph(self, text: Optional[str]) -> Optional[Block]:
        content = normalize_whitespace(text)
        if not content:
            return None
        return self._emit(ParagraphBlock(id=self._next_id(), content=content))

    def quote(self, text: Optional[str]) -> Optional[Block]:
        content = normalize_whitespace(text)
        if not content:
            return None
        return self._emit(QuoteBlock(id=self._next_id(), content=content))

    def list_block(self, items: Iterable[Optional[str]], ordered: bool) -> Optional[Block]:
        normalized = tuple(item for item in (normalize_whitespace(i) for i in items) if item)
        if not normalized:
            return None
        return self._emit(ListBlock(id=self._next_id(), items=normalized, ordered=ordered))

    def code(self, text: Optional[str], language: Optional[str] = None) -> Optional[Block]:
        # Code keeps its internal whitespace; only the ends are trimmed.
        content = (text or "").strip()
        if not content:
            return None
        return self._emit(CodeBlock(id=self._next_id(), content=content, language=language or None))

    def table_row(self, cells: Iterable[Optional[str]]) -> Optional[Block]:
        texts = [c for c in (normalize_whitespace(cell) for cell in cells) if c]
        if not texts:
            return None
        return self.paragraph(" | ".join(texts))

    def _emit(self, block: Block) -> Block:
        self._blocks.append(block)
        return block

    def build(self) -> List[Block]:
        return list(self._blocks)


def text_content(element: Tag, skipped: AbstractSet[str] = SKIPPED_TAGS) -> str:
    """
    Text of an element and its descendants. Comments, doctypes and subtrees
    rooted at a `skipped` tag (scripts, styles) contribute nothing; boundary
    elements such as `br`, `p` or `li` are separated by a newline.
    """
    parts: List[str] = []
    stack: list = [element]
    while stack:
        node = stack.pop()
        if node is _BOUNDARY:
            parts.append("\n")
        elif isinstance(node, Tag):
            if node.name in skipped:
                continue
            if node is not element and node.name in BOUNDARY_TAGS:
                parts.append("\n")
                stack.append(_BOUNDARY)
            stack.extend(reversed(node.contents))
        elif isinstance(node, NavigableString) and not isinstance(node, NON_TEXT_STRINGS):
            parts.append(str(node))
    return "".join(parts)


def code_language(element: Tag) -> Optional[str]:
    for token in element.get("class") or []:
        match = _LANGUAGE_CLASS_RE.match(token)
        if match:
            return match.group(1)
    return None


def _owning_table(row: Tag) -> Optional[Tag]:
    return row.find_parent("table")


class HtmlParsingEngine(ParsingEngine):
    """
    Turns HTML (a string, bytes or an already parsed BeautifulSoup tree) into a
    flat block sequence. The walk is iterative, depth-first and pre-order;
    unrecognized elements act as transparent containers and loose character
    data is ignored. Parsing never raises for malformed markup.

    The default html5lib tree builder repairs markup the way a browser does;
    loose text must stay loose text, so builders that wrap it in an implied
    <p> (lxml) change the output.
    """

    def __init__(self, options: Optional[ParseOptions] = None, parser: str = "html5lib"):
        self.options = options or ParseOptions()
        self.parser = parser
        # with tables off, a table nested in a quote or list item is dropped too
        self.skipped = SKIPPED_TAGS if self.options.handle_tables else SKIPPED_TAGS | {"table"}

    def parse(self, source: Markup) -> List[Block]:
        roots = self._roots(source)
        builder = BlockSequenceBuilder()
        stack: List[Tag] = list(reversed(roots))
        visited = 0

        while stack:
            element = stack.pop()
            visited += 1
            name = (element.name or "").lower()

            if name in SKIPPED_TAGS:
                continue
            if name in HEADING_TAGS:
                builder.heading(text_content(element, self.skipped), level=int(name[1]))
            elif name == "p":
                builder.paragraph(text_content(element, self.skipped))
            elif name in LIST_TAGS:
                items = [text_content(li, self.skipped) for li in element.find_all("li", recursive=False)]
                builder.list_block(items, ordered=name == "ol")
            elif name == "blockquote":
                builder.quote(text_content(element, self.skipped))
            elif name == "pre":
                code = element.find("code")
                source_element = code if code is not None else element
                language = code_language(source_element) or code_language(element)
                builder.code(text_content(source_element, self.skipped), language)
            elif name == "table":
                if self.options.handle_tables:
                    self._emit_table(element, builder)
            else:
                stack.extend(reversed([child for child in element.contents if isinstance(child, Tag)]))

        logger.debug("Parsed %d blocks from %d visited elements", len(builder), visited)
        return builder.build()

    def _roots(self, source: Markup) -> List[Tag]:
        if source is None:
            return []
        if isinstance(source, BeautifulSoup):
            soup = source
        elif isinstance(source, Tag):
            return [source]
        else:
            if not source.strip():
                return []
            soup = BeautifulSoup(source, self.parser)

        container = soup.body if soup.body is not None else soup
        return [child for child in container.contents if isinstance(child, Tag)]

    def _emit_table(self, table: Tag, builder: BlockSequenceBuilder) -> None:
        for row in table.find_all("tr"):
            if _owning_table(row) is not table:
                continue
            cells = row.find_all(["th", "td"], recursive=False)
            builder.table_row(text_content(cell, self.skipped) for cell in cells)


def parse_html_to_blocks(markup: Markup, options: Optional[ParseOptions] = None) -> List[Block]:
    return HtmlParsingEngine(options).parse(markup)
