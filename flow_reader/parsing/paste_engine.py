from __future__ import annotations

import logging
import re
from typing import List, Optional

from markdown_it import MarkdownIt

from .engine import BlockSequenceBuilder, HtmlParsingEngine, ParsingEngine
from .models import Block, ParseOptions

logger = logging.getLogger(__name__)

_PARAGRAPH_SPLIT_RE = re.compile(r"\n\n+")
_HEADING_RE = re.compile(r"^#{1,6}\s+.+$", re.MULTILINE)
_FENCE_RE = re.compile(r"```[\s\S]*?```")
MARKDOWN_PATTERNS = [
    _HEADING_RE,
    re.compile(r"^\s*[-*+]\s+.+$", re.MULTILINE),
    re.compile(r"^\s*\d+\.\s+.+$", re.MULTILINE),
    re.compile(r"\[.+?\]\(.+?\)"),
    _FENCE_RE,
    re.compile(r"`[^`]+`"),
    re.compile(r"^\s*>\s+.+$", re.MULTILINE),
    re.compile(r"\*\*[^*]+\*\*"),
    re.compile(r"\*[^*]+\*"),
    re.compile(r"__[^_]+__"),
    re.compile(r"_[^_]+_"),
    re.compile(r"^\s*[-*_]{3,}\s*$", re.MULTILINE),
]


def looks_like_markdown(text: str) -> bool:
    """
    Two distinct markdown patterns, or a single heading or fenced code block,
    mark the text as markdown. One stray "- " or "*" is still plain text.
    """
    found = 0
    for pattern in MARKDOWN_PATTERNS:
        if pattern.search(text):
            found += 1
            if found >= 2:
                return True
    return bool(_HEADING_RE.search(text) or _FENCE_RE.search(text))


class PasteParsingEngine(ParsingEngine):
    """
    Producer for pasted text. Plain text becomes one paragraph per blank-line
    separated chunk; markdown is rendered to HTML with markdown-it and handed
    to `HtmlParsingEngine`, so both paths share the same block rules.

    `markdown=None` detects the format per input.
    """

    def __init__(self, options: Optional[ParseOptions] = None, markdown: Optional[bool] = None):
        self.options = options or ParseOptions()
        self.markdown = markdown
        self.renderer = MarkdownIt("commonmark").enable("table")
        self.html_engine = HtmlParsingEngine(self.options)

    def parse(self, source: Optional[str]) -> List[Block]:
        text = (source or "").replace("\r\n", "\n").replace("\r", "\n")
        if not text.strip():
            return []

        as_markdown = looks_like_markdown(text) if self.markdown is None else self.markdown
        if as_markdown:
            blocks = self.html_engine.parse(self.renderer.render(text))
        else:
            builder = BlockSequenceBuilder()
            for chunk in _PARAGRAPH_SPLIT_RE.split(text):
                builder.paragraph(chunk)
            blocks = builder.build()

        logger.debug("Parsed pasted %s into %d blocks", "markdown" if as_markdown else "text", len(blocks))
        return blocks
