from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from .engine import BlockSequenceBuilder, ExtractionError, ParsingEngine
from .models import Block, ParseOptions

logger = logging.getLogger(__name__)

HEADING_LABELS = {"title", "section_header"}
TEXT_LABELS = {"paragraph", "text", "caption", "footnote", "reference"}


def _label(item) -> str:
    label = getattr(item, "label", "")
    return str(getattr(label, "value", label)).lower()


class DoclingParsingEngine(ParsingEngine):
    """
    Docling-based producer for PDF and DOCX files.

    Requires the `docling` package. Uses Docling's `DocumentConverter` with
    `PdfPipelineOptions` and maps the resulting DoclingDocument items, in
    reading order, onto the same block sequence the HTML engine produces.
    """

    def __init__(
        self,
        perform_ocr: bool = False,
        options: Optional[ParseOptions] = None,
        engine_version: str = "docling-latest",
    ):
        try:
            from docling.datamodel.base_models import InputFormat
            from docling.datamodel.pipeline_options import PdfPipelineOptions
            from docling.document_converter import DocumentConverter, PdfFormatOption
        except ImportError as exc:  # pragma: no cover - dependency guard
            raise RuntimeError("Docling is required for PDF/DOCX conversion. Please install 'docling'.") from exc

        self.options = options or ParseOptions()
        self.engine_version = engine_version

        pipeline_options = PdfPipelineOptions()
        pipeline_options.do_ocr = perform_ocr
        pipeline_options.do_table_structure = self.options.handle_tables

        self.converter = DocumentConverter(
            format_options={
                InputFormat.PDF: PdfFormatOption(pipeline_options=pipeline_options),
            }
        )

    def parse(self, source: Union[str, Path]) -> List[Block]:
        try:
            result = self.converter.convert(source)
            doc = result.document
        except Exception as exc:
            raise ExtractionError(f"Docling conversion failed for {source}") from exc

        blocks = self._map_docling_document(doc)
        logger.info("Converted %s into %d blocks", source, len(blocks))
        return blocks

    def _map_docling_document(self, doc) -> List[Block]:
        builder = BlockSequenceBuilder()
        pending_items: List[str] = []
        pending_ordered = False

        def flush_list():
            nonlocal pending_items
            if pending_items:
                builder.list_block(pending_items, ordered=pending_ordered)
            pending_items = []

        for item, _level in doc.iterate_items():
            label = _label(item)
            text = getattr(item, "text", "") or ""

            if label == "list_item":
                ordered = bool(getattr(item, "enumerated", False))
                if pending_items and ordered != pending_ordered:
                    flush_list()
                pending_ordered = ordered
                pending_items.append(text)
                continue
            flush_list()

            if label == "title":
                builder.heading(text, level=1)
            elif label == "section_header":
                builder.heading(text, level=min(int(getattr(item, "level", 1) or 1) + 1, 6))
            elif label in TEXT_LABELS:
                builder.paragraph(text)
            elif label == "code":
                builder.code(text, self._code_language(item))
            elif label == "table":
                if self.options.handle_tables:
                    for row in self._table_rows(item):
                        builder.table_row(row)
            # page headers/footers, pictures and formulas carry no reading text

        flush_list()
        return builder.build()

    def _code_language(self, item) -> Optional[str]:
        language = getattr(item, "code_language", None)
        if language is None:
            return None
        value = str(getattr(language, "value", language)).lower()
        return None if value in ("", "unknown") else value

    def _table_rows(self, item) -> List[List[str]]:
        data = getattr(item, "data", None)
        grid = getattr(data, "grid", None) or []
        rows: List[List[str]] = []
        for row in grid:
            cells: List[str] = []
            previous = None
            for cell in row:
                # a spanning cell occupies every grid slot it covers
                if cell is previous:
                    continue
                previous = cell
                cells.append(getattr(cell, "text", "") or "")
            rows.append(cells)
        return rows
