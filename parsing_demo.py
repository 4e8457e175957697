"""
Example: import a document into SQLite + Whoosh and print its block sequence
together with the RSVP chunking and reading-position mapping.

Usage:
    python3 parsing_demo.py --html /path/to/article.html --title "An Article"
    python3 parsing_demo.py --file /path/to/book.pdf --title "My Book" --chunk-size 3
    python3 parsing_demo.py --text /path/to/notes.md --title "Notes"
"""

import argparse
import logging
from pathlib import Path

from flow_reader.parsing import (
    DoclingParsingEngine,
    DocumentImporter,
    DocumentMetadata,
    DocumentSource,
    HtmlParsingEngine,
    ParseOptions,
    PasteParsingEngine,
    SqlAlchemyReadingRepository,
    WhooshIndexer,
    get_block_text,
)
from flow_reader.parsing.tokenizer import tokenize_for_rsvp
from flow_reader.reading import (
    estimate_minutes_remaining,
    format_duration,
    get_total_word_count,
    word_count_to_pacing,
    word_count_to_rsvp_index,
)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main():
    parser = argparse.ArgumentParser()
    source_group = parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument("--html", type=Path, help="Path to an HTML file")
    source_group.add_argument("--file", type=Path, help="Path to a PDF or DOCX file (requires docling)")
    source_group.add_argument("--text", type=Path, help="Path to a plain-text or markdown file")
    parser.add_argument("--title", default=None, help="Document title (defaults to the file name)")
    parser.add_argument("--author", default=None, help="Document author")
    parser.add_argument("--handle-tables", action="store_true", help="Emit table rows as paragraphs")
    parser.add_argument("--perform-ocr", action="store_true", help="Enable OCR for scanned PDFs")
    parser.add_argument("--chunk-size", default=1, type=int, help="RSVP words per flash")
    parser.add_argument("--wpm", default=300, type=int, help="Reading speed for time estimates")
    parser.add_argument("--db", default=Path("./data/flow_reader.db"), type=Path, help="SQLite DB path")
    parser.add_argument("--whoosh-dir", default=Path("./data/whoosh"), type=Path, help="Whoosh index directory")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)

    path = args.html or args.file or args.text
    if not path.exists():
        raise FileNotFoundError(f"Input not found: {path}")

    options = ParseOptions(handle_tables=args.handle_tables)
    if args.html:
        engine = HtmlParsingEngine(options)
        source = path.read_bytes()
        document_source = DocumentSource.WEB
    elif args.text:
        engine = PasteParsingEngine(options)
        source = path.read_text(encoding="utf-8")
        document_source = DocumentSource.PASTE
    else:
        engine = DoclingParsingEngine(perform_ocr=args.perform_ocr, options=options)
        source = path
        document_source = DocumentSource.DOCX if path.suffix.lower() == ".docx" else DocumentSource.PDF

    args.db.parent.mkdir(parents=True, exist_ok=True)
    repo = SqlAlchemyReadingRepository(f"sqlite+pysqlite:///{args.db}")
    indexer = WhooshIndexer(args.whoosh_dir)
    importer = DocumentImporter(repository=repo, engine=engine, indexer=indexer)

    metadata = DocumentMetadata(title=args.title or path.stem, source=document_source, author=args.author)
    result = importer.import_source(source, metadata)
    blocks = result.document.blocks

    print(f"Imported {result.document_id}: {len(blocks)} blocks, {result.total_words} words")
    for index, block in enumerate(blocks):
        preview = get_block_text(block)[:72].replace("\n", " ")
        print(f"  [{index:3d}] {block.type.value:<9} {preview}")

    chunk_size = max(1, args.chunk_size)
    flashes = tokenize_for_rsvp(result.document.plain_text, chunk_size)
    print(f"RSVP: {len(flashes)} flashes of up to {chunk_size} words")

    total = get_total_word_count(blocks)
    midpoint = total // 2
    position = word_count_to_pacing(blocks, midpoint)
    print(
        f"Midpoint word {midpoint}: block {position.block_index} word {position.word_index}, "
        f"RSVP index {word_count_to_rsvp_index(midpoint, chunk_size)}, "
        f"{format_duration(estimate_minutes_remaining(blocks, midpoint, args.wpm))} left at {args.wpm} wpm"
    )
    print(f"Indexed blocks located in Whoosh dir: {args.whoosh_dir}")


if __name__ == "__main__":
    main()
