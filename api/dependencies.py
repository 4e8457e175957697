from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from flow_reader.parsing import (
    DocumentImporter,
    HtmlParsingEngine,
    Indexer,
    ParseOptions,
    ReadingRepository,
    SqlAlchemyReadingRepository,
    WhooshIndexer,
)
from flow_reader.reading import ProgressTracker, storage_mutex

DEFAULT_CHUNK_SIZE = int(os.getenv("DEFAULT_CHUNK_SIZE", "1"))


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@lru_cache(maxsize=1)
def get_repo() -> ReadingRepository:
    db_url = os.getenv("DATABASE_URL", "sqlite+pysqlite:///./data/flow_reader.db")
    return SqlAlchemyReadingRepository(db_url)


@lru_cache(maxsize=1)
def get_indexer() -> WhooshIndexer:
    whoosh_dir = Path(os.getenv("WHOOSH_DIR", "./data/whoosh"))
    return WhooshIndexer(whoosh_dir)


@lru_cache(maxsize=1)
def get_parse_options() -> ParseOptions:
    return ParseOptions(handle_tables=_env_flag("HANDLE_TABLES"))


def get_importer(
    repo: ReadingRepository = Depends(get_repo),
    indexer: Indexer = Depends(get_indexer),
    options: ParseOptions = Depends(get_parse_options),
) -> DocumentImporter:
    return DocumentImporter(repository=repo, engine=HtmlParsingEngine(options), indexer=indexer)


def get_tracker(repo: ReadingRepository = Depends(get_repo)) -> ProgressTracker:
    return ProgressTracker(repo, storage_mutex)
