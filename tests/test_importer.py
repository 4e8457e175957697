import pytest

from flow_reader.parsing import (
    DocumentImporter,
    DocumentMetadata,
    ExtractionError,
    HtmlParsingEngine,
    InMemoryReadingRepository,
    NoopIndexer,
    ParsingEngine,
    WhooshIndexer,
    build_document_id,
)

HTML = """
    <article>
        <h1>Sample Article</h1>
        <p>One two three.</p>
        <ul><li>Four five</li><li>Six</li></ul>
    </article>
"""


class FailingEngine(ParsingEngine):
    def parse(self, source):
        raise ExtractionError("conversion failed")


def test_build_document_id():
    document_id = build_document_id("  Hello World ")
    assert document_id.startswith("hello-world-")
    assert len(document_id.rsplit("-", 1)[-1]) == 8
    assert document_id == build_document_id("hello world")
    assert build_document_id("???").startswith("document-")


def test_import_persists_and_indexes(tmp_path):
    repo = InMemoryReadingRepository()
    indexer = WhooshIndexer(tmp_path / "whoosh")
    importer = DocumentImporter(repository=repo, engine=HtmlParsingEngine(), indexer=indexer)

    result = importer.import_source(HTML, DocumentMetadata(title="Sample Article", author="A. Writer"))

    assert result.document_id == build_document_id("Sample Article")
    assert result.total_words == 8
    assert len(result.document.blocks) == 3

    record = repo.get_document(result.document_id)
    assert record.block_count == 3 and record.total_words == 8
    assert record.author == "A. Writer"
    assert repo.list_blocks(result.document_id) == list(result.document.blocks)

    hits = indexer.search("five")
    assert [(h["document_id"], h["block_id"]) for h in hits] == [(result.document_id, "block-2")]


def test_reimport_keeps_creation_time():
    repo = InMemoryReadingRepository()
    importer = DocumentImporter(repository=repo, engine=HtmlParsingEngine(), indexer=NoopIndexer())
    first = importer.import_source(HTML, DocumentMetadata(title="Doc"), document_id="doc-1")
    created_at = repo.get_document(first.document_id).created_at

    second = importer.import_source("<p>Replaced body.</p>", DocumentMetadata(title="Doc"), document_id="doc-1")
    record = repo.get_document("doc-1")
    assert record.created_at == created_at
    assert record.block_count == 1 and second.total_words == 2
    assert [b.content for b in repo.list_blocks("doc-1")] == ["Replaced body."]


def test_import_without_content_is_rejected():
    repo = InMemoryReadingRepository()
    importer = DocumentImporter(repository=repo, engine=HtmlParsingEngine(), indexer=NoopIndexer())
    with pytest.raises(ValueError):
        importer.import_source("<div>  </div>", DocumentMetadata(title="Empty"))
    assert repo.list_documents() == []


def test_engine_failure_propagates():
    repo = InMemoryReadingRepository()
    importer = DocumentImporter(repository=repo, engine=FailingEngine(), indexer=NoopIndexer())
    with pytest.raises(ExtractionError):
        importer.import_source("file.pdf", DocumentMetadata(title="Broken"))
    assert repo.list_documents() == []


def test_remove(tmp_path):
    repo = InMemoryReadingRepository()
    indexer = WhooshIndexer(tmp_path / "whoosh")
    importer = DocumentImporter(repository=repo, engine=HtmlParsingEngine(), indexer=indexer)
    result = importer.import_source(HTML, DocumentMetadata(title="Sample Article"))

    importer.remove(result.document_id)
    assert repo.get_document(result.document_id) is None
    assert indexer.search("five") == []
    with pytest.raises(ValueError):
        importer.remove(result.document_id)
