import asyncio

import pytest
from fastapi.testclient import TestClient

from api.app import app
from api.dependencies import get_indexer, get_parse_options, get_repo
from flow_reader.parsing import InMemoryReadingRepository, ParseOptions, WhooshIndexer, build_document_id

HTML = "<h1>Title</h1><p>One two three</p><p>Four five six seven</p>"
DOC_ID = build_document_id("Sample")


class RecordingRepository(InMemoryReadingRepository):
    """Records every storage call and the ones made on the event loop thread."""

    def __init__(self):
        super().__init__()
        self.calls = []
        self.calls_on_loop = []

    def _record(self, name):
        self.calls.append(name)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return
        self.calls_on_loop.append(name)

    def get_document(self, document_id):
        self._record("get_document")
        return super().get_document(document_id)

    def list_blocks(self, document_id):
        self._record("list_blocks")
        return super().list_blocks(document_id)

    def get_progress(self, document_id):
        self._record("get_progress")
        return super().get_progress(document_id)

    def save_progress(self, progress):
        self._record("save_progress")
        super().save_progress(progress)


@pytest.fixture
def repo():
    return RecordingRepository()


@pytest.fixture
def client(tmp_path, repo):
    indexer = WhooshIndexer(tmp_path / "whoosh")
    app.dependency_overrides[get_repo] = lambda: repo
    app.dependency_overrides[get_indexer] = lambda: indexer
    app.dependency_overrides[get_parse_options] = lambda: ParseOptions()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def document(client):
    response = client.post("/documents", json={"title": "Sample", "html": HTML, "author": "Someone"})
    assert response.status_code == 201
    return response.json()


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_create_document(client, document):
    assert document == {"id": DOC_ID, "title": "Sample", "block_count": 3, "total_words": 8}


def test_duplicate_and_empty_documents(client, document):
    assert client.post("/documents", json={"title": "Sample", "html": HTML}).status_code == 409
    assert client.post("/documents", json={"title": "Empty", "html": "<div> </div>"}).status_code == 422


def test_create_with_tables(client):
    html = "<table><tr><td>a</td><td>b</td></tr></table>"
    assert client.post("/documents", json={"title": "No tables", "html": html}).status_code == 422
    response = client.post("/documents", json={"title": "Tables", "html": html, "handle_tables": True})
    assert response.status_code == 201
    blocks = client.get(f"/documents/{response.json()['id']}").json()["blocks"]
    assert blocks == [{"type": "paragraph", "id": "block-0", "content": "a | b"}]


def test_list_and_get_document(client, document):
    listing = client.get("/documents").json()
    assert [d["id"] for d in listing] == [DOC_ID]

    body = client.get(f"/documents/{DOC_ID}").json()
    assert body["author"] == "Someone"
    assert [b["type"] for b in body["blocks"]] == ["heading", "paragraph", "paragraph"]
    assert client.get("/documents/missing").status_code == 404


def test_position_from_each_representation(client, document):
    by_count = client.get(f"/documents/{DOC_ID}/position", params={"word_count": 4}).json()
    assert (by_count["block_index"], by_count["word_index"], by_count["rsvp_index"]) == (2, 0, 4)
    assert by_count["boundary"] == "within"

    by_pacing = client.get(f"/documents/{DOC_ID}/position", params={"block_index": 1, "word_index": 2}).json()
    assert by_pacing["word_count"] == 3

    by_rsvp = client.get(f"/documents/{DOC_ID}/position", params={"rsvp_index": 3, "chunk_size": 2}).json()
    assert (by_rsvp["word_count"], by_rsvp["block_index"], by_rsvp["word_index"]) == (6, 2, 2)
    assert by_rsvp["rsvp_index"] == 3


def test_position_boundaries(client, document):
    at_end = client.get(f"/documents/{DOC_ID}/position", params={"word_count": 8}).json()
    assert at_end["boundary"] == "at_end"
    assert (at_end["block_index"], at_end["word_index"]) == (2, 3)

    past_end = client.get(f"/documents/{DOC_ID}/position", params={"word_count": 20}).json()
    assert past_end["boundary"] == "past_end"
    assert (past_end["block_index"], past_end["word_index"]) == (2, 3)


@pytest.mark.parametrize(
    "params",
    [
        {},
        {"word_count": 1, "rsvp_index": 1},
        {"block_index": 1},
        {"word_count": -1},
        {"rsvp_index": 1, "chunk_size": 0},
    ],
)
def test_malformed_position_queries(client, document, params):
    assert client.get(f"/documents/{DOC_ID}/position", params=params).status_code == 400


def test_position_for_unknown_document(client):
    assert client.get("/documents/missing/position", params={"word_count": 1}).status_code == 404


def test_progress_roundtrip(client, document):
    initial = client.get(f"/documents/{DOC_ID}/progress").json()
    assert initial["word_count"] == 0 and initial["completed"] is False

    saved = client.put(f"/documents/{DOC_ID}/progress", json={"block_index": 2, "word_index": 1}).json()
    assert saved["word_count"] == 5

    progress = client.get(f"/documents/{DOC_ID}/progress", params={"chunk_size": 2}).json()
    assert (progress["block_index"], progress["word_index"]) == (2, 1)
    assert progress["rsvp_index"] == 2

    finished = client.put(f"/documents/{DOC_ID}/progress", json={"word_count": 50}).json()
    assert finished["word_count"] == 8
    assert finished["completed"] is True and finished["percent"] == 100

    assert client.put(f"/documents/{DOC_ID}/progress", json={}).status_code == 400


def test_search_in_document_and_library(client, document):
    matches = client.get(f"/documents/{DOC_ID}/search", params={"query": "five"}).json()["matches"]
    assert [(m["block_index"], m["start_word_index"], m["word_count"]) for m in matches] == [(2, 1, 5)]
    assert client.get(f"/documents/{DOC_ID}/search", params={"query": " "}).status_code == 400

    hits = client.get("/search", params={"query": "five"}).json()["hits"]
    assert [(h["document_id"], h["block_id"]) for h in hits] == [(DOC_ID, "block-2")]


def test_delete_document(client, document):
    assert client.delete(f"/documents/{DOC_ID}").status_code == 204
    assert client.get(f"/documents/{DOC_ID}").status_code == 404
    assert client.delete(f"/documents/{DOC_ID}").status_code == 404


def test_progress_update_keeps_storage_off_the_event_loop(client, document, repo):
    repo.calls.clear()
    response = client.put(f"/documents/{DOC_ID}/progress", json={"word_count": 3})
    assert response.status_code == 200
    assert {"get_document", "list_blocks", "get_progress", "save_progress"} <= set(repo.calls)
    assert repo.calls_on_loop == []


def test_progress_read_loads_the_record_once(client, document, repo):
    client.put(f"/documents/{DOC_ID}/progress", json={"word_count": 8})
    repo.calls.clear()

    progress = client.get(f"/documents/{DOC_ID}/progress").json()
    assert repo.calls.count("get_progress") == 1
    assert (progress["word_count"], progress["furthest_word_count"]) == (8, 8)
    assert progress["completed"] is True


def test_create_document_from_pasted_text(client):
    text = "First pasted paragraph.\n\nSecond one here."
    response = client.post("/documents", json={"title": "Pasted", "text": text})
    assert response.status_code == 201
    assert response.json()["total_words"] == 6

    body = client.get(f"/documents/{response.json()['id']}").json()
    assert body["source"] == "paste"
    assert body["blocks"] == [
        {"type": "paragraph", "id": "block-0", "content": "First pasted paragraph."},
        {"type": "paragraph", "id": "block-1", "content": "Second one here."},
    ]


def test_create_document_from_pasted_markdown(client):
    text = "# Notes\n\n- alpha\n- beta\n\n```python\nprint(1)\n```"
    response = client.post("/documents", json={"title": "Markdown", "text": text})
    assert response.status_code == 201

    blocks = client.get(f"/documents/{response.json()['id']}").json()["blocks"]
    assert blocks == [
        {"type": "heading", "id": "block-0", "content": "Notes", "level": 1},
        {"type": "list", "id": "block-1", "items": ["alpha", "beta"], "ordered": False},
        {"type": "code", "id": "block-2", "content": "print(1)", "language": "python"},
    ]


def test_pasted_markdown_can_be_read_as_plain_text(client):
    response = client.post("/documents", json={"title": "Literal", "text": "# Not a heading", "markdown": False})
    assert response.status_code == 201
    blocks = client.get(f"/documents/{response.json()['id']}").json()["blocks"]
    assert blocks == [{"type": "paragraph", "id": "block-0", "content": "# Not a heading"}]


def test_create_requires_exactly_one_source(client):
    both = {"title": "Both", "html": HTML, "text": "Plain words."}
    assert client.post("/documents", json=both).status_code == 400
    assert client.post("/documents", json={"title": "Neither"}).status_code == 400
    assert client.post("/documents", json={"title": "Blank", "text": "  \n\n "}).status_code == 422
