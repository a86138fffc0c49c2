# FILE: tests/test_document_store.py
"""Tests for the in-memory and JSON-file document stores"""
import pytest

from assignment_hub.errors import StoreUnavailable, VersionConflict
from assignment_hub.services.document_store import (
    DocumentNotFound,
    InMemoryDocumentStore,
    JsonFileDocumentStore,
    create_document_store,
)


@pytest.fixture(params=["memory", "json"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryDocumentStore()
    return JsonFileDocumentStore(str(tmp_path / "data"))


@pytest.mark.asyncio
async def test_create_get_and_version(any_store):
    doc_id = await any_store.create("assignments", {"subject": "Math"})

    record = await any_store.get("assignments", doc_id)
    assert record == {"subject": "Math", "id": doc_id, "version": 1}
    assert await any_store.get("assignments", "missing") is None


@pytest.mark.asyncio
async def test_update_merges_and_bumps_version(any_store):
    doc_id = await any_store.create("assignments", {"subject": "Math", "status": "NotStarted"})

    updated = await any_store.update("assignments", doc_id, {"status": "InProgress"}, expected_version=1)

    assert updated["status"] == "InProgress"
    assert updated["subject"] == "Math"
    assert updated["version"] == 2


@pytest.mark.asyncio
async def test_stale_version_is_rejected(any_store):
    doc_id = await any_store.create("assignments", {"status": "NotStarted"})
    await any_store.update("assignments", doc_id, {"status": "InProgress"}, expected_version=1)

    with pytest.raises(VersionConflict):
        await any_store.update("assignments", doc_id, {"status": "NotStarted"}, expected_version=1)

    assert (await any_store.get("assignments", doc_id))["status"] == "InProgress"


@pytest.mark.asyncio
async def test_update_missing_document(any_store):
    with pytest.raises(DocumentNotFound):
        await any_store.update("assignments", "missing", {"status": "Completed"})


@pytest.mark.asyncio
async def test_query_filters_on_equality(any_store):
    await any_store.create("assignments", {"studentId": "stu_1", "subject": "Math"})
    await any_store.create("assignments", {"studentId": "stu_1", "subject": "Science"})
    await any_store.create("assignments", {"studentId": "stu_2", "subject": "Math"})

    results = await any_store.query("assignments", studentId="stu_1", subject="Math")

    assert len(results) == 1
    assert results[0]["subject"] == "Math"
    assert len(await any_store.query("assignments")) == 3
    assert await any_store.query("empty_collection") == []


@pytest.mark.asyncio
async def test_memory_store_returns_copies():
    store = InMemoryDocumentStore()
    doc_id = await store.create("assignments", {"questions": [{"id": "q1"}]})

    record = await store.get("assignments", doc_id)
    record["questions"].append({"id": "q2"})

    assert len((await store.get("assignments", doc_id))["questions"]) == 1


@pytest.mark.asyncio
async def test_json_store_leaves_no_temp_files(tmp_path):
    store = JsonFileDocumentStore(str(tmp_path))
    doc_id = await store.create("assignments", {"subject": "Math"})
    await store.update("assignments", doc_id, {"subject": "Science"})

    files = sorted(p.name for p in (tmp_path / "assignments").iterdir())
    assert files == [f"{doc_id}.json"]


@pytest.mark.asyncio
async def test_json_store_corrupt_file_is_unavailable(tmp_path):
    store = JsonFileDocumentStore(str(tmp_path))
    (tmp_path / "assignments").mkdir()
    (tmp_path / "assignments" / "broken.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(StoreUnavailable):
        await store.get("assignments", "broken")


@pytest.mark.asyncio
async def test_json_store_rejects_path_ids(tmp_path):
    store = JsonFileDocumentStore(str(tmp_path))
    assert await store.get("assignments", "../secrets") is None


def test_factory(tmp_path):
    assert isinstance(create_document_store("memory", str(tmp_path)), InMemoryDocumentStore)
    assert isinstance(create_document_store("json", str(tmp_path)), JsonFileDocumentStore)


@pytest.mark.asyncio
async def test_json_store_releases_document_locks(tmp_path):
    store = JsonFileDocumentStore(str(tmp_path))
    for _ in range(3):
        doc_id = await store.create("assignments", {"status": "NotStarted"})
        await store.update("assignments", doc_id, {"status": "InProgress"})

    assert len(store._locks) == 0
