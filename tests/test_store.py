import pytest

from tableside.services.store import DocumentNotFoundError, InMemoryDocumentStore, create_store


async def test_create_only_once(store):
    assert await store.create("things", "a", {"name": "first"}) is True
    assert await store.create("things", "a", {"name": "second"}) is False

    doc = await store.get("things", "a")
    assert doc == {"id": "a", "name": "first", "version": 1}


async def test_update_checks_version(store):
    await store.create("things", "a", {"count": 1})

    assert await store.update("things", "a", {"count": 2}, expected_version=1) == 2
    assert await store.update("things", "a", {"count": 3}, expected_version=1) is None
    assert await store.update("things", "a", {"count": 4}) == 3

    assert (await store.get("things", "a"))["count"] == 4


async def test_update_missing_document(store):
    with pytest.raises(DocumentNotFoundError):
        await store.update("things", "missing", {"count": 1})


async def test_returned_documents_are_copies(store):
    await store.create("things", "a", {"tags": ["x"]})

    doc = await store.get("things", "a")
    doc["tags"].append("y")

    assert (await store.get("things", "a"))["tags"] == ["x"]


async def test_query_filters_and_sorts(store):
    await store.put("things", "b", {"kind": "fruit", "sortOrder": 2})
    await store.put("things", "a", {"kind": "fruit", "sortOrder": 1})
    await store.put("things", "c", {"kind": "veg", "sortOrder": 0})

    fruit = await store.query("things", kind="fruit")

    assert [doc["id"] for doc in fruit] == ["a", "b"]
    assert await store.query("empty") == []


def test_memory_backend_is_default():
    assert isinstance(create_store("memory"), InMemoryDocumentStore)
