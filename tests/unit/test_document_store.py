"""文档库单元测试"""

import pytest

from common.exceptions import PersistenceError
from storage.document_store import DocumentStore, is_valid_object_id, new_object_id
from storage.query import Eq


class TestObjectId:
    def test_new_id_is_valid(self):
        assert is_valid_object_id(new_object_id())

    @pytest.mark.parametrize("value", ["", "xyz", "g" * 24, "a" * 23, None])
    def test_invalid(self, value):
        assert not is_valid_object_id(value)


class TestCollection:
    @pytest.mark.asyncio
    async def test_insert_and_find(self, document_store):
        col = document_store.collection("patients")
        doc_id = await col.insert_one({"name": "王小明"})

        found = await col.find_one(Eq("_id", doc_id))
        assert found["name"] == "王小明"
        assert await col.count() == 1

    @pytest.mark.asyncio
    async def test_update_set_and_push(self, document_store):
        col = document_store.collection("patients")
        doc_id = await col.insert_one({"name": "王小明", "historyRecords": [{"notes": None}]})

        modified = await col.update_one(
            Eq("_id", doc_id),
            set_fields={"historyRecords.0.notes": "好轉"},
            push={"historyRecords": [{"notes": "新"}]},
        )
        assert modified == 1
        doc = await col.find_one(Eq("_id", doc_id))
        assert [r["notes"] for r in doc["historyRecords"]] == ["好轉", "新"]

    @pytest.mark.asyncio
    async def test_update_without_change_returns_zero(self, document_store):
        col = document_store.collection("patients")
        doc_id = await col.insert_one({"name": "王小明"})
        assert await col.update_one(Eq("_id", doc_id), set_fields={"name": "王小明"}) == 0
        assert await col.update_one(Eq("_id", "b" * 24), set_fields={"name": "x"}) == 0

    @pytest.mark.asyncio
    async def test_returned_documents_are_copies(self, document_store):
        col = document_store.collection("patients")
        doc_id = await col.insert_one({"name": "王小明"})
        doc = await col.find_one()
        doc["name"] = "改掉"
        assert (await col.find_one(Eq("_id", doc_id)))["name"] == "王小明"

    @pytest.mark.asyncio
    async def test_distinct_skips_empty(self, document_store):
        col = document_store.collection("patient")
        for user_id in ("U1", "U2", "U1", None):
            await col.insert_one({"userId": user_id})
        assert await col.distinct("userId") == ["U1", "U2"]

    @pytest.mark.asyncio
    async def test_data_survives_reconnect(self, tmp_path):
        store = DocumentStore(tmp_path / "db")
        await store.connect()
        await store.collection("patients").insert_one({"name": "王小明"})
        await store.close()

        await store.connect()
        assert await store.collection("patients").count() == 1
        await store.close()


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_closed_store_rejects_access(self, tmp_path):
        store = DocumentStore(tmp_path / "db")
        with pytest.raises(PersistenceError):
            await store.collection("patients").find_one()
        with pytest.raises(PersistenceError):
            await store.ping()

    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, document_store):
        (document_store.base_dir / "patients.json").write_text("{broken", encoding="utf-8")
        with pytest.raises(PersistenceError):
            await document_store.collection("patients").find()
