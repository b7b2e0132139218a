"""LINE 用户同步单元测试"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from common.exceptions import NotificationError
from managers.sync_manager import SyncManager
from storage.models.patient import HistoryRecord, Patient
from storage.repositories.line_bot_repository import LineBotRepository


@pytest.fixture
async def line_bot_repo(document_store):
    col = document_store.collection("patient")
    for user_id in ("U1", "U2", "U3", "U4"):
        await col.insert_one({"userId": user_id})
    return LineBotRepository(col)


@pytest.fixture
def line_client():
    profiles = {
        "U1": {"userId": "U1", "displayName": "小明"},
        "U2": {"userId": "U2", "displayName": "李大華"},
        "U3": {"userId": "U3", "displayName": "路人"},
    }

    async def get_profile(user_id):
        if user_id not in profiles:
            raise NotificationError("Failed to get user profile: 404")
        return profiles[user_id]

    client = MagicMock()
    client.get_user_profile = AsyncMock(side_effect=get_profile)
    return client


class TestSyncManager:
    @pytest.mark.asyncio
    async def test_sync(self, patient_repo, line_bot_repo, line_client):
        record = HistoryRecord(visit_date=datetime(2025, 1, 6))
        wang_id = await patient_repo.insert(Patient(name="王小明", history_records=[record]))
        await patient_repo.insert(Patient(name="李大華", line_user_id="U-old"))

        manager = SyncManager(line_bot_repo, patient_repo, line_client, profile_interval_seconds=0)
        result = await manager.sync_line_users()

        assert result["stats"]["total"] == 4
        assert result["stats"]["synced"] == 1
        assert result["stats"]["alreadySynced"] == 1
        assert result["stats"]["noMatch"] == 1
        assert result["failedUserIds"] == ["U4"]

        wang = await patient_repo.get(wang_id)
        assert wang.line_user_id == "U1"
        assert wang.last_synced_at is not None

    @pytest.mark.asyncio
    async def test_nothing_to_sync(self, patient_repo, document_store, line_client):
        empty = LineBotRepository(document_store.collection("empty"))
        result = await SyncManager(empty, patient_repo, line_client).sync_line_users()
        assert result["stats"] == {"total": 0, "synced": 0, "failed": 0}
        line_client.get_user_profile.assert_not_called()
