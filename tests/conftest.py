"""测试配置"""

import sys
from pathlib import Path

import pytest

# 添加项目根目录到 sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


SAMPLE_CSV = (
    "用戶名,Content,時間,日期,發送者類型,Keywords,中醫診斷輔助\n"
    "王小明,最近頭痛睡不好,10:00,2025/01/06,User,\"頭痛,失眠\",肝陽上亢\n"
    "王小明,還是會暈,下午 3:15,2025/01/08,User,\"失眠,眩暈\",\"肝陽上亢、心脾兩虛\"\n"
)


@pytest.fixture
def sample_csv():
    """同一周内两条消息的 LINE 导出"""
    return SAMPLE_CSV


@pytest.fixture
def test_settings(tmp_path):
    """指向临时目录的配置，默认关闭登录校验"""
    from common.config import (
        AuthConfig,
        LineConfig,
        LoggingConfig,
        Settings,
        StorageConfig,
    )

    return Settings(
        debug=True,
        environment="test",
        storage=StorageConfig(
            patients_path=str(tmp_path / "clinic"),
            line_bot_path=str(tmp_path / "linebot"),
        ),
        auth=AuthConfig(
            enabled=False,
            google_client_id="test-client-id",
            allowed_emails=["doctor@clinic.tw"],
            session_secret="test-secret",
        ),
        line=LineConfig(channel_access_token="test-line-token", profile_interval_seconds=0),
        logging=LoggingConfig(file_path=""),
    )


@pytest.fixture
async def document_store(tmp_path):
    """已连接的临时文档库"""
    from storage.document_store import DocumentStore

    store = DocumentStore(tmp_path / "db", name="test")
    await store.connect()
    yield store
    await store.close()


@pytest.fixture
async def patient_repo(document_store):
    from storage.repositories.patient_repository import PatientRepository

    return PatientRepository(document_store.collection("patients"))
