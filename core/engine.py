"""ClinicEngine - 依赖容器与生命周期"""

from common.config import Settings
from common.logger import get_logger
from core.importer.merge import PatientMergeResolver
from core.importer.orchestrator import ImportService
from managers.auth_manager import AuthManager
from managers.notification_manager import NotificationManager
from managers.patient_manager import PatientManager
from managers.sync_manager import SyncManager
from services.google_auth_service import GoogleTokenVerifier
from services.line_service import LineApiClient
from services.link_preview_service import LinkPreviewService
from storage.document_store import DocumentStore
from storage.repositories.line_bot_repository import LineBotRepository
from storage.repositories.patient_repository import PatientRepository

logger = get_logger(__name__)


class ClinicEngine:
    """显式创建所有组件，由 FastAPI lifespan 调用 start / stop"""

    def __init__(self, config: Settings):
        self.config = config

        # 存储（两个库分别配置）
        self.patient_store = DocumentStore(config.patients_db_dir, name="clinic")
        self.line_bot_store = DocumentStore(config.line_bot_db_dir, name="linebot")
        self.patient_repo = PatientRepository(
            self.patient_store.collection(config.storage.patients_collection)
        )
        self.line_bot_repo = LineBotRepository(
            self.line_bot_store.collection(config.storage.line_bot_collection)
        )

        # 外部服务
        self.line_client = LineApiClient(config.line)
        self.google_verifier = GoogleTokenVerifier(config.auth)
        self.link_preview_service = LinkPreviewService(config.link_preview)

        # Managers
        self.auth_manager = AuthManager(config.auth, self.google_verifier)
        self.patient_manager = PatientManager(self.patient_repo)
        self.notification_manager = NotificationManager(self.line_client)
        self.sync_manager = SyncManager(
            self.line_bot_repo,
            self.patient_repo,
            self.line_client,
            profile_interval_seconds=config.line.profile_interval_seconds,
        )

        # 导入
        self.merge_resolver = PatientMergeResolver(self.patient_repo)
        self.import_service = ImportService(
            self.merge_resolver, default_name=config.importer.default_name
        )

    async def start(self) -> None:
        """启动引擎"""
        logger.info("Starting ClinicEngine...")
        await self.patient_store.connect()
        await self.line_bot_store.connect()
        if not self.line_client.configured:
            logger.warning("LINE channel token not configured, push disabled")
        logger.info("ClinicEngine started successfully")

    async def stop(self) -> None:
        """停止引擎"""
        logger.info("Stopping ClinicEngine...")
        await self.line_client.close()
        await self.google_verifier.close()
        await self.link_preview_service.close()
        await self.patient_store.close()
        await self.line_bot_store.close()
        logger.info("ClinicEngine stopped")
