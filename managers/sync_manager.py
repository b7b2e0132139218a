"""LINE Bot 用户与诊所患者的同步"""

import asyncio
from typing import Any, Dict, List

from common.exceptions import ClinicBaseError, NotificationError
from common.logger import get_logger
from services.line_service import LineApiClient
from storage.repositories.line_bot_repository import LineBotRepository
from storage.repositories.patient_repository import PatientRepository

logger = get_logger(__name__)


class SyncManager:
    """
    1. 从 LINE Bot 库取出全部 userId
    2. 调 LINE API 取得 displayName
    3. 按 displayName 匹配尚未绑定 lineUserId 的患者
    4. 写入 lineUserId，建立推送能力
    """

    def __init__(
        self,
        line_bot_repo: LineBotRepository,
        patient_repo: PatientRepository,
        line_client: LineApiClient,
        profile_interval_seconds: float = 0.1,
    ):
        self._line_bot_repo = line_bot_repo
        self._patient_repo = patient_repo
        self._line = line_client
        self._interval = profile_interval_seconds

    async def sync_line_users(self) -> Dict[str, Any]:
        user_ids = await self._line_bot_repo.distinct_user_ids()
        if not user_ids:
            return {
                "success": True,
                "message": "沒有找到需要同步的 LINE 用戶",
                "stats": {"total": 0, "synced": 0, "failed": 0},
                "results": [],
                "failedUserIds": [],
            }
        logger.info("Found %d LINE user ids", len(user_ids))

        profiles: List[Dict[str, Any]] = []
        failed_user_ids: List[str] = []
        for user_id in user_ids:
            try:
                profiles.append(await self._line.get_user_profile(user_id))
            except NotificationError as e:
                logger.warning("Profile lookup failed for %s: %s", user_id, e.message)
                failed_user_ids.append(user_id)
            # 控制请求频率
            if self._interval:
                await asyncio.sleep(self._interval)

        results = [await self._sync_profile(p) for p in profiles]
        synced = sum(1 for r in results if r["status"] == "synced")
        return {
            "success": True,
            "message": f"LINE推播帳號同步完成! 已同步 {synced} 位患者",
            "stats": {
                "total": len(user_ids),
                "profilesRetrieved": len(profiles),
                "profilesFailure": len(failed_user_ids),
                "synced": synced,
                "alreadySynced": sum(1 for r in results if r["status"] == "already_synced"),
                "noMatch": sum(1 for r in results if r["status"] == "no_match"),
                "errors": sum(1 for r in results if r["status"] == "error"),
            },
            "results": results,
            "failedUserIds": failed_user_ids,
        }

    async def _sync_profile(self, profile: Dict[str, Any]) -> Dict[str, Any]:
        line_user_id = profile.get("userId", "")
        display_name = profile.get("displayName", "")
        base = {"lineUserId": line_user_id, "lineDisplayName": display_name}
        if not display_name.strip():
            return {**base, "status": "no_match"}
        try:
            patient = await self._patient_repo.find_by_display_name(display_name, linked=False)
            if patient:
                await self._patient_repo.set_line_user_id(patient.id, line_user_id)
                logger.info("Synced %s <-> %s", patient.name, display_name,
                            extra={"patient_id": patient.id})
                return {
                    **base,
                    "patientId": patient.id,
                    "patientName": patient.name,
                    "status": "synced",
                }

            linked = await self._patient_repo.find_by_display_name(display_name, linked=True)
            if linked:
                return {
                    **base,
                    "status": "already_synced",
                    "existingLineUserId": linked.line_user_id,
                }
            return {**base, "status": "no_match"}
        except ClinicBaseError as e:
            logger.error("Sync failed for %s: %s", display_name, e.message)
            return {**base, "status": "error", "error": e.message}
