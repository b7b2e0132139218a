"""推送通知"""

from typing import Any, Dict, List, Optional

from common.exceptions import ValidationError
from common.logger import get_logger
from services.line_service import LineApiClient

logger = get_logger(__name__)

PODCAST_TEMPLATE = "新的 Podcast 節目已上線：{url}"


class NotificationManager:
    def __init__(self, line_client: LineApiClient):
        self._line = line_client

    async def send_podcast(
        self,
        line_ids: Any,
        podcast_url: Any,
        patients: Optional[List[Any]] = None,
    ) -> Dict[str, Any]:
        """向一组 LINE 用户推送 podcast 链接"""
        if not isinstance(line_ids, list) or not line_ids:
            raise ValidationError("No LINE IDs provided")
        if not isinstance(podcast_url, str) or not podcast_url.strip():
            raise ValidationError("Invalid podcast URL")

        recipients = list(dict.fromkeys(i for i in line_ids if isinstance(i, str) and i))
        result = await self._line.batch_push(
            recipients, PODCAST_TEMPLATE.format(url=podcast_url.strip())
        )
        logger.info(
            "Podcast push finished: success=%d failed=%d",
            result["success"],
            result["failed"],
        )
        return {
            "success": result["failed"] == 0,
            "sentCount": result["success"],
            "failedCount": result["failed"],
            "errors": result["errors"],
            "message": f"Notifications sent to {result['success']} patients",
            "details": {"podcastUrl": podcast_url, "recipients": patients or []},
        }
