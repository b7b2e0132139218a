"""LINE Messaging API 客户端"""

from typing import Any, Dict, List, Optional

import httpx

from common.config import LineConfig
from common.exceptions import NotificationError
from common.logger import get_logger
from common.utils.async_utils import gather_limited

logger = get_logger(__name__)


class LineApiClient:
    """轻量 async HTTP 客户端，调用 LINE Bot API"""

    def __init__(self, config: LineConfig):
        self._base_url = config.api_base_url.rstrip("/")
        self._access_token = config.channel_access_token
        self._timeout = config.timeout_seconds
        self._batch_size = config.batch_size
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def configured(self) -> bool:
        return bool(self._access_token)

    def _get_client(self) -> httpx.AsyncClient:
        """获取或创建持久 HTTP 客户端"""
        if not self._access_token:
            raise NotificationError("LINE_CHANNEL_ACCESS_TOKEN is not configured")
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout, connect=5.0),
                headers={
                    "Authorization": f"Bearer {self._access_token}",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def close(self):
        """关闭持久 HTTP 客户端"""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def get_user_profile(self, user_id: str) -> Dict[str, Any]:
        """取得 LINE 用户资料 {userId, displayName, pictureUrl?, ...}"""
        client = self._get_client()
        try:
            resp = await client.get(f"/profile/{user_id}")
        except httpx.HTTPError as e:
            raise NotificationError("LINE profile request failed", repr(e))
        if resp.status_code != 200:
            raise NotificationError(
                f"Failed to get user profile: {resp.status_code}", resp.text
            )
        return resp.json()

    async def push_text_message(self, user_id: str, text: str) -> None:
        """向单个用户推送文字消息"""
        client = self._get_client()
        payload = {"to": user_id, "messages": [{"type": "text", "text": text}]}
        try:
            resp = await client.post("/message/push", json=payload)
        except httpx.HTTPError as e:
            raise NotificationError("LINE push request failed", repr(e))
        if resp.status_code != 200:
            raise NotificationError(
                f"Failed to push notification: {resp.status_code}", resp.text
            )

    async def batch_push(self, user_ids: List[str], text: str) -> Dict[str, Any]:
        """
        批量推送，并发数受 batch_size 限制。

        返回 {"success": int, "failed": int, "errors": [{"userId", "error"}]}，
        单个用户失败不影响其他用户。
        """
        # 在进入并发前校验 token，避免每个用户都报同样的错误
        self._get_client()

        async def push_one(user_id: str) -> Optional[Dict[str, str]]:
            try:
                await self.push_text_message(user_id, text)
                return None
            except NotificationError as e:
                logger.warning("LINE push failed for %s: %s", user_id, e.message)
                return {"userId": user_id, "error": e.message}

        outcomes = await gather_limited(user_ids, push_one, self._batch_size)
        errors = [o for o in outcomes if o is not None]
        return {
            "success": len(outcomes) - len(errors),
            "failed": len(errors),
            "errors": errors,
        }
