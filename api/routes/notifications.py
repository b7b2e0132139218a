"""推送通知接口"""

from typing import Any, Dict

from fastapi import APIRouter, Request

from api.schemas.notification import NotificationRequest

router = APIRouter(prefix="/notifications")


@router.post("/send")
async def send_notifications(body: NotificationRequest, request: Request) -> Dict[str, Any]:
    """向选中患者的 LINE 推送 podcast 链接"""
    manager = request.app.state.engine.notification_manager
    return await manager.send_podcast(body.line_ids, body.podcast_url, body.patients)
