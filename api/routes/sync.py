"""LINE 用户同步接口"""

from typing import Any, Dict

from fastapi import APIRouter, Request

router = APIRouter(prefix="/sync")


@router.get("/line-users")
async def describe_sync() -> Dict[str, str]:
    return {
        "message": "LINE推播帳號同步 API",
        "description": "使用 POST 方法來執行 LINE推播帳號同步操作",
        "endpoint": "/api/sync/line-users",
    }


@router.post("/line-users")
async def sync_line_users(request: Request) -> Dict[str, Any]:
    """按 LINE 显示名为患者绑定 lineUserId"""
    manager = request.app.state.engine.sync_manager
    return await manager.sync_line_users()
