"""链接预览接口"""

from typing import Dict

from fastapi import APIRouter, Request

from api.schemas.notification import LinkPreviewRequest

router = APIRouter()


@router.post("/link-preview")
async def link_preview(body: LinkPreviewRequest, request: Request) -> Dict[str, str]:
    service = request.app.state.engine.link_preview_service
    return await service.preview(body.url)
