"""LINE 聊天记录 CSV 导入接口"""

import json
from typing import Any, Optional, Tuple

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from api.middleware.error_handler import status_code_for
from common.exceptions import ClinicBaseError, ValidationError
from common.logger import get_logger
from core.importer.orchestrator import ImportRequest

logger = get_logger(__name__)

router = APIRouter(prefix="/import")

_TRUE_VALUES = {"1", "true", "yes"}


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUE_VALUES


def _parse_overrides(raw: Any) -> Any:
    """form-data 中的 overrides 为 JSON 字符串"""
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        raise ValidationError("overrides must be a JSON string")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError("overrides is not valid JSON", str(e))


async def _read_upload(upload: UploadFile, max_bytes: int) -> str:
    data = await upload.read()
    if len(data) > max_bytes:
        raise ValidationError("Uploaded file is too large", f"limit={max_bytes} bytes")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValidationError("Uploaded file must be UTF-8 text", str(e))


async def read_import_payload(request: Request, max_bytes: int) -> Tuple[Optional[str], Any]:
    """按 Content-Type 读取 (csv_text, overrides)"""
    content_type = request.headers.get("content-type", "")

    if "multipart/form-data" in content_type:
        form = await request.form()
        overrides = _parse_overrides(form.get("overrides"))
        upload = form.get("file")
        if isinstance(upload, UploadFile):
            return await _read_upload(upload, max_bytes), overrides
        csv_text = form.get("csv")
        if isinstance(csv_text, str):
            return csv_text, overrides
        if overrides is not None:
            return None, overrides
        raise ValidationError("No CSV file/csv text or overrides provided in form-data")

    if "application/json" in content_type:
        try:
            body = await request.json()
        except ValueError as e:
            raise ValidationError("Request body is not valid JSON", str(e))
        if not isinstance(body, dict):
            raise ValidationError('JSON body must be an object with a "csv" property')
        overrides = body.get("overrides")
        csv_text = body.get("csv")
        if isinstance(csv_text, str):
            return csv_text, overrides
        if overrides is not None:
            return None, overrides
        raise ValidationError('JSON body must include a "csv" string property')

    # text/csv 或 text/plain
    raw = await request.body()
    if len(raw) > max_bytes:
        raise ValidationError("Request body is too large", f"limit={max_bytes} bytes")
    text = raw.decode("utf-8", errors="replace")
    if text.strip():
        return text, None
    raise ValidationError("Unsupported content type or empty body")


@router.post("/line-csv")
async def import_line_csv(
    request: Request,
    upsert: Optional[str] = Query(None, description="1/true/yes 时写入数据库"),
    commit: Optional[str] = Query(None, description="同 upsert"),
    line_user_id: Optional[str] = Query(None, alias="lineUserId"),
    external_messaging_id: Optional[str] = Query(None, alias="externalMessagingId"),
    name: Optional[str] = Query(None),
) -> JSONResponse:
    """解析 CSV（或人工编辑后的 overrides）为每周记录，默认仅预览"""
    engine = request.app.state.engine
    try:
        csv_text, overrides = await read_import_payload(
            request, engine.config.importer.max_upload_bytes
        )
        result = await engine.import_service.run(
            ImportRequest(
                csv_text=csv_text,
                overrides=overrides,
                commit=_flag(upsert) or _flag(commit),
                line_user_id=line_user_id or external_messaging_id,
                name=name,
            )
        )
    except ClinicBaseError as e:
        status_code = status_code_for(e)
        if status_code >= 500:
            logger.error(f"Import failed: {e.message} ({e.detail})")
        else:
            logger.info(f"Import rejected: {e.message}")
        return JSONResponse(status_code=status_code, content={"ok": False, "error": e.message})

    return JSONResponse(content=result.to_dict())
