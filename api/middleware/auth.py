"""会话校验中间件"""

from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from api.schemas.common import ErrorResponse
from common.exceptions import AuthenticationError
from common.logger import get_logger

logger = get_logger(__name__)


def extract_token(request: Request, cookie_name: str) -> Optional[str]:
    """Cookie 优先，其次 Authorization: Bearer"""
    token = request.cookies.get(cookie_name)
    if token:
        return token
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return None


class AuthGateMiddleware(BaseHTTPMiddleware):
    """/api 下除豁免路径外都需要有效会话"""

    async def dispatch(self, request: Request, call_next):
        engine = getattr(request.app.state, "engine", None)
        path = request.url.path
        if (
            engine is None
            or not engine.config.auth.enabled
            or not path.startswith("/api")
            or engine.auth_manager.is_exempt(path)
        ):
            return await call_next(request)

        auth = engine.auth_manager
        try:
            request.state.user = auth.validate_session(
                extract_token(request, auth.config.cookie_name)
            )
        except AuthenticationError as e:
            logger.info(
                f"Unauthorized: {request.method} {path}",
                extra={"request_id": getattr(request.state, "request_id", "")},
            )
            return JSONResponse(
                status_code=401,
                content=ErrorResponse(error="Unauthorized", detail=e.message).model_dump(),
            )
        return await call_next(request)
