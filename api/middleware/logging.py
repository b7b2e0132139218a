"""请求日志中间件"""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from common.logger import get_logger

logger = get_logger(__name__)

# 健康检查只在失败时记录
_QUIET_PATHS = {"/api/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """请求日志中间件"""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()
        quiet = request.url.path in _QUIET_PATHS

        # 注入 request_id
        request.state.request_id = request_id

        if not quiet:
            logger.info(
                f"Request start: {request.method} {request.url.path}",
                extra={"request_id": request_id},
            )

        response = await call_next(request)

        duration = time.time() - start_time
        if not quiet or response.status_code >= 400:
            user = getattr(request.state, "user", None) or {}
            logger.info(
                f"Request end: {request.method} {request.url.path} "
                f"status={response.status_code} duration={duration:.3f}s",
                extra={"request_id": request_id, "user_email": user.get("email", "")},
            )

        response.headers["X-Request-ID"] = request_id
        return response
