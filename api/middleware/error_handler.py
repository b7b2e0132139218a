"""全局异常处理中间件"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.schemas.common import ErrorResponse
from common.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ClinicBaseError,
    LinkPreviewError,
    NotificationError,
    ParseError,
    PatientNotFoundError,
    PersistenceError,
    ValidationError,
)
from common.logger import get_logger

logger = get_logger(__name__)

_STATUS_CODES = (
    (ValidationError, 400),
    (ParseError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (PatientNotFoundError, 404),
    (NotificationError, 502),
    (LinkPreviewError, 502),
    (PersistenceError, 500),
)


def status_code_for(exc: ClinicBaseError) -> int:
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


def register_error_handlers(app: FastAPI) -> None:
    """注册全局异常处理器"""

    @app.exception_handler(ClinicBaseError)
    async def clinic_error_handler(request: Request, exc: ClinicBaseError):
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error(f"Clinic Error: {exc.message} ({exc.detail})")
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse.from_error(exc).model_dump(),
        )

    @app.exception_handler(Exception)
    async def general_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Internal server error",
                "detail": str(exc),
            },
        )
