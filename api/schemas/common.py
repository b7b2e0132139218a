"""通用 Schema"""

from typing import Any, Optional

from pydantic import BaseModel

from common.exceptions import ClinicBaseError


class BaseResponse(BaseModel):
    """登录 / 会话等接口的统一包装"""

    success: bool = True
    message: str = ""
    data: Optional[Any] = None


class ErrorResponse(BaseModel):
    """ClinicBaseError 及会话校验失败的响应体"""

    success: bool = False
    error: str = ""
    detail: str = ""

    @classmethod
    def from_error(cls, exc: ClinicBaseError) -> "ErrorResponse":
        return cls(error=exc.message, detail=exc.detail or "")
