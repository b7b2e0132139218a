from api.schemas.auth import GoogleLoginRequest, LoginResponse, SessionUser
from api.schemas.common import BaseResponse, ErrorResponse
from api.schemas.notification import LinkPreviewRequest, NotificationRequest
from api.schemas.patient import (
    PatientListResponse,
    RecordUpdateRequest,
    WeekRange,
    WeeklyRecordsResponse,
)

__all__ = [
    "GoogleLoginRequest",
    "LoginResponse",
    "SessionUser",
    "BaseResponse",
    "ErrorResponse",
    "LinkPreviewRequest",
    "NotificationRequest",
    "PatientListResponse",
    "RecordUpdateRequest",
    "WeekRange",
    "WeeklyRecordsResponse",
]
