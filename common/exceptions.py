"""自定义异常类"""


class ClinicBaseError(Exception):
    """Clinic 基础异常"""

    def __init__(self, message: str = "", detail: str = ""):
        self.message = message
        self.detail = detail
        super().__init__(message)


class ValidationError(ClinicBaseError):
    """输入不合法（缺少 CSV、overrides 格式错误、ID 格式错误）"""
    pass


class ParseError(ClinicBaseError):
    """CSV 解析失败"""
    pass


class PersistenceError(ClinicBaseError):
    """存储不可用或读写失败"""
    pass


class PatientNotFoundError(ClinicBaseError):
    """患者未找到"""
    pass


class AuthenticationError(ClinicBaseError):
    """未登录或会话无效"""
    pass


class AuthorizationError(ClinicBaseError):
    """账号不在允许名单内"""
    pass


class NotificationError(ClinicBaseError):
    """LINE 推送失败"""
    pass


class LinkPreviewError(ClinicBaseError):
    """链接预览抓取失败"""
    pass


class ConfigError(ClinicBaseError):
    """配置错误"""
    pass
