"""配置管理"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from common.exceptions import ConfigError

# 加载 .env
load_dotenv()

# 项目根目录
BASE_DIR = Path(__file__).resolve().parent.parent


class StorageConfig(BaseModel):
    # 诊所患者库与 LINE Bot 库分别配置，均为必填
    patients_path: str = ""
    line_bot_path: str = ""
    patients_collection: str = "patients"
    line_bot_collection: str = "patient"

    def resolve(self, raw: str) -> Path:
        path = Path(raw)
        if not path.is_absolute():
            path = BASE_DIR / path
        return path.resolve()


class AuthConfig(BaseModel):
    enabled: bool = True
    google_client_id: str = ""
    google_tokeninfo_url: str = "https://oauth2.googleapis.com/tokeninfo"
    allowed_emails: List[str] = []
    session_secret: str = ""
    session_max_age_seconds: int = 24 * 60 * 60
    cookie_name: str = "clinic_session"
    exempt_paths: List[str] = [
        "/api/health",
        "/api/auth/",
        "/api/link-preview",
    ]


class LineConfig(BaseModel):
    channel_access_token: str = ""
    api_base_url: str = "https://api.line.me/v2/bot"
    batch_size: int = 10
    timeout_seconds: float = 10.0
    profile_interval_seconds: float = 0.1


class ImportConfig(BaseModel):
    max_upload_bytes: int = 5 * 1024 * 1024
    default_name: str = "Unknown"


class LinkPreviewConfig(BaseModel):
    user_agent: str = "Mozilla/5.0 (compatible; LinkPreview/1.0)"
    timeout_seconds: float = 8.0


class LoggingConfig(BaseModel):
    level: str = "INFO"
    file_path: str = "logs/clinic.log"
    backup_count: int = 30
    module_levels: Dict[str, str] = {}
    redact_fields: List[str] = ["credential", "token", "session_secret"]


class Settings(BaseModel):
    """全局配置"""

    # 服务配置
    host: str = "0.0.0.0"
    port: int = 8010
    debug: bool = False
    environment: str = "development"
    version: str = "1.0.0"

    # 子配置
    storage: StorageConfig = StorageConfig()
    auth: AuthConfig = AuthConfig()
    line: LineConfig = LineConfig()
    importer: ImportConfig = ImportConfig()
    link_preview: LinkPreviewConfig = LinkPreviewConfig()
    logging: LoggingConfig = LoggingConfig()

    @property
    def patients_db_dir(self) -> Path:
        return self.storage.resolve(self.storage.patients_path)

    @property
    def line_bot_db_dir(self) -> Path:
        return self.storage.resolve(self.storage.line_bot_path)


def _resolve_env_vars(value: Any) -> Any:
    """递归解析配置中的环境变量引用 ${VAR:default}"""
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        inner = value[2:-1]
        if ":" in inner:
            var_name, default = inner.split(":", 1)
        else:
            var_name, default = inner, ""
        return os.getenv(var_name, default)
    elif isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_resolve_env_vars(v) for v in value]
    return value


def _split_csv_env(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_settings(yaml_path: Optional[Path] = None) -> Settings:
    """加载配置：环境变量 + settings.yaml"""
    config_data: Dict[str, Any] = {}

    # 从 settings.yaml 加载
    yaml_path = yaml_path or BASE_DIR / "config" / "settings.yaml"
    if yaml_path.exists():
        with open(yaml_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}
            config_data = _resolve_env_vars(yaml_data)

    # 环境变量覆盖
    env_overrides = {
        "host": os.getenv("CLINIC_HOST", config_data.get("host", "0.0.0.0")),
        "port": int(os.getenv("CLINIC_PORT", config_data.get("port", 8010))),
        "debug": os.getenv("CLINIC_DEBUG", "false").lower() == "true",
        "environment": os.getenv(
            "CLINIC_ENV", config_data.get("environment", "development")
        ),
    }
    config_data.update({k: v for k, v in env_overrides.items() if v})

    storage = config_data.setdefault("storage", {})
    if os.getenv("PATIENTS_DB_PATH"):
        storage["patients_path"] = os.getenv("PATIENTS_DB_PATH")
    if os.getenv("LINEBOT_DB_PATH"):
        storage["line_bot_path"] = os.getenv("LINEBOT_DB_PATH")

    auth = config_data.setdefault("auth", {})
    if os.getenv("GOOGLE_CLIENT_ID"):
        auth["google_client_id"] = os.getenv("GOOGLE_CLIENT_ID")
    if os.getenv("SESSION_SECRET"):
        auth["session_secret"] = os.getenv("SESSION_SECRET")
    if os.getenv("ALLOWED_EMAILS"):
        auth["allowed_emails"] = _split_csv_env(os.getenv("ALLOWED_EMAILS"))
    elif isinstance(auth.get("allowed_emails"), str):
        auth["allowed_emails"] = _split_csv_env(auth["allowed_emails"])
    if os.getenv("CLINIC_AUTH_ENABLED"):
        auth["enabled"] = os.getenv("CLINIC_AUTH_ENABLED").lower() == "true"

    line = config_data.setdefault("line", {})
    if os.getenv("LINE_CHANNEL_ACCESS_TOKEN"):
        line["channel_access_token"] = os.getenv("LINE_CHANNEL_ACCESS_TOKEN")

    return Settings(**config_data)


def validate_settings(cfg: Settings) -> None:
    """启动时校验必填项，缺失直接失败"""
    missing = []
    if not cfg.storage.patients_path.strip():
        missing.append("storage.patients_path (PATIENTS_DB_PATH)")
    if not cfg.storage.line_bot_path.strip():
        missing.append("storage.line_bot_path (LINEBOT_DB_PATH)")
    if cfg.auth.enabled:
        if not cfg.auth.session_secret.strip():
            missing.append("auth.session_secret (SESSION_SECRET)")
        if not cfg.auth.google_client_id.strip():
            missing.append("auth.google_client_id (GOOGLE_CLIENT_ID)")
    if missing:
        raise ConfigError("Missing required configuration", ", ".join(missing))


# 全局配置单例
settings = load_settings()
