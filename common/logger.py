"""日志配置

所有日志以单行 JSON 输出。通过 extra 传入的字段（request_id、patient_id、
user_email 等）原样写入，redact_fields 中列出的字段只输出 ***。
"""

import json
import logging
from datetime import datetime, timezone
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Iterable, Optional

from common.config import LoggingConfig

# LogRecord 自带属性，不视为 extra
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

_REDACTED = "***"


class JSONFormatter(logging.Formatter):
    """JSON 格式日志，附带 extra 上下文并脱敏"""

    def __init__(self, redact_fields: Optional[Iterable[str]] = None):
        super().__init__()
        self._redact = set(redact_fields or [])

    def format(self, record):
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in vars(record).items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            log_data[key] = _REDACTED if key in self._redact else value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(config: LoggingConfig) -> None:
    """控制台 + 按日轮转文件（file_path 为空时只输出控制台）"""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    root_logger.handlers.clear()

    formatter = JSONFormatter(config.redact_fields)
    handlers = [logging.StreamHandler()]

    if config.file_path:
        log_path = Path(config.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            TimedRotatingFileHandler(
                log_path,
                when="midnight",
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for module, level in config.module_levels.items():
        logging.getLogger(module).setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str) -> logging.Logger:
    """获取命名 logger"""
    return logging.getLogger(name)
