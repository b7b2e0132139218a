"""会话令牌签名（纯 stdlib，无第三方依赖）"""

import base64
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


def _signature(body: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), body.encode("ascii"), hashlib.sha256)
    return _b64encode(digest.digest())


def sign_token(payload: Dict[str, Any], secret: str, max_age_seconds: int) -> str:
    """签发令牌：base64(payload).signature，payload 中写入 exp"""
    data = dict(payload)
    data["exp"] = int(time.time()) + max_age_seconds
    body = _b64encode(
        json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    )
    return f"{body}.{_signature(body, secret)}"


def verify_token(token: str, secret: str) -> Optional[Dict[str, Any]]:
    """校验签名与过期时间，无效返回 None"""
    if not token or not token.isascii() or token.count(".") != 1:
        return None
    body, signature = token.split(".", 1)
    if not hmac.compare_digest(signature, _signature(body, secret)):
        return None
    try:
        payload = json.loads(_b64decode(body).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    if int(payload.get("exp", 0)) < int(time.time()):
        return None
    return payload
