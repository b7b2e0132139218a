"""登录与会话管理"""

from typing import Any, Dict, Optional

from common.config import AuthConfig
from common.exceptions import AuthenticationError, AuthorizationError
from common.logger import get_logger
from common.utils.crypto import sign_token, verify_token
from services.google_auth_service import GoogleTokenVerifier

logger = get_logger(__name__)


class AuthManager:
    """Google 账号 + 允许名单 + 签名会话令牌"""

    def __init__(self, config: AuthConfig, verifier: GoogleTokenVerifier):
        self.config = config
        self._verifier = verifier
        self._allowed = {e.strip().lower() for e in config.allowed_emails if e.strip()}

    def is_allowed(self, email: str) -> bool:
        return bool(email) and email.strip().lower() in self._allowed

    def is_exempt(self, path: str) -> bool:
        """不需要会话的路径"""
        for exempt in self.config.exempt_paths:
            if exempt.endswith("/"):
                if path.startswith(exempt):
                    return True
            elif path == exempt or path == exempt + "/":
                return True
        return False

    async def login(self, credential: str) -> Dict[str, Any]:
        """校验 Google 凭证，签发会话令牌"""
        identity = await self._verifier.verify(credential)
        if not self.is_allowed(identity["email"]):
            logger.warning("Login denied", extra={"user_email": identity["email"]})
            raise AuthorizationError("Account is not allowed", identity["email"])

        token = self.issue_session(identity)
        logger.info("Login succeeded", extra={"user_email": identity["email"]})
        return {"token": token, "user": identity}

    def issue_session(self, identity: Dict[str, Any]) -> str:
        payload = {k: identity.get(k, "") for k in ("sub", "email", "name", "picture")}
        return sign_token(
            payload, self.config.session_secret, self.config.session_max_age_seconds
        )

    def validate_session(self, token: Optional[str]) -> Dict[str, Any]:
        """返回会话用户，无效时抛 AuthenticationError"""
        payload = verify_token(token or "", self.config.session_secret)
        if payload is None:
            raise AuthenticationError("Session is missing or expired")
        # 允许名单变更后旧会话立即失效
        if not self.is_allowed(payload.get("email", "")):
            raise AuthenticationError("Session user is no longer allowed")
        return payload
