"""Google ID Token 校验"""

from typing import Any, Dict, Optional

import httpx

from common.config import AuthConfig
from common.exceptions import AuthenticationError
from common.logger import get_logger

logger = get_logger(__name__)


class GoogleTokenVerifier:
    """通过 tokeninfo 接口校验 Google 登录凭证"""

    def __init__(self, config: AuthConfig):
        self._tokeninfo_url = config.google_tokeninfo_url
        self._client_id = config.google_client_id
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(10.0, connect=5.0))
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def verify(self, credential: str) -> Dict[str, Any]:
        """
        返回 {"sub", "email", "name", "picture"}。

        凭证无效、audience 不符或邮箱未验证时抛 AuthenticationError。
        """
        if not credential:
            raise AuthenticationError("Missing credential")
        try:
            resp = await self._get_client().get(
                self._tokeninfo_url, params={"id_token": credential}
            )
        except httpx.HTTPError as e:
            logger.warning("Google tokeninfo unreachable: %r", e)
            raise AuthenticationError("Identity provider unavailable", repr(e))
        if resp.status_code != 200:
            raise AuthenticationError("Invalid Google credential", resp.text)

        info = resp.json()
        if self._client_id and info.get("aud") != self._client_id:
            raise AuthenticationError("Credential audience mismatch")
        if str(info.get("email_verified", "")).lower() != "true":
            raise AuthenticationError("Google email is not verified")
        return {
            "sub": info.get("sub", ""),
            "email": info.get("email", ""),
            "name": info.get("name", ""),
            "picture": info.get("picture", ""),
        }
