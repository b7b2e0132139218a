"""登录 / 会话单元测试"""

import time
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from common.config import AuthConfig
from common.exceptions import AuthenticationError, AuthorizationError
from common.utils.crypto import sign_token, verify_token
from managers.auth_manager import AuthManager

IDENTITY = {"sub": "1", "email": "Doctor@Clinic.tw", "name": "陳醫師", "picture": ""}


@pytest.fixture
def auth_config():
    return AuthConfig(
        google_client_id="cid",
        allowed_emails=["doctor@clinic.tw"],
        session_secret="secret",
    )


@pytest.fixture
def verifier():
    mock = MagicMock()
    mock.verify = AsyncMock(return_value=dict(IDENTITY))
    return mock


class TestToken:
    def test_roundtrip(self):
        token = sign_token({"email": "a@b.c"}, "secret", 60)
        assert verify_token(token, "secret")["email"] == "a@b.c"

    def test_wrong_secret_or_tampered(self):
        token = sign_token({"email": "a@b.c"}, "secret", 60)
        assert verify_token(token, "other") is None
        body, sig = token.split(".")
        assert verify_token(body + "x." + sig, "secret") is None
        assert verify_token("garbage", "secret") is None

    def test_non_ascii_token_rejected(self):
        """header / cookie 按 latin-1 解码，可能含非 ASCII 字符"""
        assert verify_token("\u00e9.abc", "secret") is None
        token = sign_token({"email": "a@b.c"}, "secret", 60)
        assert verify_token(token + "\u00e9", "secret") is None

    def test_expired(self):
        token = sign_token({"email": "a@b.c"}, "secret", 60)
        with patch("common.utils.crypto.time.time", return_value=time.time() + 120):
            assert verify_token(token, "secret") is None


class TestAuthManager:
    @pytest.mark.parametrize(
        "path,exempt",
        [
            ("/api/health", True),
            ("/api/auth/google", True),
            ("/api/link-preview", True),
            ("/api/users", False),
            ("/api/healthz", False),
        ],
    )
    def test_exempt_paths(self, auth_config, verifier, path, exempt):
        assert AuthManager(auth_config, verifier).is_exempt(path) is exempt

    @pytest.mark.asyncio
    async def test_login_issues_valid_session(self, auth_config, verifier):
        manager = AuthManager(auth_config, verifier)
        result = await manager.login("google-credential")
        verifier.verify.assert_awaited_once_with("google-credential")

        session = manager.validate_session(result["token"])
        assert session["email"] == IDENTITY["email"]

    @pytest.mark.asyncio
    async def test_login_rejects_unlisted_email(self, auth_config, verifier):
        verifier.verify.return_value = {**IDENTITY, "email": "stranger@gmail.com"}
        with pytest.raises(AuthorizationError):
            await AuthManager(auth_config, verifier).login("cred")

    def test_session_revoked_when_removed_from_allow_list(self, auth_config, verifier):
        token = AuthManager(auth_config, verifier).issue_session(IDENTITY)
        narrowed = auth_config.model_copy(update={"allowed_emails": []})
        with pytest.raises(AuthenticationError):
            AuthManager(narrowed, verifier).validate_session(token)

    def test_missing_session(self, auth_config, verifier):
        with pytest.raises(AuthenticationError):
            AuthManager(auth_config, verifier).validate_session(None)
