"""Auth Schema"""

from typing import Optional

from pydantic import BaseModel


class GoogleLoginRequest(BaseModel):
    """Google 登录凭证（ID token）"""

    credential: str


class SessionUser(BaseModel):
    """会话用户"""

    sub: str = ""
    email: str
    name: str = ""
    picture: str = ""
    exp: Optional[int] = None


class LoginResponse(BaseModel):
    token: str
    user: SessionUser
