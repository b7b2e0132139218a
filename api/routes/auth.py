"""Auth 认证路由"""

from fastapi import APIRouter, Request, Response

from api.middleware.auth import extract_token
from api.schemas.auth import GoogleLoginRequest, LoginResponse, SessionUser
from api.schemas.common import BaseResponse

router = APIRouter(prefix="/auth")


@router.post("/google")
async def login_with_google(
    body: GoogleLoginRequest, request: Request, response: Response
) -> BaseResponse:
    """Google 登录：校验凭证与允许名单，签发会话"""
    auth = request.app.state.engine.auth_manager
    result = await auth.login(body.credential)
    response.set_cookie(
        auth.config.cookie_name,
        result["token"],
        max_age=auth.config.session_max_age_seconds,
        httponly=True,
        samesite="lax",
        secure=not request.app.state.engine.config.debug,
    )
    return BaseResponse(
        message="Login succeeded",
        data=LoginResponse(token=result["token"], user=SessionUser(**result["user"])),
    )


@router.post("/logout")
async def logout(request: Request, response: Response) -> BaseResponse:
    """清除会话 cookie"""
    auth = request.app.state.engine.auth_manager
    response.delete_cookie(auth.config.cookie_name)
    return BaseResponse(message="Logged out")


@router.get("/session")
async def get_session(request: Request) -> BaseResponse:
    """当前会话用户"""
    auth = request.app.state.engine.auth_manager
    user = auth.validate_session(extract_token(request, auth.config.cookie_name))
    return BaseResponse(data=SessionUser(**user))
