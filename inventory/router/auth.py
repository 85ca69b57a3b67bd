from fastapi import APIRouter, Depends, Request, Response, status

from core.request_log import client_ip
from core.security import get_current_user
from schemas.auth import (
    AccessTokenData,
    CurrentUser,
    LoginData,
    LoginRequest,
    LoginResponse,
    ProfileResponse,
    RefreshResponse,
    RegisterResponse,
    UserCreate,
)
from schemas.common import MessageResponse
from service.auth_service import REFRESH_TOKEN_LIFETIME, AuthService, get_auth_service
from service.rate_limit_service import AuthAttempt, auth_rate_limit

router = APIRouter()

REFRESH_COOKIE = "refreshToken"

# 크로스 사이트 프론트엔드에서도 쿠키가 전송되도록 SameSite=None (+ Secure 필수)
COOKIE_OPTIONS = {
    "httponly": True,
    "secure": True,
    "samesite": "none",
    "path": "/",
}


def _user_agent(request: Request) -> str:
    return request.headers.get("User-Agent") or "unknown"


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_in: UserCreate,
    request: Request,
    attempt: AuthAttempt = Depends(auth_rate_limit),
    service: AuthService = Depends(get_auth_service),
):
    """새로운 사용자를 등록합니다."""
    user = await service.register(
        user_in.username,
        user_in.email,
        user_in.password,
        ip_address=client_ip(request),
        user_agent=_user_agent(request),
    )
    await attempt.succeeded()
    return RegisterResponse(data=user)


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    attempt: AuthAttempt = Depends(auth_rate_limit),
    service: AuthService = Depends(get_auth_service),
):
    """자격 증명 확인 후 access 토큰은 본문으로, refresh 토큰은 HttpOnly 쿠키로 발급합니다."""
    result = await service.login(body.email, body.password, client_ip(request), _user_agent(request))
    await attempt.succeeded()

    response.set_cookie(
        REFRESH_COOKIE,
        result.refresh_token,
        max_age=int(REFRESH_TOKEN_LIFETIME.total_seconds()),
        **COOKIE_OPTIONS,
    )
    return LoginResponse(data=LoginData(user=result.user, access_token=result.access_token))


@router.post("/refresh-token", response_model=RefreshResponse)
async def refresh_token(request: Request, service: AuthService = Depends(get_auth_service)):
    """refresh 토큰 쿠키로 새 access 토큰을 발급받습니다."""
    access_token = await service.refresh(request.cookies.get(REFRESH_COOKIE))
    return RefreshResponse(data=AccessTokenData(access_token=access_token))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    """refresh 토큰을 폐기하고 쿠키를 지웁니다."""
    await service.logout(current_user.user_id, request.cookies.get(REFRESH_COOKIE))
    response.delete_cookie(REFRESH_COOKIE, **COOKIE_OPTIONS)
    return MessageResponse(message="Logged out successfully")


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    current_user: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    """내 프로필 조회 (비밀번호 등 민감 정보 제외)"""
    return ProfileResponse(data=await service.get_profile(current_user.user_id))
