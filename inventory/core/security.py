import secrets
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Protocol

from fastapi import Depends, Request
from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, settings
from core.database import get_db
from core.exceptions import (
    ForbiddenError,
    InvalidTokenError,
    MissingTokenError,
    StaleTokenError,
    UnauthenticatedError,
    UserUnavailableError,
)
from core.logger import get_logger
from models.base import as_utc
from repository import user_repo
from schemas.auth import CurrentUser

logger = get_logger("security")

BEARER_PREFIX = "Bearer "
REFRESH_TOKEN_BYTES = 64


class AccessTokenPayload(BaseModel):
    """서명 검증을 통과한 access 토큰의 내용 (저장하지 않음)"""
    user_id: int
    username: str
    role: str
    issued_at: datetime
    expires_at: datetime
    issuer: str
    audience: str


class TokenService(Protocol):
    """토큰 발급/검증 capability"""

    def issue_access_token(self, user_id: int, username: str, role: str) -> str: ...

    def issue_refresh_token(self) -> str: ...

    def verify_access_token(self, token: str) -> AccessTokenPayload: ...


class JwtTokenService:
    """
    HS256 JWT access 토큰 + 불투명(opaque) refresh 토큰

    - access: {userId, username, role, iat, exp, iss, aud}, 기본 15분
    - refresh: 64바이트 난수 hex: 클레임 없음, 유효성은 DB 행이 판단
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 15,
        issuer: str = "fruit-inventory",
        audience: str = "fruit-inventory-client",
    ):
        self._secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self.issuer = issuer
        self.audience = audience

    @classmethod
    def from_settings(cls, config: Settings) -> "JwtTokenService":
        return cls(
            secret=config.jwt_access_secret,
            algorithm=config.jwt_algorithm,
            expire_minutes=config.jwt_access_expire_minutes,
            issuer=config.jwt_issuer,
            audience=config.jwt_audience,
        )

    def issue_access_token(self, user_id: int, username: str, role: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "userId": user_id,
            "username": username,
            "role": role,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
            "iss": self.issuer,
            "aud": self.audience,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def issue_refresh_token(self) -> str:
        return secrets.token_hex(REFRESH_TOKEN_BYTES)

    def verify_access_token(self, token: str) -> AccessTokenPayload:
        """
        서명, 발급자, 대상, 만료를 모두 검사

        실패 원인(만료/서명 불일치/형식 오류 등)은 서버 로그에만 남기고
        호출자에게는 InvalidTokenError 하나로 통일한다.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"require_iat": True, "require_exp": True},
            )
            return AccessTokenPayload(
                user_id=claims["userId"],
                username=claims["username"],
                role=claims["role"],
                issued_at=datetime.fromtimestamp(claims["iat"], timezone.utc),
                expires_at=datetime.fromtimestamp(claims["exp"], timezone.utc),
                issuer=claims["iss"],
                audience=claims["aud"],
            )
        except (JWTError, KeyError, TypeError, ValueError, ValidationError) as exc:
            logger.warning(
                "Access token rejected",
                extra={"extra_data": {"cause": type(exc).__name__, "detail": str(exc)}},
            )
            raise InvalidTokenError() from exc


def extract_bearer(header_value: str | None) -> str | None:
    """'Bearer <token>' 형식에서 토큰만 추출. 없거나 형식이 틀리면 None"""
    if not header_value or not header_value.startswith(BEARER_PREFIX):
        return None
    token = header_value[len(BEARER_PREFIX):].strip()
    return token or None


@lru_cache
def get_token_service() -> TokenService:
    """프로세스 전역 시크릿으로 한 번만 생성"""
    return JwtTokenService.from_settings(settings)


# === 인증 미들웨어 (FastAPI Depends) ===

async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentUser:
    """
    요청 단위 인증 게이트

    1. Authorization 헤더에서 Bearer 토큰 추출 → 없으면 MissingToken
    2. 서명/만료/iss/aud 검증 → 실패 시 InvalidToken
    3. DB에서 활성 사용자 로드 → 없거나 비활성이면 UserUnavailable
    4. 비밀번호 변경 이후 발급된 토큰인지 확인 → 아니면 StaleToken
    5. {user_id, username, role}을 핸들러에 전달
    """
    token = extract_bearer(request.headers.get("Authorization"))
    if token is None:
        raise MissingTokenError()

    payload = tokens.verify_access_token(token)

    user = await user_repo.find_active_by_id(db, payload.user_id)
    if user is None:
        raise UserUnavailableError()

    changed_at = as_utc(user.password_changed_at)
    if changed_at and payload.issued_at < changed_at:
        logger.info(
            "Stale access token rejected",
            extra={"extra_data": {"user_id": user.id}},
        )
        raise StaleTokenError()

    return CurrentUser(user_id=user.id, username=user.username, role=user.role)


# === 권한 가드 ===

def authorize(current_user: CurrentUser | None, roles: list[str]) -> CurrentUser:
    """허용 역할 목록에 없는 사용자는 403. 순수 함수, 부수효과 없음"""
    if current_user is None:
        raise UnauthenticatedError()
    if current_user.role not in roles:
        raise ForbiddenError()
    return current_user


def require_roles(*roles: str) -> Callable[..., Awaitable[CurrentUser]]:
    """
    라우트에 붙이는 역할 가드

    사용법:
        @router.get("/login-logs")
        async def list_logs(admin: CurrentUser = Depends(require_roles("admin"))): ...
    """
    allowed = list(roles)

    async def guard(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        return authorize(current_user, allowed)

    return guard
