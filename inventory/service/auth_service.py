from datetime import timedelta

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from core.database import get_db
from core.exceptions import (
    AccountDeactivatedError,
    AccountLockedError,
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    NotFoundError,
    WeakPasswordError,
)
from core.logger import get_logger
from core.security import TokenService, get_token_service
from models.base import as_utc, utcnow
from models.refresh_token import RefreshToken
from models.users import User
from repository import refresh_token_repo, user_repo
from schemas.auth import UserCreated, UserProfile, UserSummary
from service.audit_service import AuditLog, DatabaseAuditLog, LoginEvent
from service.password_service import PasswordService, get_password_service

logger = get_logger("auth")

# 고정 정책 (환경변수로 바꾸지 않음)
MAX_FAILED_ATTEMPTS = 5
LOCKOUT_DURATION = timedelta(minutes=30)
REFRESH_TOKEN_LIFETIME = timedelta(days=7)


class LoginResult:
    """로그인 성공 결과. access 토큰은 본문으로, refresh 토큰은 쿠키로 나간다"""

    def __init__(self, user: UserSummary, access_token: str, refresh_token: str):
        self.user = user
        self.access_token = access_token
        self.refresh_token = refresh_token


class AuthService:
    """
    세션 수명주기: 가입 / 로그인 / 토큰 갱신 / 로그아웃 / 프로필

    DB 쓰기는 모두 개별 커밋이다. 실패 횟수 증가와 잠금 설정도 하나의 트랜잭션으로
    묶지 않으므로, 동시에 틀린 비밀번호가 들어오면 카운트가 덜 올라갈 수 있다.
    유저 정보는 커밋 직후 공개 스키마로 떠서 돌려준다.
    """

    def __init__(
        self,
        db: AsyncSession,
        tokens: TokenService,
        passwords: PasswordService,
        audit: AuditLog,
    ):
        self.db = db
        self.tokens = tokens
        self.passwords = passwords
        self.audit = audit

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        ip_address: str = "unknown",
        user_agent: str = "unknown",
    ) -> UserCreated:
        username = username.lower()

        # 1. 중복 확인 (이메일 OR 유저네임). 둘 다 겹치면 이메일 메시지 우선
        existing = await user_repo.find_by_email_or_username(self.db, email, username)
        if existing:
            raise ConflictError(
                "Email already exists" if existing.email == email else "Username already exists"
            )

        # 2. 비밀번호 강도: 위반 규칙 전체를 돌려줌
        strength = self.passwords.check_strength(password)
        if not strength.valid:
            raise WeakPasswordError(errors=strength.violations)

        # 3. 해싱은 CPU 작업이라 스레드풀에서
        hashed = await run_in_threadpool(self.passwords.hash, password)

        # 4. 저장. 사전 확인 이후 끼어든 가입은 unique 제약이 막음
        try:
            user = await user_repo.create(
                self.db, User(username=username, email=email, password=hashed)
            )
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Email or username already exists")

        created = UserCreated.model_validate(user)
        await self.audit.record(LoginEvent(
            user_id=created.id,
            email=created.email,
            ip_address=ip_address,
            user_agent=user_agent,
            success=True,
            reason="User registration",
        ))
        logger.info("User registered", extra={"extra_data": {"user_id": created.id}})
        return created

    async def login(self, email: str, password: str, ip_address: str, user_agent: str) -> LoginResult:
        user = await user_repo.find_by_email(self.db, email)

        # 1. 존재하지 않는 이메일
        if user is None:
            await self._record_failure(None, email, ip_address, user_agent, "User not found")
            raise InvalidCredentialsError()

        user_id = user.id

        # 2. 비활성 계정
        if not user.is_active:
            await self._record_failure(user_id, email, ip_address, user_agent, "Account deactivated")
            raise AccountDeactivatedError()

        # 3. 잠금 중
        now = utcnow()
        lockout_until = as_utc(user.lockout_until)
        if lockout_until and lockout_until > now:
            await self._record_failure(user_id, email, ip_address, user_agent, "Account locked")
            raise AccountLockedError()

        # 4. 비밀번호 불일치 → 실패 횟수 증가, 임계치 도달 시 30분 잠금
        if not await run_in_threadpool(self.passwords.verify, password, user.password):
            attempts = user.failed_login_attempts + 1
            locked_until = now + LOCKOUT_DURATION if attempts >= MAX_FAILED_ATTEMPTS else None
            await user_repo.record_failed_login(self.db, user, attempts, locked_until)
            if locked_until:
                logger.warning(
                    "Account locked after repeated failures",
                    extra={"extra_data": {"user_id": user_id, "attempts": attempts}},
                )
            await self._record_failure(
                user_id, email, ip_address, user_agent, f"Invalid password (attempt {attempts})"
            )
            raise InvalidCredentialsError()

        # 5. 성공 → 카운터/잠금 초기화, 토큰 발급, refresh 토큰 저장
        await user_repo.record_successful_login(self.db, user, now, ip_address)
        summary = UserSummary.model_validate(user)

        access_token = self.tokens.issue_access_token(summary.id, summary.username, summary.role)
        refresh_token = self.tokens.issue_refresh_token()
        await refresh_token_repo.create(self.db, RefreshToken(
            token=refresh_token,
            user_id=summary.id,
            expires_at=now + REFRESH_TOKEN_LIFETIME,
        ))

        await self.audit.record(LoginEvent(
            user_id=summary.id,
            email=email,
            ip_address=ip_address,
            user_agent=user_agent,
            success=True,
            reason="Successful login",
        ))
        return LoginResult(summary, access_token, refresh_token)

    async def refresh(self, refresh_token: str | None) -> str:
        """
        저장된 refresh 토큰으로 새 access 토큰 발급

        refresh 토큰 자체는 교체하지 않는다 (만료 또는 로그아웃까지 재사용).
        역할/유저네임은 로그인 당시가 아니라 현재 DB 값을 따른다.
        """
        if not refresh_token:
            raise MissingTokenError("Refresh token not found")

        record = await refresh_token_repo.find_valid(self.db, refresh_token, utcnow())
        if record is None or not record.user.is_active:
            raise InvalidTokenError("Invalid or expired refresh token")

        user = record.user
        return self.tokens.issue_access_token(user.id, user.username, user.role)

    async def logout(self, user_id: int, refresh_token: str | None) -> None:
        """쿠키의 refresh 토큰 폐기 (본인 소유일 때만). 매칭이 없어도 성공"""
        if refresh_token:
            revoked = await refresh_token_repo.revoke(self.db, refresh_token, user_id)
            logger.info(
                "User logged out",
                extra={"extra_data": {"user_id": user_id, "revoked": revoked}},
            )

    async def get_profile(self, user_id: int) -> UserProfile:
        user = await user_repo.find_by_id(self.db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return UserProfile.model_validate(user)

    async def _record_failure(
        self, user_id: int | None, email: str, ip_address: str, user_agent: str, reason: str
    ) -> None:
        await self.audit.record(LoginEvent(
            user_id=user_id,
            email=email,
            ip_address=ip_address,
            user_agent=user_agent,
            success=False,
            reason=reason,
        ))
        logger.warning(
            "Login failed",
            extra={"extra_data": {"reason": reason, "client_ip": ip_address}},
        )


async def get_auth_service(
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    passwords: PasswordService = Depends(get_password_service),
) -> AuthService:
    return AuthService(db, tokens, passwords, DatabaseAuditLog(db))
