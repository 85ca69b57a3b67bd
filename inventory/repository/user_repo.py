from datetime import datetime
from sqlalchemy import delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from models.users import User


async def find_by_id(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalars().first()


async def find_active_by_id(db: AsyncSession, user_id: int) -> User | None:
    """활성 상태인 유저만 조회 (인증 미들웨어용)"""
    result = await db.execute(
        select(User).where(User.id == user_id, User.is_active.is_(True))
    )
    return result.scalars().first()


async def find_by_email(db: AsyncSession, email: str) -> User | None:
    """이메일 완전일치 조회"""
    result = await db.execute(select(User).where(User.email == email))
    return result.scalars().first()


async def find_by_email_or_username(db: AsyncSession, email: str, username: str) -> User | None:
    """가입 전 중복 확인: 둘 중 하나만 겹쳐도 반환"""
    result = await db.execute(
        select(User).where(or_(User.email == email, User.username == username))
    )
    return result.scalars().first()


async def create(db: AsyncSession, user: User) -> User:
    """유저 저장"""
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def record_failed_login(
    db: AsyncSession, user: User, attempts: int, lockout_until: datetime | None
) -> User:
    """실패 횟수와 잠금 시각 저장 (단일 커밋)"""
    user.failed_login_attempts = attempts
    user.lockout_until = lockout_until
    await db.commit()
    return user


async def record_successful_login(
    db: AsyncSession, user: User, logged_in_at: datetime, ip_address: str
) -> User:
    """실패 카운터/잠금 초기화 + 마지막 로그인 정보 기록"""
    user.failed_login_attempts = 0
    user.lockout_until = None
    user.last_login_at = logged_in_at
    user.last_login_ip = ip_address
    await db.commit()
    return user


async def delete_all(db: AsyncSession) -> None:
    """시드 스크립트 전용: 모든 유저 삭제"""
    # refresh_tokens는 ON DELETE CASCADE, login_logs는 SET NULL
    await db.execute(delete(User))
    await db.commit()
