from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from models.login_log import LoginLog


async def create(db: AsyncSession, log: LoginLog) -> LoginLog:
    """감사 로그 1건 추가 (append-only: 수정/삭제 함수 없음)"""
    db.add(log)
    await db.commit()
    return log


async def count(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(LoginLog))
    return result.scalar_one()


async def find_page(db: AsyncSession, offset: int, limit: int) -> list[LoginLog]:
    """최신순 페이지 조회"""
    result = await db.execute(
        select(LoginLog)
        .order_by(LoginLog.created_at.desc(), LoginLog.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all())


async def find_by_email(db: AsyncSession, email: str) -> list[LoginLog]:
    """이메일별 시도 기록 (오래된 순)"""
    result = await db.execute(
        select(LoginLog).where(LoginLog.email == email).order_by(LoginLog.id)
    )
    return list(result.scalars().all())
