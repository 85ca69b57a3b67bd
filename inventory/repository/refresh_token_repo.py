from datetime import datetime
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from models.refresh_token import RefreshToken


async def create(db: AsyncSession, refresh_token: RefreshToken) -> RefreshToken:
    """리프레시 토큰 저장"""
    db.add(refresh_token)
    await db.commit()
    await db.refresh(refresh_token)
    return refresh_token


async def find_valid(db: AsyncSession, token: str, now: datetime) -> RefreshToken | None:
    """폐기되지 않고 만료되지 않은 토큰 조회 (소유 유저 포함)"""
    result = await db.execute(
        select(RefreshToken)
        .options(selectinload(RefreshToken.user))
        .where(
            RefreshToken.token == token,
            RefreshToken.is_revoked.is_(False),
            RefreshToken.expires_at > now,
        )
    )
    return result.scalars().first()


async def revoke(db: AsyncSession, token: str, user_id: int) -> int:
    """
    토큰 폐기: 요청한 유저 소유일 때만

    다른 유저의 토큰 값을 알아도 폐기할 수 없다. 반환값은 폐기된 행 수.
    """
    result = await db.execute(
        update(RefreshToken)
        .where(RefreshToken.token == token, RefreshToken.user_id == user_id)
        .values(is_revoked=True)
    )
    await db.commit()
    return result.rowcount
