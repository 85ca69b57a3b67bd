from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from core.config import settings

# 운영: postgresql+asyncpg://..., 테스트: sqlite+aiosqlite:///...
engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
)

# 로그인 흐름은 commit을 여러 번 한 뒤에도 user 속성을 읽으므로 만료시키지 않는다
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """users, refresh_tokens, login_logs, fruits_inventory 공통 메타데이터"""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """요청당 세션 1개. 커밋은 repository 함수가 각자 수행"""
    async with async_session() as session:
        yield session
