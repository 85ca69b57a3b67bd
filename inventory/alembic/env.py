"""
Alembic 마이그레이션 환경 (async 엔진)

alembic.ini가 있는 프로젝트 루트에서:
  alembic upgrade head
  alembic revision --autogenerate -m "..."
"""
import asyncio
import os
import sys
from logging.config import fileConfig

# inventory 폴더를 sys.path에 추가 (core, models absolute import)
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from core.config import settings
from core.database import Base

# autogenerate가 테이블을 인식하도록 모든 모델을 import
from models import fruit, login_log, refresh_token, users  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# SQLite는 ALTER TABLE 지원이 제한적이라 batch 모드로 생성
RENDER_AS_BATCH = settings.database_url.startswith("sqlite")


def run_migrations_offline() -> None:
    """DB 연결 없이 SQL 스크립트만 출력"""
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=RENDER_AS_BATCH,
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=RENDER_AS_BATCH,
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    # 마이그레이션은 일회성이므로 풀 없이 연결
    connectable = create_async_engine(settings.database_url, poolclass=NullPool)
    try:
        async with connectable.connect() as connection:
            await connection.run_sync(do_run_migrations)
    finally:
        await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
