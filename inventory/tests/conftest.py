"""
pytest 공통 설정
"""
import asyncio
import os
import sys
import tempfile
import uuid
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# 설정 모듈을 import 하기 전에 테스트용 환경변수 지정
_TEST_DB = Path(tempfile.gettempdir()) / f"inventory_test_{uuid.uuid4().hex[:8]}.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"
os.environ["BCRYPT_ROUNDS"] = "4"          # 테스트 속도용 최소 cost
os.environ["ENVIRONMENT"] = "development"
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "0"

import pytest
from fastapi import Depends, FastAPI
from starlette.testclient import TestClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

from core.database import Base, get_db
from core.dependencies import get_redis
from core.error_handlers import register_exception_handlers
from models.users import User
from models.refresh_token import RefreshToken  # noqa: F401 (메타데이터 등록)
from models.login_log import LoginLog  # noqa: F401
from models.fruit import FruitsInventory  # noqa: F401
from router import auth, fruit, admin
from service.rate_limit_service import api_rate_limit

STRONG_PASSWORD = "Str0ng!Pass"

# ===== NullPool 엔진: 매 요청마다 새 커넥션 (이벤트 루프가 달라도 안전) =====
test_engine = create_async_engine(os.environ["DATABASE_URL"], poolclass=NullPool)
test_session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

async def override_get_db():
    async with test_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


class FakeRedis:
    """rate limit에 필요한 INCR/DECR/EXPIRE/DEL + pipeline만 흉내내는 인메모리 더블"""

    def __init__(self):
        self.counters: dict[str, int] = {}
        self.ttls: dict[str, int] = {}

    async def incr(self, key: str) -> int:
        self.counters[key] = self.counters.get(key, 0) + 1
        return self.counters[key]

    async def decr(self, key: str) -> int:
        self.counters[key] = self.counters.get(key, 0) - 1
        return self.counters[key]

    async def expire(self, key: str, seconds: int, nx: bool = False) -> bool:
        if nx and key in self.ttls:
            return False
        self.ttls[key] = seconds
        return True

    async def delete(self, key: str) -> int:
        self.ttls.pop(key, None)
        return 1 if self.counters.pop(key, None) is not None else 0

    def pipeline(self) -> "FakePipeline":
        return FakePipeline(self)


class FakePipeline:
    """명령을 모아 두었다가 execute()에서 순서대로 실행"""

    def __init__(self, redis: FakeRedis):
        self.redis = redis
        self.commands = []

    def incr(self, key: str) -> "FakePipeline":
        self.commands.append((self.redis.incr, (key,), {}))
        return self

    def expire(self, key: str, seconds: int, nx: bool = False) -> "FakePipeline":
        self.commands.append((self.redis.expire, (key, seconds), {"nx": nx}))
        return self

    async def execute(self) -> list:
        results = [await command(*args, **kwargs) for command, args, kwargs in self.commands]
        self.commands = []
        return results


# ===== 테스트 전용 앱 (미들웨어 없이) =====
test_app = FastAPI()
register_exception_handlers(test_app)
api_limits = [Depends(api_rate_limit)]
test_app.include_router(auth.router, prefix="/api/auth", tags=["Auth"], dependencies=api_limits)
test_app.include_router(fruit.router, prefix="/api/fruit", tags=["Fruit"], dependencies=api_limits)
test_app.include_router(admin.router, prefix="/api/admin", tags=["Admin"], dependencies=api_limits)

# 핵심: get_db를 NullPool 버전으로 교체
test_app.dependency_overrides[get_db] = override_get_db


def run_db(func):
    """테스트 코드에서 직접 DB를 읽고 쓰기 위한 헬퍼: func(session)을 실행"""
    async def _run():
        async with test_session_factory() as session:
            return await func(session)
    return asyncio.run(_run())


def update_user(email: str, **values) -> None:
    """유저 컬럼을 직접 수정 (역할 변경, 비활성화, 비밀번호 변경 시각 등)"""
    async def _update(session: AsyncSession):
        await session.execute(update(User).where(User.email == email).values(**values))
        await session.commit()
    run_db(_update)


def refresh_cookie(response) -> str | None:
    """Set-Cookie 헤더에서 refreshToken 값만 추출"""
    for header in response.headers.get_list("set-cookie"):
        if header.startswith("refreshToken="):
            return header.split(";", 1)[0].split("=", 1)[1].strip('"') or None
    return None


def cookie_header(token: str) -> dict[str, str]:
    # Secure 쿠키는 http 테스트 서버로 자동 전송되지 않으므로 직접 헤더로 보냄
    return {"Cookie": f"refreshToken={token}"}


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="session", autouse=True)
def prepare_database():
    """테스트 세션 시작 시 스키마 생성, 끝나면 파일 삭제"""
    async def _create():
        async with test_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def _drop():
        async with test_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await test_engine.dispose()

    asyncio.run(_create())
    yield
    asyncio.run(_drop())
    _TEST_DB.unlink(missing_ok=True)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def client(fake_redis):
    """동기식 테스트 클라이언트"""
    test_app.dependency_overrides[get_redis] = lambda: fake_redis
    with TestClient(test_app) as c:
        yield c
    test_app.dependency_overrides.pop(get_redis, None)


@pytest.fixture
def new_user(client):
    """
    유저 팩토리: 가입 후 (email, password) 반환

    role="admin"이면 가입 뒤 DB에서 역할을 바꾼다.
    """
    def _create(role: str = "user", password: str = STRONG_PASSWORD) -> tuple[str, str]:
        unique = uuid.uuid4().hex[:8]
        email = f"user_{unique}@example.com"
        response = client.post("/api/auth/register", json={
            "username": f"user_{unique}",
            "email": email,
            "password": password,
        })
        assert response.status_code == 201, response.text
        if role != "user":
            update_user(email, role=role)
        return email, password

    return _create


@pytest.fixture
def logged_in(client, new_user):
    """
    로그인까지 마친 세션: (email, access_token, refresh_token) 반환
    """
    def _login(role: str = "user") -> tuple[str, str, str]:
        email, password = new_user(role)
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return email, response.json()["data"]["accessToken"], refresh_cookie(response)

    return _login
