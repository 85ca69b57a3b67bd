"""
요청 제한 테스트 (Redis는 conftest의 FakeRedis)
"""
import asyncio

import pytest

from core.config import settings
from core.exceptions import RateLimitedError
from service.rate_limit_service import hit, release
from conftest import FakeRedis


def test_고정_창_카운터():
    redis = FakeRedis()

    async def _run():
        assert await hit(redis, "ratelimit:test", limit=2, window_seconds=60) == 1
        assert await hit(redis, "ratelimit:test", limit=2, window_seconds=60) == 2
        with pytest.raises(RateLimitedError):
            await hit(redis, "ratelimit:test", limit=2, window_seconds=60)

    asyncio.run(_run())
    assert redis.ttls == {"ratelimit:test": 60}


def test_창_도중에는_TTL을_다시_설정하지_않음():
    redis = FakeRedis()

    async def _run():
        await hit(redis, "ratelimit:test", limit=5, window_seconds=60)
        await hit(redis, "ratelimit:test", limit=5, window_seconds=999)

    asyncio.run(_run())
    assert redis.ttls == {"ratelimit:test": 60}


def test_TTL을_잃은_키는_다음_요청에서_복구():
    """INCR 직후 프로세스가 죽어 TTL 없이 남은 카운터"""
    redis = FakeRedis()
    redis.counters["ratelimit:test"] = 3

    asyncio.run(hit(redis, "ratelimit:test", limit=10, window_seconds=60))
    assert redis.counters["ratelimit:test"] == 4
    assert redis.ttls == {"ratelimit:test": 60}


def test_되돌린_카운트가_0이면_키_삭제():
    redis = FakeRedis()

    async def _run():
        await hit(redis, "ratelimit:test", limit=5, window_seconds=60)
        await release(redis, "ratelimit:test")

    asyncio.run(_run())
    assert redis.counters == {}
    assert redis.ttls == {}


def test_인증_요청_제한(client, monkeypatch):
    monkeypatch.setattr(settings, "auth_rate_limit_max_requests", 2)
    body = {"email": "nobody@example.com", "password": "Str0ng!Pass"}

    assert client.post("/api/auth/login", json=body).status_code == 401
    assert client.post("/api/auth/login", json=body).status_code == 401

    response = client.post("/api/auth/login", json=body)
    assert response.status_code == 429
    assert response.json() == {
        "success": False,
        "message": "Too many authentication attempts, please try again later",
    }


def test_성공한_로그인은_제한_횟수에_포함되지_않음(client, new_user, fake_redis, monkeypatch):
    monkeypatch.setattr(settings, "auth_rate_limit_max_requests", 2)
    email, password = new_user()

    codes = [
        client.post("/api/auth/login", json={"email": email, "password": password}).status_code
        for _ in range(3)
    ]
    assert codes == [200, 200, 200]
    assert "ratelimit:auth:testclient" not in fake_redis.counters

    # 실패는 그대로 쌓임
    wrong = {"email": email, "password": "Wr0ng!Pass"}
    assert client.post("/api/auth/login", json=wrong).status_code == 401
    assert client.post("/api/auth/login", json=wrong).status_code == 401
    assert client.post("/api/auth/login", json=wrong).status_code == 429


def test_성공한_가입도_제한_횟수에_포함되지_않음(client, new_user, fake_redis, monkeypatch):
    monkeypatch.setattr(settings, "auth_rate_limit_max_requests", 1)
    for _ in range(3):
        new_user()
    assert "ratelimit:auth:testclient" not in fake_redis.counters


def test_입력_검증_실패도_실패_시도로_계산(client, fake_redis):
    client.post("/api/auth/login", json={"email": "not-an-email", "password": "x"})
    assert fake_redis.counters["ratelimit:auth:testclient"] == 1


def test_전체_API_요청_제한(client, fake_redis, monkeypatch):
    monkeypatch.setattr(settings, "rate_limit_max_requests", 1)

    assert client.get("/api/auth/profile").status_code == 401
    response = client.get("/api/auth/profile")
    assert response.status_code == 429
    assert response.json()["message"] == "Too many requests from this IP, please try again later"
    assert fake_redis.ttls == {"ratelimit:api:testclient": settings.rate_limit_window_seconds}


def test_X_Forwarded_For_왼쪽_값을_바꿔도_같은_카운터(client, fake_redis, monkeypatch):
    monkeypatch.setattr(settings, "auth_rate_limit_max_requests", 2)
    body = {"email": "nobody@example.com", "password": "Str0ng!Pass"}

    codes = [
        client.post(
            "/api/auth/login",
            json=body,
            headers={"X-Forwarded-For": f"203.0.113.{i}, 198.51.100.9"},
        ).status_code
        for i in range(5)
    ]
    assert codes == [401, 401, 429, 429, 429]
    assert fake_redis.counters["ratelimit:auth:198.51.100.9"] == 5


def test_프록시를_신뢰하지_않으면_헤더_무시(client, fake_redis, monkeypatch):
    monkeypatch.setattr(settings, "trusted_proxy_hops", 0)
    monkeypatch.setattr(settings, "auth_rate_limit_max_requests", 1)
    body = {"email": "nobody@example.com", "password": "Str0ng!Pass"}

    client.post("/api/auth/login", json=body, headers={"X-Forwarded-For": "203.0.113.1"})
    response = client.post("/api/auth/login", json=body, headers={"X-Forwarded-For": "203.0.113.2"})

    assert response.status_code == 429
    assert list(fake_redis.counters) == ["ratelimit:auth:testclient"]
