"""
헬스체크 / 요청 로그 미들웨어 / 공통 에러 응답 테스트
"""
import pytest
from fastapi import FastAPI
from starlette.requests import Request
from starlette.testclient import TestClient

from core.config import settings
from core.error_handlers import register_exception_handlers
from core.exceptions import NotFoundError
from core.request_log import client_ip
from main import app


def test_헬스체크():
    # lifespan(Redis 연결)을 타지 않도록 with 없이 사용
    response = TestClient(app).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_응답에_요청_ID_포함():
    response = TestClient(app).get("/health")
    assert len(response.headers["X-Request-ID"]) == 8


def _error_app() -> FastAPI:
    error_app = FastAPI()
    register_exception_handlers(error_app)

    @error_app.get("/boom")
    async def boom():
        raise RuntimeError("database exploded")

    @error_app.get("/missing")
    async def missing():
        raise NotFoundError("Thing not found")

    return error_app


def test_예상치_못한_예외는_500():
    client = TestClient(_error_app(), raise_server_exceptions=False)
    response = client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "Internal server error",
        "error": "database exploded",
    }


def test_운영_모드에서는_에러_상세_숨김(monkeypatch):
    monkeypatch.setattr(settings, "environment", "production")
    client = TestClient(_error_app(), raise_server_exceptions=False)

    response = client.get("/boom")
    assert response.json() == {"success": False, "message": "Internal server error"}


def test_서비스_예외는_상태코드와_메시지로():
    response = TestClient(_error_app()).get("/missing")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Thing not found"}


def _request(forwarded: str | None = None, peer: tuple[str, int] | None = ("192.0.2.10", 50000)) -> Request:
    headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded is not None else []
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers, "client": peer})


@pytest.mark.parametrize("hops, forwarded, expected", [
    (1, "203.0.113.7", "203.0.113.7"),
    (1, "10.6.6.6, 203.0.113.7", "203.0.113.7"),
    (2, "10.6.6.6, 203.0.113.7, 198.51.100.1", "203.0.113.7"),
    (3, "203.0.113.7, 198.51.100.1", "203.0.113.7"),
    (1, " , ", "192.0.2.10"),
    (1, None, "192.0.2.10"),
    (0, "203.0.113.7", "192.0.2.10"),
])
def test_클라이언트_IP_추출(monkeypatch, hops, forwarded, expected):
    monkeypatch.setattr(settings, "trusted_proxy_hops", hops)
    assert client_ip(_request(forwarded)) == expected


def test_주소를_알_수_없으면_unknown():
    assert client_ip(_request(peer=None)) == "unknown"
