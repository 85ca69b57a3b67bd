import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from core.config import settings
from core.logger import get_logger, generate_request_id, request_id_var

logger = get_logger("http")


def client_ip(request: Request) -> str:
    """
    클라이언트 IP: 신뢰하는 프록시(TRUSTED_PROXY_HOPS개)가 붙인 주소만 사용

    프록시는 X-Forwarded-For 오른쪽 끝에 주소를 덧붙이므로 뒤에서 hops번째 값을 고른다.
    그보다 왼쪽 값은 클라이언트가 보낸 그대로라 보지 않는다.
    헤더가 없거나 hops=0이면 소켓 peer → "unknown" 순서
    """
    hops = settings.trusted_proxy_hops
    forwarded = request.headers.get("X-Forwarded-For")
    if hops > 0 and forwarded:
        entries = [entry.strip() for entry in forwarded.split(",") if entry.strip()]
        if entries:
            return entries[max(len(entries) - hops, 0)]
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RequestLogMiddleware(BaseHTTPMiddleware):
    """
    모든 HTTP 요청을 한 줄 JSON으로 기록하는 미들웨어

    1. 요청마다 고유 request_id 부여
    2. 응답 시간 측정
    3. 응답 헤더에 X-Request-ID 포함
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        req_id = generate_request_id()
        request_id_var.set(req_id)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        logger.info(
            f"{request.method} {request.url.path} {response.status_code} {duration_ms:.0f}ms",
            extra={"extra_data": {
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 1),
                "client_ip": client_ip(request),
            }}
        )

        response.headers["X-Request-ID"] = req_id
        return response
