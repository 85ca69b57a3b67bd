from fastapi import Depends, Request
from redis.asyncio import Redis

from core.config import settings
from core.dependencies import get_redis
from core.exceptions import RateLimitedError
from core.request_log import client_ip

# 인증 엔드포인트 전용 창 (15분)
AUTH_WINDOW_SECONDS = 15 * 60


async def hit(
    redis: Redis, key: str, limit: int, window_seconds: int, message: str | None = None
) -> int:
    """
    고정 창(fixed window) 카운터 증가

    Returns:
        현재 창에서의 요청 수 (증가 후)
    Raises:
        RateLimitedError: 한도 초과 시
    """
    # INCR + EXPIRE NX를 MULTI/EXEC 한 번에 전송
    # NX: TTL이 없는 키에만 설정 → 창의 첫 요청이거나 TTL을 잃은 키
    pipe = redis.pipeline()
    pipe.incr(key)
    pipe.expire(key, window_seconds, nx=True)
    current, _ = await pipe.execute()

    if current > limit:
        raise RateLimitedError(message)
    return current


async def release(redis: Redis, key: str) -> None:
    """hit()로 올린 카운트 1개를 되돌림"""
    remaining = await redis.decr(key)
    # 창이 그 사이 만료돼 DECR이 새 키(-1)를 만든 경우도 함께 정리
    if remaining <= 0:
        await redis.delete(key)


class AuthAttempt:
    """
    가입/로그인 요청 1건의 제한 카운트

    요청이 들어오면 먼저 센다. 성공으로 끝난 요청만 succeeded()로 되돌리므로
    창 안에는 실패한 시도(4xx/5xx)만 남는다.
    """

    def __init__(self, redis: Redis, key: str):
        self.redis = redis
        self.key = key

    async def succeeded(self) -> None:
        await release(self.redis, self.key)


async def api_rate_limit(request: Request, redis: Redis = Depends(get_redis)) -> None:
    """전체 API 제한: IP 기준. RATE_LIMIT_MAX_REQUESTS=0이면 비활성"""
    if settings.rate_limit_max_requests <= 0:
        return
    await hit(
        redis,
        f"ratelimit:api:{client_ip(request)}",
        settings.rate_limit_max_requests,
        settings.rate_limit_window_seconds,
    )


async def auth_rate_limit(request: Request, redis: Redis = Depends(get_redis)) -> AuthAttempt:
    """가입/로그인 제한: 15분 창 안의 실패 시도 수 기준, 무차별 대입 방지"""
    key = f"ratelimit:auth:{client_ip(request)}"
    await hit(
        redis,
        key,
        settings.auth_rate_limit_max_requests,
        AUTH_WINDOW_SECONDS,
        "Too many authentication attempts, please try again later",
    )
    return AuthAttempt(redis, key)
