from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from core.config import settings
from core.dependencies import init_connections, close_connections
from core.database import engine
from core.error_handlers import register_exception_handlers
from core.request_log import RequestLogMiddleware
from router import auth, fruit, admin
from service.rate_limit_service import api_rate_limit

@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await init_connections()
        yield
    finally:
        await close_connections()
        # DB 연결 풀 정리
        await engine.dispose()

app = FastAPI(
    title="Fruit Inventory API",
    description="JWT access/refresh 토큰 인증 + 과일 재고 관리",
    version="0.1.0",
    lifespan=lifespan
)

# CORS: 프론트엔드 한 곳만 허용, refresh 토큰 쿠키 전송을 위해 credentials 허용
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.client_url] if settings.client_url else [],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept", "Origin"],
)
# 모든 요청을 JSON 한 줄로 기록
app.add_middleware(RequestLogMiddleware)

register_exception_handlers(app)

api_limits = [Depends(api_rate_limit)]
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"], dependencies=api_limits)
app.include_router(fruit.router, prefix="/api/fruit", tags=["Fruit"], dependencies=api_limits)
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"], dependencies=api_limits)

@app.get("/health")
async def health():
    return {"status": "ok"}
