from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

class Settings(BaseSettings):
    # 실행 환경: development에서는 500 응답에 예외 메시지 포함
    environment: Literal["development", "production"] = "development"
    log_level: str = "INFO"

    # Database
    database_url: str
    database_echo: bool = False

    # JWT 설정 (access 토큰 전용 시크릿 + 비밀번호 재설정용 시크릿)
    jwt_access_secret: str = "dev-access-secret-change-in-production"
    jwt_reset_secret: str = "dev-reset-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_expire_minutes: int = 15
    jwt_issuer: str = "fruit-inventory"
    jwt_audience: str = "fruit-inventory-client"

    # bcrypt work factor
    bcrypt_rounds: int = 12

    # Redis (rate limit 카운터)
    redis_url: str = "redis://redis:6379"
    rate_limit_window_seconds: int = 900
    rate_limit_max_requests: int = 0       # 0이면 전체 API 제한 비활성화
    auth_rate_limit_max_requests: int = 10000

    # X-Forwarded-For 오른쪽 끝에서부터 신뢰할 프록시 수 (0이면 헤더 무시)
    trusted_proxy_hops: int = 1

    # CORS 허용 프론트엔드 주소
    client_url: str | None = None

    # 시드 스크립트가 데모 계정에 부여하는 비밀번호
    seed_password: str | None = None

    model_config = SettingsConfigDict(
        # config.py -> core -> inventory -> 프로젝트 루트 아래의 .env 찾기
        env_file=Path(__file__).parent.parent.parent / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


# 싱글톤 인스턴스: 앱 어디서든 import해서 사용
settings = Settings()
