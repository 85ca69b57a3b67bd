from datetime import datetime, timezone
from sqlalchemy import DateTime, func
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    """앱 서버 기준 현재 UTC 시각 (timezone-aware)"""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """
    DB에서 읽은 시각을 UTC aware로 맞춤

    PostgreSQL(timestamptz)은 aware 값을, SQLite는 naive 값을 돌려주기 때문에
    비교 전에 항상 이 함수를 거친다. naive 값은 UTC로 저장된 것으로 간주.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TimestampMixin:
    """
    모든 모델에 공통 적용할 생성/수정 시간

    - server_default=func.now(): DB 서버 시간 기준
    - onupdate=func.now(): UPDATE 시 자동 갱신
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
