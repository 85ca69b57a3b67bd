from datetime import datetime
from sqlalchemy import String, Boolean, Integer, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from core.database import Base


class RefreshToken(Base):
    """
    리프레시 토큰: 로그인 세션 1개 = 행 1개
    User : RefreshToken = 1 : N (기기별 동시 세션 허용)

    유효 조건: is_revoked = false AND expires_at > now
    로그아웃 시 is_revoked만 true로 바꾸고 행은 남긴다.
    """
    __tablename__ = "refresh_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # 64바이트 난수의 hex 문자열 (128자)
    token: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    is_revoked: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    user: Mapped["User"] = relationship(back_populates="refresh_tokens")
