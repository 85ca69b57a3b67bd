import math
from typing import Protocol

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.logger import get_logger
from models.login_log import LoginLog
from repository import login_log_repo
from schemas.common import PageMeta

logger = get_logger("audit")


class LoginEvent(BaseModel):
    """가입/로그인 시도 1건"""
    user_id: int | None = None
    email: str
    ip_address: str
    user_agent: str
    success: bool
    reason: str


class AuditLog(Protocol):
    async def record(self, event: LoginEvent) -> None: ...


class DatabaseAuditLog:
    """
    login_logs 테이블에 기록하는 감사 로그

    best-effort: 쓰기 실패는 ERROR로 남기고 인증 흐름은 계속 진행한다.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(self, event: LoginEvent) -> None:
        try:
            await login_log_repo.create(self.db, LoginLog(**event.model_dump()))
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception(
                "Audit log write failed",
                extra={"extra_data": {"email": event.email, "reason": event.reason}},
            )


async def get_login_log_page(db: AsyncSession, page: int, limit: int) -> tuple[list[LoginLog], PageMeta]:
    """감사 로그 조회 (읽기 전용)"""
    total = await login_log_repo.count(db)
    logs = await login_log_repo.find_page(db, offset=(page - 1) * limit, limit=limit)
    meta = PageMeta(total=total, page=page, limit=limit, total_pages=math.ceil(total / limit))
    return logs, meta
