from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import require_roles
from schemas.admin import LoginLogOut, LoginLogPage
from service.audit_service import get_login_log_page

router = APIRouter()


@router.get("/login-logs", response_model=LoginLogPage, dependencies=[Depends(require_roles("admin"))])
async def list_login_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """인증 시도 감사 로그 (관리자 전용, 최신순)"""
    logs, meta = await get_login_log_page(db, page, limit)
    return LoginLogPage(data=[LoginLogOut.model_validate(log) for log in logs], meta=meta)
