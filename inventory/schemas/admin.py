from datetime import datetime
from pydantic import BaseModel
from schemas.common import CamelModel, PageMeta


class LoginLogOut(CamelModel):
    id: int
    user_id: int | None = None
    email: str
    ip_address: str
    user_agent: str
    success: bool
    reason: str
    created_at: datetime


class LoginLogPage(BaseModel):
    success: bool = True
    data: list[LoginLogOut]
    meta: PageMeta
