from datetime import date, datetime
from pydantic import BaseModel, Field
from schemas.common import CamelModel, PageMeta


class FruitIn(CamelModel):
    """생성/수정 요청 본문"""
    inventory_date: date
    product_name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(..., min_length=1, max_length=50)
    amount: float = Field(..., ge=0)
    unit: int = Field(..., ge=0)


class FruitOut(CamelModel):
    id: int
    inventory_date: date
    product_name: str
    color: str
    amount: float
    unit: int
    created_at: datetime
    updated_at: datetime


class FruitName(CamelModel):
    product_name: str


class FruitPage(BaseModel):
    success: bool = True
    data: list[FruitOut]
    meta: PageMeta


class FruitNamesResponse(BaseModel):
    success: bool = True
    data: list[FruitName]
