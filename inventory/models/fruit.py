from datetime import date
from sqlalchemy import String, Integer, Float, Date
from sqlalchemy.orm import Mapped, mapped_column
from models.base import TimestampMixin
from core.database import Base


class FruitsInventory(TimestampMixin, Base):
    """과일 재고 기록: 날짜별 품목/색상/수량"""
    __tablename__ = "fruits_inventory"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    inventory_date: Mapped[date] = mapped_column(Date, nullable=False)
    product_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    color: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    unit: Mapped[int] = mapped_column(Integer, nullable=False)
