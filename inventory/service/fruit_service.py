import math
from sqlalchemy.ext.asyncio import AsyncSession
from core.exceptions import NotFoundError
from models.fruit import FruitsInventory
from repository import fruit_repo
from schemas.common import PageMeta
from schemas.fruit import FruitIn


async def get_inventory_page(db: AsyncSession, page: int, limit: int) -> tuple[list[FruitsInventory], PageMeta]:
    """재고 목록 페이지 + 페이지 메타"""
    total = await fruit_repo.count(db)
    records = await fruit_repo.find_page(db, offset=(page - 1) * limit, limit=limit)
    meta = PageMeta(total=total, page=page, limit=limit, total_pages=math.ceil(total / limit))
    return records, meta


async def get_fruit_names(db: AsyncSession) -> list[str]:
    return await fruit_repo.find_distinct_names(db)


async def add_fruit(db: AsyncSession, data: FruitIn) -> FruitsInventory:
    return await fruit_repo.create(db, FruitsInventory(**data.model_dump()))


async def update_fruit(db: AsyncSession, fruit_id: int, data: FruitIn) -> FruitsInventory:
    """없으면 404"""
    fruit = await fruit_repo.find_by_id(db, fruit_id)
    if not fruit:
        raise NotFoundError("Fruit not found")
    return await fruit_repo.update(db, fruit, data.model_dump())


async def delete_fruit(db: AsyncSession, fruit_id: int) -> None:
    """없으면 404"""
    fruit = await fruit_repo.find_by_id(db, fruit_id)
    if not fruit:
        raise NotFoundError("Fruit not found")
    await fruit_repo.delete(db, fruit)
