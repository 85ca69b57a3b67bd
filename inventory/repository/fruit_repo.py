from sqlalchemy import func, insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from models.fruit import FruitsInventory


async def count(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(FruitsInventory))
    return result.scalar_one()


async def find_page(db: AsyncSession, offset: int, limit: int) -> list[FruitsInventory]:
    """최근 수정순 페이지 조회"""
    result = await db.execute(
        select(FruitsInventory)
        .order_by(FruitsInventory.updated_at.desc(), FruitsInventory.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all())


async def find_distinct_names(db: AsyncSession) -> list[str]:
    result = await db.execute(
        select(FruitsInventory.product_name)
        .distinct()
        .order_by(FruitsInventory.product_name)
    )
    return list(result.scalars().all())


async def find_by_id(db: AsyncSession, fruit_id: int) -> FruitsInventory | None:
    result = await db.execute(select(FruitsInventory).where(FruitsInventory.id == fruit_id))
    return result.scalar_one_or_none()


async def create(db: AsyncSession, fruit: FruitsInventory) -> FruitsInventory:
    db.add(fruit)
    await db.commit()
    await db.refresh(fruit)
    return fruit


async def update(db: AsyncSession, fruit: FruitsInventory, values: dict) -> FruitsInventory:
    for key, value in values.items():
        setattr(fruit, key, value)
    await db.commit()
    await db.refresh(fruit)
    return fruit


async def delete(db: AsyncSession, fruit: FruitsInventory) -> None:
    await db.delete(fruit)
    await db.commit()


async def bulk_create(db: AsyncSession, rows: list[dict]) -> int:
    """시드 스크립트용 일괄 저장"""
    if not rows:
        return 0
    await db.execute(insert(FruitsInventory), rows)
    await db.commit()
    return len(rows)
