from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import get_current_user
from schemas.common import MessageResponse
from schemas.fruit import FruitIn, FruitName, FruitNamesResponse, FruitOut, FruitPage
from service import fruit_service

# 모든 과일 API는 로그인 필요
router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/fruits-inventory", response_model=FruitPage)
async def list_inventory(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """재고 목록 (최근 수정순, 페이지네이션)"""
    records, meta = await fruit_service.get_inventory_page(db, page, limit)
    return FruitPage(data=[FruitOut.model_validate(r) for r in records], meta=meta)


@router.get("/fruits-name", response_model=FruitNamesResponse)
async def list_fruit_names(db: AsyncSession = Depends(get_db)):
    """중복 없는 품목명 목록"""
    names = await fruit_service.get_fruit_names(db)
    return FruitNamesResponse(data=[FruitName(product_name=name) for name in names])


@router.post("/", response_model=MessageResponse)
async def add_fruit(data: FruitIn, db: AsyncSession = Depends(get_db)):
    await fruit_service.add_fruit(db, data)
    return MessageResponse(message="Fruit added successfully.")


@router.put("/{fruit_id}", response_model=MessageResponse)
async def update_fruit(
    data: FruitIn,
    fruit_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db),
):
    await fruit_service.update_fruit(db, fruit_id, data)
    return MessageResponse(message="Fruit updated successfully.")


@router.delete("/{fruit_id}", response_model=MessageResponse)
async def delete_fruit(fruit_id: int = Path(..., gt=0), db: AsyncSession = Depends(get_db)):
    await fruit_service.delete_fruit(db, fruit_id)
    return MessageResponse(message="Fruit deleted successfully")
