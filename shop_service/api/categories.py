# shop_service/api/categories.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.api.responses import success_response
from shop_service.db.database import get_db
from shop_service.db.schemas import Category
from shop_service.services import categories

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
async def list_categories(db: AsyncSession = Depends(get_db)):
    items = await categories.list_categories(db)
    return success_response(items, "Categories retrieved successfully", Category)


@router.get("/{category_id}")
async def get_category(category_id: int, db: AsyncSession = Depends(get_db)):
    category = await categories.get_category(db, category_id)
    return success_response(category, "Category retrieved successfully", Category)
