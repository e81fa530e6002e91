# shop_service/api/products.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.api.responses import created_response, success_response
from shop_service.db.database import get_db
from shop_service.db.schemas import Product, Review, ReviewInput
from shop_service.dependencies import CurrentUser, get_current_user
from shop_service.services import products, reviews

router = APIRouter(prefix="/products", tags=["products"])


@router.get("")
async def list_products(
    category_id: Optional[int] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    search: Optional[str] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    items = await products.list_products(
        db, category_id=category_id, min_price=min_price, max_price=max_price,
        search=search, skip=skip, limit=limit,
    )
    return success_response(items, "Products retrieved successfully", Product)


@router.get("/{product_id}")
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    product = await products.get_product(db, product_id, active_only=True)
    return success_response(product, "Product retrieved successfully", Product)


@router.get("/{product_id}/reviews")
async def get_product_reviews(product_id: int, db: AsyncSession = Depends(get_db)):
    items = await reviews.list_product_reviews(db, product_id)
    return success_response(items, "Reviews retrieved successfully", Review)


@router.post("/{product_id}/reviews", status_code=201)
async def create_product_review(
    product_id: int,
    payload: ReviewInput,
    current: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    review = await reviews.create_review(
        db, current.id, product_id, payload.rating, title=payload.title, comment=payload.comment,
    )
    return created_response(review, Review)
