# shop_service/api/admin.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.api.responses import created_response, no_content_response, success_response
from shop_service.db.database import get_db
from shop_service.db.schemas import (
    Category, CategoryInput, CategoryUpdate, Image, ImageInput, Order, OrderStatusInput, Product, ProductInput,
    ProductUpdate,
)
from shop_service.dependencies import require_admin
from shop_service.services import categories, orders, products

# Every route here requires the admin role
router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("/products", status_code=201)
async def create_product(payload: ProductInput, db: AsyncSession = Depends(get_db)):
    product = await products.create_product(db, payload)
    return created_response(product, Product)


@router.put("/products/{product_id}")
async def update_product(product_id: int, payload: ProductUpdate, db: AsyncSession = Depends(get_db)):
    product = await products.update_product(db, product_id, payload)
    return success_response(product, "Product updated successfully", Product)


@router.delete("/products/{product_id}", status_code=204)
async def delete_product(product_id: int, db: AsyncSession = Depends(get_db)):
    await products.delete_product(db, product_id)
    return no_content_response()


@router.post("/products/{product_id}/images", status_code=201)
async def add_product_image(product_id: int, payload: ImageInput, db: AsyncSession = Depends(get_db)):
    image = await products.add_image(db, product_id, payload)
    return created_response(image, Image)


@router.delete("/products/{product_id}/images/{image_id}", status_code=204)
async def delete_product_image(product_id: int, image_id: int, db: AsyncSession = Depends(get_db)):
    await products.delete_image(db, product_id, image_id)
    return no_content_response()


@router.post("/categories", status_code=201)
async def create_category(payload: CategoryInput, db: AsyncSession = Depends(get_db)):
    category = await categories.create_category(db, payload)
    return created_response(category, Category)


@router.put("/categories/{category_id}")
async def update_category(category_id: int, payload: CategoryUpdate, db: AsyncSession = Depends(get_db)):
    category = await categories.update_category(db, category_id, payload)
    return success_response(category, "Category updated successfully", Category)


@router.delete("/categories/{category_id}", status_code=204)
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db)):
    await categories.delete_category(db, category_id)
    return no_content_response()


@router.get("/orders")
async def list_orders(
    status: Optional[str] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    items = await orders.list_orders(db, status=status, skip=skip, limit=limit)
    return success_response(items, "Orders retrieved successfully", Order)


@router.put("/orders/{order_id}/status")
async def update_order_status(order_id: int, payload: OrderStatusInput, db: AsyncSession = Depends(get_db)):
    order = await orders.update_order_status(db, order_id, payload.status, payload.tracking_number)
    return success_response(order, "Order status updated successfully", Order)
