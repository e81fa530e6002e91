# shop_service/api/orders.py
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.api.responses import created_response, success_response
from shop_service.db.database import get_db
from shop_service.db.schemas import Order, OrderInput
from shop_service.dependencies import CurrentUser, get_current_user
from shop_service.services import orders

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", status_code=201)
async def create_order(
    payload: Optional[OrderInput] = Body(default=None),
    current: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    payload = payload or OrderInput()
    order = await orders.create_order(
        db, current.id, shipping_address_id=payload.shipping_address_id, notes=payload.notes,
    )
    return created_response(order, Order, message="Order created successfully")


@router.get("")
async def list_orders(current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    items = await orders.list_user_orders(db, current.id)
    return success_response(items, "Orders retrieved successfully", Order)


@router.get("/{order_id}")
async def get_order(order_id: int, current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    order = await orders.get_order(db, order_id, current.id)
    return success_response(order, "Order retrieved successfully", Order)


@router.post("/{order_id}/cancel")
async def cancel_order(order_id: int, current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    order = await orders.cancel_order(db, order_id, current.id)
    return success_response(order, "Order cancelled successfully", Order)
