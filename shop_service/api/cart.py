# shop_service/api/cart.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.api.responses import no_content_response, success_response
from shop_service.db.database import get_db
from shop_service.db.schemas import Cart, CartItemInput, CartItemUpdate
from shop_service.dependencies import CurrentUser, get_current_user
from shop_service.services import carts

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("")
async def get_cart(current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    cart = await carts.get_cart(db, current.id)
    return success_response(cart, "Cart retrieved successfully", Cart)


@router.delete("", status_code=204)
async def clear_cart(current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    await carts.clear_cart(db, current.id)
    return no_content_response()


@router.post("/items")
async def add_to_cart(
    payload: CartItemInput, current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    cart = await carts.add_to_cart(db, current.id, payload.product_id, payload.quantity)
    return success_response(cart, "Item added to cart successfully", Cart)


@router.put("/items/{item_id}")
async def update_cart_item(
    item_id: int,
    payload: CartItemUpdate,
    current: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    cart = await carts.update_cart_item(db, current.id, item_id, payload.quantity)
    return success_response(cart, "Cart item updated successfully", Cart)


@router.delete("/items/{item_id}", status_code=204)
async def remove_from_cart(
    item_id: int, current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    await carts.remove_from_cart(db, current.id, item_id)
    return no_content_response()
