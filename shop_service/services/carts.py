# shop_service/services/carts.py
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.db import functions
from shop_service.db.models import Cart
from shop_service.exceptions import ConflictError, NotFoundError, ValidationError
from shop_service.services import unique_guard

logger = logging.getLogger(__name__)


def _subtotal(quantity: int, price: float) -> float:
    return round(quantity * price, 2)


async def get_cart(db: AsyncSession, user_id: int) -> Cart:
    """Return the user's cart, creating an empty one on first access."""
    cart = await functions.get_cart_by_user_id(db, user_id)
    if cart:
        return cart

    # carts.user_id is unique: a concurrent request may have created it first
    try:
        async with unique_guard(db, "Cart already exists"):
            cart = await functions.create_cart(db, user_id)
            await db.commit()
    except ConflictError:
        cart = await functions.get_cart_by_user_id(db, user_id)
        if not cart:
            raise
    return cart


async def add_to_cart(db: AsyncSession, user_id: int, product_id: int, quantity: int) -> Cart:
    """Add a product line or grow an existing one.

    Stock is only consulted here, never reserved. An existing line takes the
    product's current price and its subtotal is recomputed.
    """
    if quantity <= 0:
        raise ValidationError("quantity must be greater than 0", field="quantity")

    product = await functions.get_product_by_id(db, product_id, active_only=True)
    if not product:
        raise NotFoundError("Product not found")
    if quantity > product.stock:
        raise ValidationError("insufficient stock", field="quantity")

    cart = await get_cart(db, user_id)
    item = await functions.get_cart_item_by_product(db, cart.id, product_id)
    if item:
        item.quantity += quantity
        item.price = product.price
        item.subtotal = _subtotal(item.quantity, item.price)
    else:
        await functions.add_cart_item(db, {
            "cart_id": cart.id,
            "product_id": product_id,
            "quantity": quantity,
            "price": product.price,
            "subtotal": _subtotal(quantity, product.price),
        })
    await db.commit()

    logger.debug("Cart %s: product %s +%s", cart.id, product_id, quantity)
    return await functions.get_cart_by_user_id(db, user_id)


async def update_cart_item(db: AsyncSession, user_id: int, item_id: int, quantity: int) -> Cart:
    if quantity <= 0:
        raise ValidationError("quantity must be greater than 0", field="quantity")

    cart = await get_cart(db, user_id)
    item = await functions.get_cart_item(db, cart.id, item_id)
    if not item:
        raise NotFoundError("Cart item not found")

    product = await functions.get_product_by_id(db, item.product_id)
    if not product:
        raise NotFoundError("Product not found")
    if quantity > product.stock:
        raise ValidationError("insufficient stock", field="quantity")

    item.quantity = quantity
    item.subtotal = _subtotal(quantity, item.price)
    await db.commit()
    return await functions.get_cart_by_user_id(db, user_id)


async def remove_from_cart(db: AsyncSession, user_id: int, item_id: int):
    cart = await get_cart(db, user_id)
    item = await functions.get_cart_item(db, cart.id, item_id)
    if not item:
        raise NotFoundError("Cart item not found")

    await functions.remove_cart_item(db, item)
    await db.commit()


async def clear_cart(db: AsyncSession, user_id: int):
    cart = await functions.get_cart_by_user_id(db, user_id)
    if cart:
        await functions.clear_cart_items(db, cart.id)
        await db.commit()
