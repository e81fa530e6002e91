# shop_service/services/orders.py
import logging
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.db import functions
from shop_service.db.models import Order, OrderStatus
from shop_service.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Allowed order status transitions
ALLOWED_TRANSITIONS = {
    OrderStatus.pending: {OrderStatus.processing, OrderStatus.cancelled},
    OrderStatus.processing: {OrderStatus.shipped},
    OrderStatus.shipped: {OrderStatus.delivered},
    OrderStatus.delivered: set(),
    OrderStatus.cancelled: set(),
}


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError("invalid order status", field="status")


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, set())


def check_transition(current: OrderStatus, new: OrderStatus):
    if not can_transition(current, new):
        raise ValidationError(f"cannot change order status from {current.value} to {new.value}", field="status")


async def _restock(db: AsyncSession, order: Order):
    for item in order.items:
        await functions.increment_stock(db, item.product_id, item.quantity)


async def create_order(
    db: AsyncSession, user_id: int, shipping_address_id: Optional[int] = None, notes: Optional[str] = None,
) -> Order:
    """Turn the user's cart into a pending order.

    Order rows, stock decrements and the cart drain share one transaction:
    either all of them are committed or none is.
    """
    cart = await functions.get_cart_by_user_id(db, user_id)
    if not cart or not cart.items:
        raise ValidationError("cart is empty")

    if shipping_address_id is not None:
        address = await functions.get_address_by_id(db, shipping_address_id)
        if not address or address.user_id != user_id:
            raise NotFoundError("Shipping address not found")
    else:
        address = await functions.get_default_address(db, user_id)

    items = [
        {
            "product_id": item.product_id,
            "quantity": item.quantity,
            "price": item.price,
            "subtotal": item.subtotal,
        }
        for item in cart.items
    ]
    total = round(sum(item["subtotal"] for item in items), 2)

    for item in items:
        if not await functions.decrement_stock(db, item["product_id"], item["quantity"]):
            await db.rollback()
            logger.warning("Checkout for user %s rejected: insufficient stock for product %s",
                           user_id, item["product_id"])
            raise ConflictError(f"insufficient stock for product {item['product_id']}")

    order = await functions.create_order(db, {
        "user_id": user_id,
        "status": OrderStatus.pending,
        "total_amount": total,
        "shipping_address_id": address.id if address else None,
        "notes": notes,
    }, items)
    await functions.clear_cart_items(db, cart.id)
    await db.commit()

    logger.info("Order %s created for user %s, total %.2f", order.id, user_id, total)
    return await functions.get_order_by_id(db, order.id)


async def get_order(db: AsyncSession, order_id: int, user_id: int) -> Order:
    order = await functions.get_order_by_id(db, order_id)
    if not order or order.user_id != user_id:
        raise NotFoundError("Order not found")
    return order


async def list_user_orders(db: AsyncSession, user_id: int) -> Sequence[Order]:
    return await functions.get_user_orders(db, user_id)


async def list_orders(db: AsyncSession, status: Optional[str] = None, skip: int = 0, limit: int = 100):
    return await functions.get_all_orders(
        db, status=parse_status(status) if status else None, skip=skip, limit=limit,
    )


async def cancel_order(db: AsyncSession, order_id: int, user_id: int) -> Order:
    """Cancel a pending order owned by the caller and return its quantities to stock."""
    order = await functions.get_order_by_id(db, order_id)
    if not order:
        raise NotFoundError("Order not found")
    if order.user_id != user_id:
        raise ForbiddenError("unauthorized access")
    if order.status != OrderStatus.pending:
        raise ValidationError("order cannot be cancelled")

    order.status = OrderStatus.cancelled
    await _restock(db, order)
    await db.commit()
    logger.info("Order %s cancelled by user %s", order_id, user_id)
    return order


async def update_order_status(
    db: AsyncSession, order_id: int, status: str, tracking_number: Optional[str] = None,
) -> Order:
    new_status = parse_status(status)
    order = await functions.get_order_by_id(db, order_id)
    if not order:
        raise NotFoundError("Order not found")

    check_transition(order.status, new_status)
    previous = order.status
    order.status = new_status
    if tracking_number is not None:
        order.tracking_number = tracking_number
    if new_status == OrderStatus.cancelled:
        await _restock(db, order)
    await db.commit()

    logger.info("Order %s status %s -> %s", order_id, previous.value, new_status.value)
    return order
