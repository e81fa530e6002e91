# shop_service/db/functions.py
#
# Data access. Functions only add, read and flush;
# the service layer commits the transaction.
from typing import Optional, Sequence

from sqlalchemy import delete, func, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from shop_service.db.models import (
    Address, Cart, CartItem, Category, Image, Order, OrderItem, OrderStatus, Product, Review, User, utcnow,
)


async def soft_delete(db: AsyncSession, obj):
    obj.deleted_at = utcnow()
    await db.flush()
    return obj


# ---------------------------------------------------------------- users

async def get_user_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
    result = await db.execute(select(User).filter(User.id == user_id, User.deleted_at.is_(None)))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).filter(User.email == email, User.deleted_at.is_(None)))
    return result.scalar_one_or_none()


async def email_taken(db: AsyncSession, email: str) -> bool:
    # Emails stay reserved by soft-deleted users too
    result = await db.execute(select(User.id).filter(User.email == email))
    return result.first() is not None


async def create_user(db: AsyncSession, user_data: dict) -> User:
    db_user = User(**user_data)
    db.add(db_user)
    await db.flush()
    return db_user


# ---------------------------------------------------------------- categories

async def get_category_by_id(db: AsyncSession, category_id: int) -> Optional[Category]:
    result = await db.execute(
        select(Category).filter(Category.id == category_id, Category.deleted_at.is_(None))
    )
    return result.scalar_one_or_none()


async def get_category_by_name(db: AsyncSession, name: str) -> Optional[Category]:
    result = await db.execute(select(Category).filter(Category.name == name))
    return result.scalar_one_or_none()


async def get_all_categories(db: AsyncSession) -> Sequence[Category]:
    result = await db.execute(
        select(Category).filter(Category.deleted_at.is_(None)).order_by(Category.name)
    )
    return result.scalars().all()


async def create_category(db: AsyncSession, category_data: dict) -> Category:
    category = Category(**category_data)
    db.add(category)
    await db.flush()
    return category


async def count_category_products(db: AsyncSession, category_id: int) -> int:
    result = await db.execute(
        select(func.count(Product.id)).filter(Product.category_id == category_id, Product.deleted_at.is_(None))
    )
    return result.scalar_one()


# ---------------------------------------------------------------- products

def _product_query(active_only: bool = False):
    query = select(Product).filter(Product.deleted_at.is_(None)).options(selectinload(Product.images))
    if active_only:
        query = query.filter(Product.is_active.is_(True))
    return query


async def get_product_by_id(
    db: AsyncSession, product_id: int, refresh: bool = False, active_only: bool = False,
) -> Optional[Product]:
    query = _product_query(active_only).filter(Product.id == product_id)
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_product_by_sku(db: AsyncSession, sku: str) -> Optional[Product]:
    result = await db.execute(select(Product).filter(Product.sku == sku))
    return result.scalar_one_or_none()


# Active products with filters and pagination; an absent filter does not constrain
async def get_all_products(
    db: AsyncSession,
    category_id: Optional[int] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> Sequence[Product]:
    query = _product_query(active_only=True)
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
    result = await db.execute(query.order_by(Product.name, Product.id).offset(skip).limit(limit))
    return result.scalars().all()


async def create_product(db: AsyncSession, product_data: dict) -> Product:
    new_product = Product(**product_data)
    db.add(new_product)
    await db.flush()
    return new_product


# Compare-and-swap decrement: the row only changes when enough stock is left
async def decrement_stock(db: AsyncSession, product_id: int, quantity: int) -> bool:
    result = await db.execute(
        update(Product)
        .where(Product.id == product_id, Product.deleted_at.is_(None), Product.stock >= quantity)
        .values(stock=Product.stock - quantity, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def increment_stock(db: AsyncSession, product_id: int, quantity: int):
    await db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock=Product.stock + quantity, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )


# ---------------------------------------------------------------- images

async def get_image(db: AsyncSession, product_id: int, image_id: int) -> Optional[Image]:
    result = await db.execute(
        select(Image).filter(Image.id == image_id, Image.product_id == product_id, Image.deleted_at.is_(None))
    )
    return result.scalar_one_or_none()


async def get_product_images(db: AsyncSession, product_id: int) -> Sequence[Image]:
    result = await db.execute(
        select(Image).filter(Image.product_id == product_id, Image.deleted_at.is_(None)).order_by(Image.id)
    )
    return result.scalars().all()


async def create_image(db: AsyncSession, image_data: dict) -> Image:
    image = Image(**image_data)
    db.add(image)
    await db.flush()
    return image


async def clear_primary_image(db: AsyncSession, product_id: int):
    await db.execute(
        update(Image)
        .where(Image.product_id == product_id)
        .values(is_primary=False)
        .execution_options(synchronize_session="evaluate")
    )


# ---------------------------------------------------------------- carts

# Cart of a user, items included
async def get_cart_by_user_id(db: AsyncSession, user_id: int) -> Optional[Cart]:
    result = await db.execute(
        select(Cart)
        .filter(Cart.user_id == user_id, Cart.deleted_at.is_(None))
        .options(selectinload(Cart.items))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_cart(db: AsyncSession, user_id: int) -> Cart:
    cart = Cart(user_id=user_id, items=[])
    db.add(cart)
    await db.flush()
    return cart


async def get_cart_item_by_product(db: AsyncSession, cart_id: int, product_id: int) -> Optional[CartItem]:
    result = await db.execute(
        select(CartItem).filter(CartItem.cart_id == cart_id, CartItem.product_id == product_id)
    )
    return result.scalar_one_or_none()


# Items are looked up inside the owner's cart only
async def get_cart_item(db: AsyncSession, cart_id: int, item_id: int) -> Optional[CartItem]:
    result = await db.execute(
        select(CartItem).filter(CartItem.id == item_id, CartItem.cart_id == cart_id)
    )
    return result.scalar_one_or_none()


async def add_cart_item(db: AsyncSession, item_data: dict) -> CartItem:
    item = CartItem(**item_data)
    db.add(item)
    await db.flush()
    return item


async def remove_cart_item(db: AsyncSession, item: CartItem):
    await db.delete(item)
    await db.flush()


# Clear a cart in one statement
async def clear_cart_items(db: AsyncSession, cart_id: int):
    await db.execute(
        delete(CartItem).where(CartItem.cart_id == cart_id).execution_options(synchronize_session=False)
    )


# ---------------------------------------------------------------- orders

def _order_query():
    return select(Order).filter(Order.deleted_at.is_(None)).options(selectinload(Order.items))


async def get_order_by_id(db: AsyncSession, order_id: int) -> Optional[Order]:
    result = await db.execute(
        _order_query().filter(Order.id == order_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_user_orders(db: AsyncSession, user_id: int, skip: int = 0, limit: int = 100) -> Sequence[Order]:
    result = await db.execute(
        _order_query().filter(Order.user_id == user_id).order_by(Order.id.desc()).offset(skip).limit(limit)
    )
    return result.scalars().all()


async def get_all_orders(db: AsyncSession, status: Optional[OrderStatus] = None, skip: int = 0, limit: int = 100):
    query = _order_query()
    if status is not None:
        query = query.filter(Order.status == status)
    result = await db.execute(query.order_by(Order.id.desc()).offset(skip).limit(limit))
    return result.scalars().all()


async def create_order(db: AsyncSession, order_data: dict, items: list) -> Order:
    new_order = Order(**order_data, items=[OrderItem(**item) for item in items])
    db.add(new_order)
    await db.flush()
    return new_order


async def has_delivered_order_with_product(db: AsyncSession, user_id: int, product_id: int) -> bool:
    result = await db.execute(
        select(OrderItem.id)
        .join(Order, OrderItem.order_id == Order.id)
        .filter(
            Order.user_id == user_id,
            Order.status == OrderStatus.delivered,
            Order.deleted_at.is_(None),
            OrderItem.product_id == product_id,
        )
        .limit(1)
    )
    return result.first() is not None


# ---------------------------------------------------------------- reviews

async def get_review_by_id(db: AsyncSession, review_id: int) -> Optional[Review]:
    result = await db.execute(select(Review).filter(Review.id == review_id, Review.deleted_at.is_(None)))
    return result.scalar_one_or_none()


async def get_review_by_user_and_product(db: AsyncSession, user_id: int, product_id: int) -> Optional[Review]:
    result = await db.execute(
        select(Review).filter(
            Review.user_id == user_id, Review.product_id == product_id, Review.deleted_at.is_(None)
        )
    )
    return result.scalar_one_or_none()


async def get_product_reviews(db: AsyncSession, product_id: int) -> Sequence[Review]:
    result = await db.execute(
        select(Review).filter(Review.product_id == product_id, Review.deleted_at.is_(None)).order_by(Review.id)
    )
    return result.scalars().all()


async def get_user_reviews(db: AsyncSession, user_id: int) -> Sequence[Review]:
    result = await db.execute(
        select(Review).filter(Review.user_id == user_id, Review.deleted_at.is_(None)).order_by(Review.id)
    )
    return result.scalars().all()


async def create_review(db: AsyncSession, review_data: dict) -> Review:
    review = Review(**review_data)
    db.add(review)
    await db.flush()
    return review


# ---------------------------------------------------------------- addresses

async def get_address_by_id(db: AsyncSession, address_id: int) -> Optional[Address]:
    result = await db.execute(
        select(Address).filter(Address.id == address_id, Address.deleted_at.is_(None))
    )
    return result.scalar_one_or_none()


async def get_user_addresses(db: AsyncSession, user_id: int) -> Sequence[Address]:
    result = await db.execute(
        select(Address).filter(Address.user_id == user_id, Address.deleted_at.is_(None)).order_by(Address.id)
    )
    return result.scalars().all()


async def get_default_address(db: AsyncSession, user_id: int) -> Optional[Address]:
    result = await db.execute(
        select(Address).filter(
            Address.user_id == user_id, Address.is_default.is_(True), Address.deleted_at.is_(None)
        )
    )
    return result.scalars().first()


async def create_address(db: AsyncSession, address_data: dict) -> Address:
    address = Address(**address_data)
    db.add(address)
    await db.flush()
    return address


# Clear the default flag on every address of the user, then set it on one
async def set_default_address(db: AsyncSession, user_id: int, address_id: int):
    await db.execute(
        update(Address)
        .where(Address.user_id == user_id, Address.id != address_id)
        .values(is_default=False)
        .execution_options(synchronize_session="evaluate")
    )
    await db.execute(
        update(Address)
        .where(Address.id == address_id, Address.user_id == user_id)
        .values(is_default=True)
        .execution_options(synchronize_session="evaluate")
    )
