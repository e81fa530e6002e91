# shop_service/services/products.py
import logging
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.db import functions
from shop_service.db.models import Image, Product
from shop_service.db.schemas import ImageInput, ProductInput, ProductUpdate
from shop_service.exceptions import ConflictError, NotFoundError, ValidationError
from shop_service.services import unique_guard

logger = logging.getLogger(__name__)


def _validate(name: Optional[str], price: Optional[float], stock: Optional[int]):
    if not name or not name.strip():
        raise ValidationError("product name is required", field="name")
    if price is None or price <= 0:
        raise ValidationError("product price must be greater than 0", field="price")
    if stock is None or stock < 0:
        raise ValidationError("product stock cannot be negative", field="stock")


async def _ensure_category(db: AsyncSession, category_id: int):
    if not await functions.get_category_by_id(db, category_id):
        raise NotFoundError("Category not found")


async def _ensure_sku_free(db: AsyncSession, sku: Optional[str], product_id: Optional[int] = None):
    if not sku:
        return
    existing = await functions.get_product_by_sku(db, sku)
    if existing and existing.id != product_id:
        raise ConflictError("Product with this SKU already exists")


async def create_product(db: AsyncSession, data: ProductInput) -> Product:
    _validate(data.name, data.price, data.stock)
    await _ensure_category(db, data.category_id)
    await _ensure_sku_free(db, data.sku)

    values = data.model_dump()
    values["name"] = data.name.strip()
    async with unique_guard(db, "Product with this SKU already exists"):
        product = await functions.create_product(db, values)
        await db.commit()

    logger.info("Product %s created (id=%s)", product.name, product.id)
    return await get_product(db, product.id)


async def get_product(db: AsyncSession, product_id: int, active_only: bool = False) -> Product:
    """Load a live product. Public reads pass ``active_only`` to hide deactivated ones."""
    product = await functions.get_product_by_id(db, product_id, refresh=True, active_only=active_only)
    if not product:
        raise NotFoundError("Product not found")
    return product


async def list_products(
    db: AsyncSession,
    category_id: Optional[int] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> Sequence[Product]:
    """List live products. Every filter is optional; an absent filter does not constrain."""
    if min_price is not None and min_price < 0:
        raise ValidationError("minimum price cannot be negative", field="min_price")
    if max_price is not None and max_price < 0:
        raise ValidationError("maximum price cannot be negative", field="max_price")
    if skip < 0 or limit <= 0:
        raise ValidationError("invalid pagination parameters")

    return await functions.get_all_products(
        db,
        category_id=category_id,
        min_price=min_price,
        max_price=max_price,
        search=search.strip() if search else None,
        skip=skip,
        limit=limit,
    )


async def update_product(db: AsyncSession, product_id: int, patch: ProductUpdate) -> Product:
    """Overwrite only the fields present in the patch, then re-check the product invariants."""
    product = await get_product(db, product_id)
    changes = patch.model_dump(exclude_unset=True)

    name = changes.get("name", product.name)
    price = changes.get("price", product.price)
    stock = changes.get("stock", product.stock)
    _validate(name, price, stock)

    if "category_id" in changes:
        if changes["category_id"] is None:
            raise ValidationError("category_id cannot be empty", field="category_id")
        await _ensure_category(db, changes["category_id"])
    if changes.get("sku"):
        await _ensure_sku_free(db, changes["sku"], product.id)
    if "is_active" in changes and changes["is_active"] is None:
        raise ValidationError("is_active cannot be empty", field="is_active")

    for key, value in changes.items():
        setattr(product, key, value)
    product.name = name.strip()

    async with unique_guard(db, "Product with this SKU already exists"):
        await db.commit()
    logger.info("Product %s updated: %s", product_id, ", ".join(sorted(changes)) or "no changes")
    return product


async def delete_product(db: AsyncSession, product_id: int):
    product = await get_product(db, product_id)
    await functions.soft_delete(db, product)
    await db.commit()
    logger.info("Product %s deleted", product_id)


# Product images
async def add_image(db: AsyncSession, product_id: int, data: ImageInput) -> Image:
    """Attach an image. The first image of a product, or one flagged primary, becomes the only primary."""
    await get_product(db, product_id)
    existing = await functions.get_product_images(db, product_id)

    is_primary = data.is_primary or not existing
    if is_primary:
        await functions.clear_primary_image(db, product_id)
    image = await functions.create_image(db, {
        "product_id": product_id,
        "url": data.url,
        "is_primary": is_primary,
    })
    await db.commit()
    return image


async def delete_image(db: AsyncSession, product_id: int, image_id: int):
    image = await functions.get_image(db, product_id, image_id)
    if not image:
        raise NotFoundError("Image not found")

    was_primary = image.is_primary
    image.is_primary = False
    await functions.soft_delete(db, image)
    if was_primary:
        remaining = await functions.get_product_images(db, product_id)
        if remaining:
            remaining[0].is_primary = True
    await db.commit()
