# shop_service/services/categories.py
import logging
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.db import functions
from shop_service.db.models import Category
from shop_service.db.schemas import CategoryInput, CategoryUpdate
from shop_service.exceptions import ConflictError, NotFoundError, ValidationError
from shop_service.services import unique_guard

logger = logging.getLogger(__name__)

DUPLICATE_NAME = "category with this name already exists"


async def create_category(db: AsyncSession, data: CategoryInput) -> Category:
    name = (data.name or "").strip()
    if not name:
        raise ValidationError("category name is required", field="name")
    if await functions.get_category_by_name(db, name):
        raise ConflictError(DUPLICATE_NAME)

    async with unique_guard(db, DUPLICATE_NAME):
        category = await functions.create_category(db, {"name": name, "description": data.description})
        await db.commit()
    logger.info("Category %s created (id=%s)", name, category.id)
    return category


async def get_category(db: AsyncSession, category_id: int) -> Category:
    category = await functions.get_category_by_id(db, category_id)
    if not category:
        raise NotFoundError("Category not found")
    return category


async def list_categories(db: AsyncSession) -> Sequence[Category]:
    return await functions.get_all_categories(db)


async def update_category(db: AsyncSession, category_id: int, patch: CategoryUpdate) -> Category:
    category = await get_category(db, category_id)
    changes = patch.model_dump(exclude_unset=True)

    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("category name is required", field="name")
        if name != category.name:
            duplicate = await functions.get_category_by_name(db, name)
            if duplicate and duplicate.id != category.id:
                raise ConflictError(DUPLICATE_NAME)
        category.name = name
    if "description" in changes:
        category.description = changes["description"]

    async with unique_guard(db, DUPLICATE_NAME):
        await db.commit()
    return category


async def delete_category(db: AsyncSession, category_id: int):
    """Soft-delete a category. Refused while live products still reference it; nothing cascades."""
    category = await get_category(db, category_id)
    if await functions.count_category_products(db, category_id) > 0:
        raise ConflictError("cannot delete category with associated products")

    await functions.soft_delete(db, category)
    await db.commit()
    logger.info("Category %s deleted", category_id)
