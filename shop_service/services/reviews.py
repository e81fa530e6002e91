# shop_service/services/reviews.py
import logging
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.db import functions
from shop_service.db.models import Review
from shop_service.db.schemas import ReviewUpdate
from shop_service.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from shop_service.services import unique_guard

logger = logging.getLogger(__name__)

ALREADY_REVIEWED = "you have already reviewed this product"


def _validate_rating(rating: Optional[int]):
    if rating is None or rating < 1 or rating > 5:
        raise ValidationError("rating must be between 1 and 5", field="rating")


async def create_review(
    db: AsyncSession,
    user_id: int,
    product_id: int,
    rating: int,
    title: Optional[str] = None,
    comment: Optional[str] = None,
) -> Review:
    """Create a verified review.

    Only allowed once per (user, product), and only for a product that appears
    in one of the user's delivered orders. Eligibility check and insert run in
    the same transaction, with the partial unique index as the final guard.
    """
    _validate_rating(rating)

    if not await functions.get_product_by_id(db, product_id):
        raise NotFoundError("Product not found")

    if not await functions.has_delivered_order_with_product(db, user_id, product_id):
        raise ForbiddenError("you must purchase the product before reviewing")

    if await functions.get_review_by_user_and_product(db, user_id, product_id):
        raise ConflictError(ALREADY_REVIEWED)

    async with unique_guard(db, ALREADY_REVIEWED):
        review = await functions.create_review(db, {
            "user_id": user_id,
            "product_id": product_id,
            "rating": rating,
            "title": title,
            "comment": comment,
            "is_verified": True,
        })
        await db.commit()

    logger.info("Review %s created by user %s for product %s", review.id, user_id, product_id)
    return review


async def get_review(db: AsyncSession, review_id: int) -> Review:
    review = await functions.get_review_by_id(db, review_id)
    if not review:
        raise NotFoundError("Review not found")
    return review


async def list_product_reviews(db: AsyncSession, product_id: int) -> Sequence[Review]:
    if not await functions.get_product_by_id(db, product_id):
        raise NotFoundError("Product not found")
    return await functions.get_product_reviews(db, product_id)


async def list_user_reviews(db: AsyncSession, user_id: int) -> Sequence[Review]:
    return await functions.get_user_reviews(db, user_id)


async def _owned_review(db: AsyncSession, user_id: int, review_id: int) -> Review:
    review = await get_review(db, review_id)
    if review.user_id != user_id:
        raise ForbiddenError("unauthorized")
    return review


async def update_review(db: AsyncSession, user_id: int, review_id: int, patch: ReviewUpdate) -> Review:
    review = await _owned_review(db, user_id, review_id)
    changes = patch.model_dump(exclude_unset=True)

    if "rating" in changes:
        _validate_rating(changes["rating"])
    for key, value in changes.items():
        setattr(review, key, value)

    await db.commit()
    return review


async def delete_review(db: AsyncSession, user_id: int, review_id: int):
    review = await _owned_review(db, user_id, review_id)
    await functions.soft_delete(db, review)
    await db.commit()
