# shop_service/api/reviews.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.api.responses import no_content_response, success_response
from shop_service.db.database import get_db
from shop_service.db.schemas import Review, ReviewUpdate
from shop_service.dependencies import CurrentUser, get_current_user
from shop_service.services import reviews

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("/{review_id}")
async def get_review(review_id: int, db: AsyncSession = Depends(get_db)):
    review = await reviews.get_review(db, review_id)
    return success_response(review, "Review retrieved successfully", Review)


@router.put("/{review_id}")
async def update_review(
    review_id: int,
    payload: ReviewUpdate,
    current: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    review = await reviews.update_review(db, current.id, review_id, payload)
    return success_response(review, "Review updated successfully", Review)


@router.delete("/{review_id}", status_code=204)
async def delete_review(review_id: int, current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    await reviews.delete_review(db, current.id, review_id)
    return no_content_response()
