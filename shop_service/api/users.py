# shop_service/api/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.api.responses import no_content_response, success_response
from shop_service.db.database import get_db
from shop_service.db.schemas import Review, User, UserUpdate
from shop_service.dependencies import CurrentUser, get_current_user
from shop_service.services import reviews, users

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me")
async def get_current_user_profile(current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    user = await users.get_user(db, current.id)
    return success_response(user, "User retrieved successfully", User)


@router.put("/me")
async def update_current_user(
    payload: UserUpdate, current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    user = await users.update_user(db, current.id, payload)
    return success_response(user, "User updated successfully", User)


@router.delete("/me", status_code=204)
async def delete_current_user(current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    await users.delete_user(db, current.id)
    return no_content_response()


@router.get("/me/reviews")
async def get_my_reviews(current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    items = await reviews.list_user_reviews(db, current.id)
    return success_response(items, "Reviews retrieved successfully", Review)
