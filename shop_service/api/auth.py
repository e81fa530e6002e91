# shop_service/api/auth.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.api.responses import created_response, success_response
from shop_service.config import Settings
from shop_service.db.database import get_db
from shop_service.db.schemas import LoginInput, RegisterInput, User
from shop_service.dependencies import get_settings
from shop_service.services import users

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
async def register(payload: RegisterInput, db: AsyncSession = Depends(get_db)):
    user = await users.register(db, payload.email, payload.password, payload.name)
    return created_response(user, User, message="User registered successfully")


@router.post("/login")
async def login(payload: LoginInput, db: AsyncSession = Depends(get_db), settings: Settings = Depends(get_settings)):
    token = await users.login(db, payload.email, payload.password, settings)
    return success_response({"token": token}, "Login successful")
