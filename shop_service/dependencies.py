# shop_service/dependencies.py
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.auth_utils import decode_access_token
from shop_service.config import Settings
from shop_service.db import functions
from shop_service.db.database import get_db
from shop_service.db.models import RoleEnum
from shop_service.exceptions import ForbiddenError, UnauthorizedError

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == RoleEnum.admin.value


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Verify the bearer token and resolve the account it was issued for.

    Tokens of deleted accounts are rejected. The role comes from the stored
    account rather than the token claims.
    """
    if not token:
        raise UnauthorizedError("Authorization header required")

    payload = decode_access_token(token, settings.jwt_secret, settings.jwt_algorithm)
    user = await functions.get_user_by_id(db, payload["user_id"])
    if not user:
        raise UnauthorizedError("User no longer exists")
    return CurrentUser(id=user.id, email=user.email, role=user.role.value)


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise ForbiddenError("Admin access required")
    return user
