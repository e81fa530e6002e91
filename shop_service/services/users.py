# shop_service/services/users.py
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.auth_utils import create_access_token, hash_password, verify_password
from shop_service.config import Settings
from shop_service.db import functions
from shop_service.db.models import RoleEnum, User
from shop_service.db.schemas import UserUpdate
from shop_service.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from shop_service.services import unique_guard

logger = logging.getLogger(__name__)


async def register(db: AsyncSession, email: str, password: str, name: str) -> User:
    """Create a user account with role "user" and a hashed password."""
    if not name or not name.strip():
        raise ValidationError("name is required", field="name")

    if await functions.email_taken(db, email):
        logger.debug("Registration rejected, email already registered: %s", email)
        raise ConflictError("Email already registered")

    async with unique_guard(db, "Email already registered"):
        user = await functions.create_user(db, {
            "email": email,
            "password_hash": hash_password(password),
            "name": name.strip(),
            "role": RoleEnum.user,
        })
        await db.commit()

    logger.info("User %s registered (id=%s)", email, user.id)
    return user


async def login(db: AsyncSession, email: str, password: str, settings: Settings) -> str:
    """Check credentials and issue a signed access token."""
    user = await functions.get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        logger.debug("Failed login for %s", email)
        raise UnauthorizedError("Invalid credentials")

    return create_access_token(
        {"user_id": user.id, "email": user.email, "role": user.role.value},
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_hours=settings.jwt_expiration_hours,
    )


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await functions.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def update_user(db: AsyncSession, user_id: int, patch: UserUpdate) -> User:
    """Apply a partial update. The role is not part of the payload and never changes here."""
    user = await get_user(db, user_id)
    changes = patch.model_dump(exclude_unset=True)

    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("name cannot be empty", field="name")
        user.name = name

    if "email" in changes:
        email = changes["email"]
        if not email:
            raise ValidationError("email cannot be empty", field="email")
        if email != user.email:
            if await functions.email_taken(db, email):
                raise ConflictError("Email already registered")
            user.email = email

    if "password" in changes:
        if not changes["password"]:
            raise ValidationError("password cannot be empty", field="password")
        user.password_hash = hash_password(changes["password"])

    async with unique_guard(db, "Email already registered"):
        await db.commit()
    return user


async def delete_user(db: AsyncSession, user_id: int):
    user = await get_user(db, user_id)
    await functions.soft_delete(db, user)
    await db.commit()
    logger.info("User %s deleted", user_id)
