# shop_service/services/__init__.py
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.exceptions import ConflictError


@asynccontextmanager
async def unique_guard(db: AsyncSession, message: str):
    """Turn a unique-constraint violation raised inside the block into ConflictError."""
    try:
        yield
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError(message) from e
