# shop_service/services/addresses.py
import logging
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.db import functions
from shop_service.db.models import Address, AddressType
from shop_service.db.schemas import AddressInput
from shop_service.exceptions import ForbiddenError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    ("street", "street is required"),
    ("city", "city is required"),
    ("state", "state is required"),
    ("country", "country is required"),
    ("zip_code", "zip code is required"),
    ("type", "address type is required"),
)


def validate_address(data: AddressInput) -> dict:
    values = {key: (getattr(data, key) or "").strip() for key, _ in REQUIRED_FIELDS}
    for key, message in REQUIRED_FIELDS:
        if not values[key]:
            raise ValidationError(message, field=key)
    try:
        values["type"] = AddressType(values["type"])
    except ValueError:
        raise ValidationError("address type must be either shipping or billing", field="type")
    return values


async def create_address(db: AsyncSession, user_id: int, data: AddressInput) -> Address:
    """Create an address; the user's first address becomes the default."""
    values = validate_address(data)
    existing = await functions.get_user_addresses(db, user_id)

    address = await functions.create_address(db, {
        **values,
        "user_id": user_id,
        "is_default": not existing,
    })
    await db.commit()
    return address


async def get_address(db: AsyncSession, user_id: int, address_id: int) -> Address:
    address = await functions.get_address_by_id(db, address_id)
    if not address:
        raise NotFoundError("Address not found")
    if address.user_id != user_id:
        raise ForbiddenError("unauthorized")
    return address


async def list_addresses(db: AsyncSession, user_id: int) -> Sequence[Address]:
    return await functions.get_user_addresses(db, user_id)


async def update_address(db: AsyncSession, user_id: int, address_id: int, data: AddressInput) -> Address:
    """Replace the address fields; owner and default flag are kept."""
    address = await get_address(db, user_id, address_id)
    values = validate_address(data)
    for key, value in values.items():
        setattr(address, key, value)
    await db.commit()
    return address


async def delete_address(db: AsyncSession, user_id: int, address_id: int):
    """Soft-delete an address. If it was the default, the oldest remaining one is promoted."""
    address = await get_address(db, user_id, address_id)
    was_default = address.is_default

    address.is_default = False
    await functions.soft_delete(db, address)
    if was_default:
        remaining = await functions.get_user_addresses(db, user_id)
        if remaining:
            await functions.set_default_address(db, user_id, remaining[0].id)
            logger.debug("Address %s promoted to default for user %s", remaining[0].id, user_id)
    await db.commit()


async def set_default_address(db: AsyncSession, user_id: int, address_id: int) -> Address:
    address = await get_address(db, user_id, address_id)
    await functions.set_default_address(db, user_id, address.id)
    await db.commit()
    return address
