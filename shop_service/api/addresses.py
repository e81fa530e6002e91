# shop_service/api/addresses.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shop_service.api.responses import created_response, no_content_response, success_response
from shop_service.db.database import get_db
from shop_service.db.schemas import Address, AddressInput
from shop_service.dependencies import CurrentUser, get_current_user
from shop_service.services import addresses

router = APIRouter(prefix="/addresses", tags=["addresses"])


@router.get("")
async def list_addresses(current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    items = await addresses.list_addresses(db, current.id)
    return success_response(items, "Addresses retrieved successfully", Address)


@router.post("", status_code=201)
async def create_address(
    payload: AddressInput, current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    address = await addresses.create_address(db, current.id, payload)
    return created_response(address, Address)


@router.get("/{address_id}")
async def get_address(address_id: int, current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    address = await addresses.get_address(db, current.id, address_id)
    return success_response(address, "Address retrieved successfully", Address)


@router.put("/{address_id}")
async def update_address(
    address_id: int,
    payload: AddressInput,
    current: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    address = await addresses.update_address(db, current.id, address_id, payload)
    return success_response(address, "Address updated successfully", Address)


@router.delete("/{address_id}", status_code=204)
async def delete_address(address_id: int, current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    await addresses.delete_address(db, current.id, address_id)
    return no_content_response()


@router.put("/{address_id}/default")
async def set_default_address(
    address_id: int, current: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    address = await addresses.set_default_address(db, current.id, address_id)
    return success_response(address, "Default address updated successfully", Address)
