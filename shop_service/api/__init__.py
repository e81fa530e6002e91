# shop_service/api/__init__.py
from fastapi import APIRouter

from shop_service.api import addresses, admin, auth, cart, categories, orders, products, reviews, users

# Route table under /api/v1
api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(products.router)
api_router.include_router(categories.router)
api_router.include_router(cart.router)
api_router.include_router(orders.router)
api_router.include_router(reviews.router)
api_router.include_router(addresses.router)
api_router.include_router(admin.router)
