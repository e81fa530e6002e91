# shop_service/db/schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from shop_service.db.models import AddressType, OrderStatus, RoleEnum


# Users and auth
class RegisterInput(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)


class LoginInput(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


class TokenResponse(BaseModel):
    token: str


# Partial update: an absent field means "unchanged"
class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)


class User(BaseModel):
    id: int
    email: str
    name: str
    role: RoleEnum
    created_at: datetime

    class Config:
        from_attributes = True


# Categories
class CategoryInput(BaseModel):
    name: str
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class Category(BaseModel):
    id: int
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


# Product images
class ImageInput(BaseModel):
    url: str = Field(min_length=1)
    is_primary: bool = False


class Image(BaseModel):
    id: int
    url: str
    product_id: int
    is_primary: bool

    class Config:
        from_attributes = True


# Products
class ProductInput(BaseModel):
    name: str
    description: Optional[str] = None
    price: float
    stock: int = 0
    category_id: int
    sku: Optional[str] = None
    is_active: bool = True


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    stock: Optional[int] = None
    category_id: Optional[int] = None
    sku: Optional[str] = None
    is_active: Optional[bool] = None


class Product(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    stock: int
    category_id: int
    sku: Optional[str] = None
    is_active: bool
    images: List[Image] = []

    class Config:
        from_attributes = True


# Cart
class CartItemInput(BaseModel):
    product_id: int
    quantity: int = 1


class CartItemUpdate(BaseModel):
    quantity: int


class CartItem(BaseModel):
    id: int
    product_id: int
    quantity: int
    price: float
    subtotal: float

    class Config:
        from_attributes = True


class Cart(BaseModel):
    id: int
    user_id: int
    items: List[CartItem] = []
    total: float

    class Config:
        from_attributes = True


# Orders
class OrderInput(BaseModel):
    shipping_address_id: Optional[int] = None
    notes: Optional[str] = None


class OrderStatusInput(BaseModel):
    status: str
    tracking_number: Optional[str] = None


class OrderItem(BaseModel):
    id: int
    product_id: int
    quantity: int
    price: float
    subtotal: float

    class Config:
        from_attributes = True


class Order(BaseModel):
    id: int
    user_id: int
    status: OrderStatus
    total_amount: float
    shipping_cost: float = 0.0
    tax_amount: float = 0.0
    discount: float = 0.0
    shipping_address_id: Optional[int] = None
    payment_id: Optional[str] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    items: List[OrderItem] = []
    created_at: datetime

    class Config:
        from_attributes = True


# Reviews
class ReviewInput(BaseModel):
    rating: int
    title: Optional[str] = Field(default=None, max_length=100)
    comment: Optional[str] = None


class ReviewUpdate(BaseModel):
    rating: Optional[int] = None
    title: Optional[str] = Field(default=None, max_length=100)
    comment: Optional[str] = None


class Review(BaseModel):
    id: int
    user_id: int
    product_id: int
    rating: int
    title: Optional[str] = None
    comment: Optional[str] = None
    is_verified: bool
    created_at: datetime

    class Config:
        from_attributes = True


# Addresses: required fields are checked in the service
class AddressInput(BaseModel):
    type: str = ""
    street: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    zip_code: str = ""


class Address(BaseModel):
    id: int
    user_id: int
    type: AddressType
    street: str
    city: str
    state: str
    country: str
    zip_code: str
    is_default: bool

    class Config:
        from_attributes = True
