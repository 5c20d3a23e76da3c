# store_service/schemas.py

"""
Pydantic schemas for the store service.
These define the data structures for incoming requests, outgoing responses
and queue messages, ensuring data validation and clear API contracts.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


# --- Categories and sizes ---


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Category name.")


class CategoryResponse(CategoryCreate):
    id: str = Field(..., description="Unique identifier of the category.")

    model_config = ConfigDict(from_attributes=True)


class SizeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, description="Size label, e.g. 'M' or '42'.")


class SizeResponse(SizeCreate):
    id: str

    model_config = ConfigDict(from_attributes=True)


# --- Products ---


# Schema for creating a new product.
# Used in POST /products/ endpoint.
class ProductCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, description="Display title; the slug is derived from it.")
    description: Optional[str] = Field(None, description="Detailed description of the product.")
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="List price. Must be greater than 0.")
    is_on_sale: bool = Field(False, description="Whether the product is currently discounted.")
    sale_price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    start_sale: Optional[date] = Field(None, description="First day of the sale. Defaults to today.")
    end_sale: Optional[date] = Field(None, description="Last day of the sale. Must be after today.")
    category_ids: List[str] = Field(default_factory=list, description="Identifiers of existing categories.")


# Schema for updating an existing product.
# Every field is optional; only the fields present in the request body are
# applied (tracked through `model_fields_set`). An empty `category_ids`
# list leaves the categories untouched.
# Used in PUT /products/{product_id} endpoint.
class ProductUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    is_on_sale: Optional[bool] = None
    sale_price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    start_sale: Optional[date] = None
    end_sale: Optional[date] = None
    category_ids: Optional[List[str]] = None

    def is_set(self, field: str) -> bool:
        """True when the field was sent with a non-null value."""
        return field in self.model_fields_set and getattr(self, field) is not None


# Schema for representing a product in API responses.
class ProductResponse(BaseModel):
    id: str
    title: str
    slug: str
    description: Optional[str] = None
    price: Decimal
    is_on_sale: bool
    sale_price: Optional[Decimal] = None
    start_sale: Optional[date] = None
    end_sale: Optional[date] = None
    categories: List[CategoryResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PagedResponse(BaseModel, Generic[T]):
    content: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int
    last: bool


# --- Users ---


class SignupRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)
    password: str


class UserResponse(BaseModel):
    id: str
    username: str
    email: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., max_length=255)


class ResetPasswordRequest(BaseModel):
    email: str = Field(..., max_length=255)
    otp: str = Field(..., min_length=1, max_length=20)
    new_password: str


# --- Orders ---


class OrderItemCreate(BaseModel):
    product_id: str
    size: Optional[str] = Field(None, max_length=50)
    quantity: int = Field(..., gt=0)


class OrderCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)
    phone: str = Field(..., min_length=1, max_length=30)
    address: str = Field(..., min_length=1)
    items: List[OrderItemCreate] = Field(..., min_length=1)


class OrderItemResponse(BaseModel):
    product_id: Optional[str] = None
    product_title: str
    size: Optional[str] = None
    quantity: int
    unit_price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    id: str
    full_name: str
    email: str
    phone: str
    address: str
    items: List[OrderItemResponse]
    total: Decimal
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# --- Queue messages ---
# Field aliases are the wire names shared with other producers.


class AuthEmailMessage(BaseModel):
    to: str
    subject: str
    otp: str


class OrderEmailMessage(BaseModel):
    order_id: str = Field(..., alias="orderId")
    to: str
    subject: str
    confirm_link: str = Field(..., alias="confirmLink")

    model_config = ConfigDict(populate_by_name=True)
