# storefront/domain/schemas.py
import re
from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

# digits with optional leading +, separators and parentheses, optional extension
PHONE_PATTERN = re.compile(
    r"^\+?\s*(\(\d{1,4}\)|\d)[\d\s\-.()]{5,24}(\s*(x|ext\.?)\s*\d{1,6})?$",
    re.IGNORECASE,
)
MIN_PHONE_DIGITS = 7


class Product(BaseModel):
    """Product as served by the catalog."""

    id: int
    name: str = "Unnamed Product"
    description: str = "No description available."
    price: Decimal
    image_url: str = "/images/placeholder.png"


class UserRead(BaseModel):
    """Schema for the local user profile (response)."""

    subject_id: str
    email: str | None = None
    email_verified: bool = False
    display_name: str | None = None
    last_login_at: datetime
    default_shipping_address: str | None = None
    phone_number: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ContactDetailsIn(BaseModel):
    """Schema for saving checkout defaults on the profile."""

    default_shipping_address: str | None = Field(None, max_length=1000)
    phone_number: str | None = Field(None, max_length=50)


class ItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: int = Field(..., gt=0, description="Product ID (must be > 0)")
    quantity: int = Field(1, description="Quantity, values below 1 are clamped to 1")

    @field_validator("quantity")
    @classmethod
    def clamp_quantity(cls, v: int) -> int:
        return max(v, 1)


class CartItemOut(BaseModel):
    """Schema for a cart line (response)."""

    id: int
    product_id: int
    product_name: str
    unit_price: Decimal
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    """Schema for the cart (response)."""

    id: int
    subject_id: str
    last_updated_at: datetime
    items: List[CartItemOut]

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self.items)

    @computed_field
    @property
    def total(self) -> Decimal:
        return sum((i.unit_price * i.quantity for i in self.items), Decimal("0.00"))


class ShippingDetails(BaseModel):
    """Checkout form. Whitespace is trimmed before the format rules run."""

    shipping_address: str = Field(..., max_length=1000)
    contact_phone: str = Field(..., max_length=50)

    @field_validator("shipping_address")
    @classmethod
    def address_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please enter your shipping address.")
        return v

    @field_validator("contact_phone")
    @classmethod
    def phone_shaped(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Please enter your contact phone number.")
        digits = sum(ch.isdigit() for ch in v)
        if not PHONE_PATTERN.match(v) or digits < MIN_PHONE_DIGITS:
            raise ValueError("Please enter a valid phone number.")
        return v


class OrderCreate(BaseModel):
    """Schema for placing an order from the current cart."""

    shipping_address: str = ""
    contact_phone: str = ""


class OrderItemOut(BaseModel):
    """Schema for an order line (response)."""

    id: int
    product_id: int
    product_name: str
    unit_price: Decimal
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema for an order (response)."""

    id: int
    subject_id: str
    ordered_at: datetime
    total: Decimal
    shipping_address: str
    contact_phone: str
    status: str
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)


class CheckoutDefaults(BaseModel):
    """Values used to pre-fill the checkout form."""

    shipping_address: str = ""
    contact_phone: str = ""

