# marketplace/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Literal, Optional
from decimal import Decimal
from datetime import datetime

from marketplace.domain.checkout import (
    AddressSnapshot,
    CheckoutStep,
    DeliveryMethodSnapshot,
    PaymentSelection,
)


# =====================================================
# USERS
# =====================================================
class UserCreate(BaseModel):
    """Schema for creating a user profile."""

    id: Optional[str] = Field(None, min_length=1, max_length=36)
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = None
    role: Literal["buyer", "seller", "admin"] = "buyer"


class UserRead(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    role: str

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# PRODUCTS
# =====================================================
class ProductCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    unit: str = "piece"
    min_order: int = Field(1, ge=1, description="Minimum order quantity (MOQ)")
    stock_quantity: int = Field(0, ge=0)


class ProductOut(BaseModel):
    id: str
    seller_id: str
    title: str
    description: Optional[str] = None
    category: str
    price: Decimal
    unit: str
    min_order: int
    stock_quantity: int
    status: str

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# CART
# =====================================================
class ItemIn(BaseModel):
    """Schema for adding a product to the cart."""

    product_id: str = Field(..., min_length=1)
    quantity: int = Field(1, gt=0, description="Quantity (must be > 0)")


class QuantityIn(BaseModel):
    #0 or less removes the line
    quantity: int


class CartItemOut(BaseModel):
    product_id: str
    title: str
    unit: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class CartOut(BaseModel):
    buyer_id: str
    items: List[CartItemOut]
    subtotal: Decimal
    item_count: int


# =====================================================
# ADDRESSES / DELIVERY
# =====================================================
class AddressCreate(BaseModel):
    #field rules are checked by validate_address so they surface as 400s
    full_name: str
    phone: str
    address_line_1: str
    address_line_2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    country: str = "India"
    is_default: bool = False


class AddressOut(AddressCreate):
    id: str
    type: str

    model_config = ConfigDict(from_attributes=True)


class DeliveryMethodCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    base_cost: Decimal = Field(..., ge=0)
    estimated_days: int = Field(..., gt=0)
    is_active: bool = True


class DeliveryMethodOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    base_cost: Decimal
    estimated_days: int
    is_active: bool
    #effective cost for the given subtotal (free shipping applied)
    shipping_cost: Optional[Decimal] = None
    free_shipping: bool = False

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# CHECKOUT
# =====================================================
class AddressStepIn(BaseModel):
    shipping_address_id: Optional[str] = None
    billing_address_id: Optional[str] = None
    same_as_shipping: bool = True


class DeliveryStepIn(BaseModel):
    delivery_method_id: Optional[str] = None
    special_instructions: str = ""


class PaymentStepIn(BaseModel):
    payment: Optional[PaymentSelection] = None


class PlaceOrderIn(BaseModel):
    accept_terms: bool = False


class PaymentConfirmationIn(BaseModel):
    """Signed success payload from the hosted payment widget."""

    gateway_order_id: str = Field(..., min_length=1)
    payment_id: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)


class TotalsOut(BaseModel):
    subtotal: Decimal
    item_count: int
    shipping_cost: Optional[Decimal] = None
    tax_amount: Decimal
    total: Optional[Decimal] = None


class CheckoutOut(BaseModel):
    id: str
    buyer_id: str
    current_step: CheckoutStep
    shipping_address: Optional[AddressSnapshot] = None
    billing_address: Optional[AddressSnapshot] = None
    delivery_method: Optional[DeliveryMethodSnapshot] = None
    special_instructions: str = ""
    payment_method: Optional[str] = None
    payment_details: dict = {}
    terms_accepted: bool = False
    busy: bool = False
    totals: TotalsOut


class PaymentIntentOut(BaseModel):
    """Parameters the client opens the hosted widget with."""

    checkout_id: str
    key_id: str
    gateway_order_id: str
    amount: int
    currency: str
    order_ref: str


class PaymentVerifyIn(PaymentConfirmationIn):
    pass


class PaymentVerifyOut(BaseModel):
    verified: bool


# =====================================================
# ORDERS
# =====================================================
class OrderItemOut(BaseModel):
    product_id: str
    seller_id: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: str
    order_number: str
    buyer_id: str
    status: str
    subtotal: Decimal
    shipping_cost: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    shipping_address: dict
    billing_address: Optional[dict] = None
    delivery_method_id: Optional[str] = None
    special_instructions: Optional[str] = None
    payment_method: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    items: List[OrderItemOut]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# RFQ / REVIEWS
# =====================================================
class RFQCreate(BaseModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    message: Optional[str] = None
    company_name: str = Field(..., min_length=1)
    contact_person: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: Optional[str] = None


class RFQResponseIn(BaseModel):
    quoted_price: Decimal = Field(..., gt=0, description="Price per unit")
    response: str = Field(..., min_length=1)


class RFQOut(BaseModel):
    id: str
    product_id: str
    buyer_id: str
    seller_id: str
    quantity: int
    message: Optional[str] = None
    company_name: str
    contact_person: str
    email: str
    phone: Optional[str] = None
    status: str
    quoted_price: Optional[Decimal] = None
    quoted_total: Optional[Decimal] = None
    seller_response: Optional[str] = None
    response_date: Optional[datetime] = None
    created_at: datetime


class ReviewIn(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    review_text: Optional[str] = None


class ReviewOut(BaseModel):
    id: str
    product_id: str
    buyer_id: str
    rating: int
    review_text: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductRatingOut(BaseModel):
    product_id: str
    average_rating: float
    review_count: int


# =====================================================
# SAVED PRODUCTS
# =====================================================
class SavedProductIn(BaseModel):
    product_id: str = Field(..., min_length=1)


class SavedProductOut(BaseModel):
    id: str
    product_id: str
    buyer_id: str
    created_at: datetime
    product: ProductOut

    model_config = ConfigDict(from_attributes=True)
