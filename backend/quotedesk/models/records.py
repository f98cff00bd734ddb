"""
In-memory record types for the quotation engine.

Derived fields (``discounted_price`` on line items, ``area_sqft`` / ``amount``
on installation charges, the totals on rooms and quotations) are cached values
written only by the pricing services, never by callers.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class LineItemKind(str, Enum):
    PRODUCT = "product"
    ACCESSORY = "accessory"


class QuotationStatus(str, Enum):
    DRAFT = "draft"
    SAVED = "saved"
    SENT = "sent"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"
    CONVERTED = "converted"


class SalesOrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PRODUCTION = "in_production"
    READY_FOR_DELIVERY = "ready_for_delivery"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"


class PaymentMethod(str, Enum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    CHECK = "check"
    CARD = "card"
    UPI = "upi"
    OTHER = "other"


@dataclass
class Customer:
    id: int
    name: str
    email: str = ""
    phone: str = ""
    address: str = ""
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Quotation:
    id: int
    quotation_number: str
    customer_id: Optional[int] = None
    title: str = ""
    description: Optional[str] = None
    status: QuotationStatus = QuotationStatus.DRAFT
    # Policy inputs
    global_discount: float = 0.0           # percent, applied after item discounts
    gst_percentage: float = 0.0            # percent
    installation_handling: float = 0.0     # flat fee
    # Derived outputs (written by PricingAggregator.recalc_quotation only)
    total_selling_price: float = 0.0
    total_discounted_price: float = 0.0
    total_installation_charges: float = 0.0
    gst_amount: float = 0.0
    final_price: float = 0.0
    valid_until: Optional[datetime] = None
    terms: str = ""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Room:
    id: int
    quotation_id: int
    name: str
    description: Optional[str] = None
    order: int = 0
    # Derived (written by PricingAggregator.recalc_room only)
    selling_price: float = 0.0
    discounted_price: float = 0.0


@dataclass
class LineItem:
    id: int
    room_id: int
    kind: LineItemKind
    name: str
    selling_price: float
    description: Optional[str] = None
    category: Optional[str] = None
    quantity: int = 1
    discount: float = 0.0
    discount_type: DiscountType = DiscountType.PERCENTAGE
    discounted_price: float = 0.0


@dataclass
class InstallationCharge:
    id: int
    room_id: int
    cabinet_type: str
    width_mm: Optional[float]
    height_mm: Optional[float]
    price_per_sqft: float
    area_sqft: Optional[float] = None
    amount: Optional[float] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class SalesOrder:
    id: int
    order_number: str
    quotation_id: int
    customer_id: Optional[int]
    total_amount: float
    amount_paid: float = 0.0
    amount_due: float = 0.0
    status: SalesOrderStatus = SalesOrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    order_date: datetime = field(default_factory=utcnow)
    expected_delivery_date: Optional[datetime] = None
    notes: str = ""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Payment:
    id: int
    sales_order_id: int
    transaction_id: str
    receipt_number: str
    amount: float
    payment_method: PaymentMethod
    payment_date: datetime = field(default_factory=utcnow)
    notes: str = ""
    created_at: datetime = field(default_factory=utcnow)
