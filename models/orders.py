from enum import Enum
from pydantic import Field, ValidationInfo, field_validator
from typing import ClassVar, Dict, Iterable, List, Optional, Tuple
from datetime import datetime
from models.base import DocumentModel, serialize_document, stamp_timestamps
from utils import ensure_utc, get_current_datetime

class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSED = "processed"
    DELIVERED = "delivered"
    CANCELED = "canceled"

class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    ONLINE = "online"

class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"

class OrderItem(DocumentModel):
    medicine_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    price_at_order: float = Field(..., ge=0)

class OrderModel(DocumentModel):
    customer_id: str = Field(..., min_length=1)
    medicines: List[OrderItem] = Field(default_factory=list)
    total_amount: float = Field(..., ge=0)
    order_status: OrderStatus = Field(OrderStatus.PENDING, validate_default=True)
    order_date: datetime = Field(default_factory=get_current_datetime)
    delivery_date: Optional[datetime] = None
    shipping_address: str = Field(..., min_length=1, max_length=500)
    payment_method: PaymentMethod
    payment_status: PaymentStatus = Field(PaymentStatus.PENDING, validate_default=True)
    notes: Optional[str] = Field(None, max_length=500)

    error_messages: ClassVar[Dict[Tuple[str, str], str]] = {
        ("customer_id", "missing"): "Customer ID is required",
        ("customer_id", "string_too_short"): "Customer ID is required",
        ("medicines.medicine_id", "missing"): "Medicine ID is required",
        ("medicines.medicine_id", "string_too_short"): "Medicine ID is required",
        ("medicines.quantity", "missing"): "Quantity is required",
        ("medicines.quantity", "greater_than_equal"): "Quantity must be at least 1",
        ("medicines.quantity", "int_from_float"): "Quantity must be a positive integer",
        ("medicines.quantity", "int_parsing"): "Quantity must be a positive integer",
        ("medicines.price_at_order", "missing"): "Price at order is required",
        ("medicines.price_at_order", "greater_than_equal"): "Price cannot be negative",
        ("total_amount", "missing"): "Total amount is required",
        ("total_amount", "greater_than_equal"): "Total amount cannot be negative",
        ("order_status", "enum"): "Order status must be one of: pending, processed, delivered, canceled",
        ("order_date", "missing"): "Order date is required",
        ("shipping_address", "missing"): "Shipping address is required",
        ("shipping_address", "string_too_short"): "Shipping address is required",
        ("shipping_address", "string_too_long"): "Shipping address cannot exceed 500 characters",
        ("payment_method", "missing"): "Payment method is required",
        ("payment_method", "enum"): "Payment method must be one of: cash, card, online",
        ("payment_status", "enum"): "Payment status must be one of: pending, paid, failed, refunded",
        ("notes", "string_too_long"): "Notes cannot exceed 500 characters",
    }

    @field_validator("order_date")
    @classmethod
    def normalize_order_date(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator("delivery_date")
    @classmethod
    def delivery_after_order(cls, value: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
        if value is None:
            return None
        value = ensure_utc(value)
        # order_date is absent here when it failed its own validation
        order_date = info.data.get("order_date")
        if order_date is not None and value < order_date:
            raise ValueError("Delivery date must be after order date")
        return value


def validate_order(data: dict) -> OrderModel:
    """Validate a full order document, raising DocumentValidationError."""
    return OrderModel.parse_document(data)


def calculate_total_amount(items: Iterable[OrderItem]) -> float:
    return sum((item.quantity * item.price_at_order for item in items), 0)


def apply_total_amount(order: OrderModel) -> OrderModel:
    """Overwrite total_amount from the line items.

    An empty line-item list leaves the supplied total_amount as is.
    """
    if order.medicines:
        order.total_amount = calculate_total_amount(order.medicines)
    return order


def prepare_order_for_save(order: OrderModel, existing: Optional[dict] = None) -> dict:
    """Run before every insert/replace of an order document."""
    apply_total_amount(order)
    return stamp_timestamps(order.model_dump(), existing)


def order_to_json(document: dict) -> dict:
    data = serialize_document(document)
    for key in ("order_date", "delivery_date", "created_at", "updated_at"):
        if data.get(key) is not None:
            data[key] = ensure_utc(data[key])
    return data
