# models/medicine.py
from enum import Enum
from datetime import datetime
from typing import ClassVar, Dict, Optional, Tuple
from pydantic import Field, ValidationInfo, field_validator
from models.base import DocumentModel, serialize_document, stamp_timestamps
from utils import ensure_utc, get_current_datetime, is_future_date


class MedicineCategory(str, Enum):
    TABLET = "Tablet"
    CAPSULE = "Capsule"
    SYRUP = "Syrup"
    INJECTION = "Injection"
    CREAM = "Cream"
    DROPS = "Drops"
    INHALER = "Inhaler"
    OTHER = "Other"


CATEGORY_MESSAGE = "Category must be one of: " + ", ".join(c.value for c in MedicineCategory)


class MedicineModel(DocumentModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=1000)
    manufacturer: str = Field(..., min_length=1, max_length=200)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    quantity_in_stock: int = Field(0, ge=0)
    expiry_date: datetime
    category: MedicineCategory
    is_active: bool = True
    low_stock_threshold: int = Field(10, ge=0)

    error_messages: ClassVar[Dict[Tuple[str, str], str]] = {
        ("name", "missing"): "Medicine name is required",
        ("name", "string_too_short"): "Medicine name is required",
        ("name", "string_too_long"): "Medicine name cannot exceed 200 characters",
        ("description", "missing"): "Description is required",
        ("description", "string_too_short"): "Description is required",
        ("description", "string_too_long"): "Description cannot exceed 1000 characters",
        ("manufacturer", "missing"): "Manufacturer is required",
        ("manufacturer", "string_too_short"): "Manufacturer is required",
        ("manufacturer", "string_too_long"): "Manufacturer name cannot exceed 200 characters",
        ("price", "missing"): "Price is required",
        ("price", "greater_than_equal"): "Price cannot be negative",
        ("price", "finite_number"): "Price must be a valid positive number",
        ("price", "float_parsing"): "Price must be a valid positive number",
        ("quantity_in_stock", "missing"): "Quantity in stock is required",
        ("quantity_in_stock", "greater_than_equal"): "Quantity cannot be negative",
        ("quantity_in_stock", "int_from_float"): "Quantity must be a non-negative integer",
        ("quantity_in_stock", "int_parsing"): "Quantity must be a non-negative integer",
        ("expiry_date", "missing"): "Expiry date is required",
        ("category", "missing"): "Category is required",
        ("category", "enum"): CATEGORY_MESSAGE,
        ("low_stock_threshold", "greater_than_equal"): "Low stock threshold cannot be negative",
    }

    @field_validator("category", mode="before")
    @classmethod
    def strip_category(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("expiry_date")
    @classmethod
    def expiry_in_future(cls, value: datetime, info: ValidationInfo) -> datetime:
        value = ensure_utc(value)
        now = (info.context or {}).get("now")
        if not is_future_date(value, now):
            raise ValueError("Expiry date must be in the future")
        return value


def validate_medicine(data: dict, now: Optional[datetime] = None) -> MedicineModel:
    """Validate a full medicine document, raising DocumentValidationError.

    ``now`` pins the clock the expiry check compares against.
    """
    return MedicineModel.parse_document(data, context={"now": now})


def prepare_medicine_for_save(medicine: MedicineModel, existing: Optional[dict] = None) -> dict:
    return stamp_timestamps(medicine.model_dump(), existing)


def is_expired(medicine: dict, now: Optional[datetime] = None) -> bool:
    now = ensure_utc(now) if now is not None else get_current_datetime()
    return ensure_utc(medicine["expiry_date"]) < now


def is_low_stock(medicine: dict) -> bool:
    return medicine.get("quantity_in_stock", 0) <= medicine.get("low_stock_threshold", 10)


def medicine_to_json(document: dict, now: Optional[datetime] = None) -> dict:
    """Stored fields plus the is_expired / is_low_stock flags."""
    data = serialize_document(document)
    for key in ("expiry_date", "created_at", "updated_at"):
        if data.get(key) is not None:
            data[key] = ensure_utc(data[key])
    data["is_expired"] = is_expired(data, now)
    data["is_low_stock"] = is_low_stock(data)
    return data
