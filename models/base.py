from pydantic import BaseModel, ConfigDict, ValidationError
from typing import ClassVar, Dict, List, Optional, Tuple
from bson import ObjectId
from utils import get_current_datetime


class FieldError(BaseModel):
    field: str
    message: str


class DocumentValidationError(Exception):
    """Raised when a document fails validation; blocks the whole write."""

    def __init__(self, errors: List[FieldError]):
        self.errors = errors
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in errors))

    def to_dict(self) -> dict:
        return {
            "message": "Validation failed",
            "errors": [error.model_dump() for error in self.errors]
        }


def collect_field_errors(exc: ValidationError, messages: Dict[Tuple[str, str], str]) -> List[FieldError]:
    """Flatten pydantic errors into (dotted field path, readable message) pairs.

    ``messages`` is keyed by (path without list indices, pydantic error type),
    e.g. ("medicines.quantity", "greater_than_equal").
    """
    errors = []
    for error in exc.errors():
        loc = error["loc"]
        field = ".".join(str(part) for part in loc)
        key = ".".join(str(part) for part in loc if not isinstance(part, int))
        error_type = error["type"]

        # null is treated the same as an absent value
        if (error_type.endswith("_type") or error_type == "enum") and error.get("input") is None:
            error_type = "missing"

        message = messages.get((key, error_type))
        if message is None:
            if error_type == "missing":
                message = f"{key} is required"
            elif error_type == "value_error":
                message = error["msg"].removeprefix("Value error, ")
            else:
                message = error["msg"]
        errors.append(FieldError(field=field, message=message))
    return errors


class DocumentModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True)

    error_messages: ClassVar[Dict[Tuple[str, str], str]] = {}

    @classmethod
    def parse_document(cls, data: dict, context: Optional[dict] = None):
        try:
            return cls.model_validate(data, context=context)
        except ValidationError as exc:
            raise DocumentValidationError(collect_field_errors(exc, cls.error_messages)) from exc


def stamp_timestamps(data: dict, existing: Optional[dict] = None) -> dict:
    """Set created_at once and refresh updated_at on every save."""
    now = get_current_datetime()
    data["created_at"] = existing.get("created_at", now) if existing else now
    data["updated_at"] = now
    return data


def serialize_document(document: dict) -> dict:
    """Expose ``_id`` as ``id`` and stringify any ObjectId values."""
    data = dict(document)
    if "_id" in data:
        data["id"] = data.pop("_id")
    for key, value in data.items():
        if isinstance(value, ObjectId):
            data[key] = str(value)
    return data
