# utils.py
import random
import string
from datetime import datetime, timezone
from typing import Optional

def generate_random_id(prefix="", length=6):
    """Generate a random ID with optional prefix"""
    random_str = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
    return f"{prefix}-{random_str}" if prefix else random_str

def generate_medicine_id():
    return generate_random_id("MED")

def generate_order_id():
    return generate_random_id("ORDER")

def generate_user_id():
    return generate_random_id("USER")

def get_current_datetime():
    """Get current datetime in UTC"""
    return datetime.now(timezone.utc)

def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Mongo hands back naive datetimes; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def is_future_date(value: datetime, now: Optional[datetime] = None) -> bool:
    """True only when value is strictly after now."""
    now = ensure_utc(now) if now is not None else get_current_datetime()
    return ensure_utc(value) > now
