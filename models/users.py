from enum import Enum
from pydantic import BaseModel, EmailStr, Field

class UserRole(str, Enum):
    ADMIN = "admin"
    PHARMACIST = "pharmacist"
    CUSTOMER = "customer"

STAFF_ROLES = (UserRole.ADMIN.value, UserRole.PHARMACIST.value)

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)

class StaffCreate(UserCreate):
    role: UserRole = UserRole.PHARMACIST

class LoginRequest(BaseModel):
    email: EmailStr
    password: str
