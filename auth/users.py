from fastapi import APIRouter, Depends, HTTPException
from database import get_database
from dependencies import hash_password, verify_password, create_user_token
from models.users import UserCreate, StaffCreate, LoginRequest, UserRole
from security import get_current_user, get_current_admin
from utils import generate_user_id, get_current_datetime
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

async def create_user(db, user: UserCreate, role: str) -> dict:
    existing_user = await db["users"].find_one({"email": user.email})
    if existing_user:
        raise HTTPException(status_code=400, detail="User with this email already exists")

    user_data = {
        "_id": generate_user_id(),
        "name": user.name.strip(),
        "email": user.email,
        "password": hash_password(user.password),
        "role": role,
        "is_active": True,
        "created_at": get_current_datetime()
    }
    await db["users"].insert_one(user_data)
    logger.info(f"Registered {role} {user.email}")
    return user_data

@router.post("/register", status_code=201)
async def register_user(user: UserCreate, db=Depends(get_database)):
    user_data = await create_user(db, user, UserRole.CUSTOMER.value)
    return {
        "message": "Registration successful",
        "user_id": user_data["_id"]
    }

@router.post("/staff", status_code=201)
async def register_staff(
    user: StaffCreate,
    admin: dict = Depends(get_current_admin),
    db=Depends(get_database)
):
    user_data = await create_user(db, user, user.role.value)
    return {
        "message": "Staff account created",
        "user_id": user_data["_id"],
        "role": user_data["role"]
    }

@router.post("/login")
async def login(credentials: LoginRequest, db=Depends(get_database)):
    user = await db["users"].find_one({"email": credentials.email})
    if not user or not verify_password(credentials.password, user.get("password")):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.get("is_active", True):
        raise HTTPException(status_code=403, detail="User account is disabled")

    await db["users"].update_one(
        {"_id": user["_id"]},
        {"$set": {"last_login": get_current_datetime()}}
    )

    return {
        "message": "Login successful",
        "access_token": create_user_token(user),
        "token_type": "bearer",
        "user": {
            "id": user["_id"],
            "name": user.get("name", ""),
            "email": user["email"],
            "role": user.get("role", "customer")
        }
    }

@router.get("/me")
async def read_current_user(user: dict = Depends(get_current_user)):
    return user
