# security.py
from fastapi import HTTPException, Security, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from database import get_database
from dependencies import SECRET_KEY, ALGORITHM
from models.users import STAFF_ROLES
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()

def decode_token(token: str) -> dict:
    """Decode and verify a token"""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    db = Depends(get_database)
):
    """Resolve the bearer token to the stored, active user"""
    payload = decode_token(credentials.credentials)
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: missing user ID")

    user = await db["users"].find_one({"_id": user_id})
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    if not user.get("is_active", True):
        raise HTTPException(status_code=403, detail="User account is disabled")

    return {
        "user_id": user["_id"],
        "name": user.get("name"),
        "email": user.get("email"),
        "role": user.get("role", "customer")
    }

def get_current_staff(user: dict = Depends(get_current_user)):
    """Admins and pharmacists only"""
    if user["role"] not in STAFF_ROLES:
        logger.warning(f"User {user['user_id']} with role {user['role']} denied staff access")
        raise HTTPException(status_code=403, detail="Not authorized as staff")
    return user

def get_current_admin(user: dict = Depends(get_current_user)):
    if user["role"] != "admin":
        raise HTTPException(status_code=403, detail="Not authorized as Admin")
    return user
