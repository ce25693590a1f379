from dependencies import hash_password
from utils import generate_user_id, get_current_datetime
import logging
import os
from dotenv import load_dotenv

load_dotenv()
logger = logging.getLogger(__name__)

ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

async def initialize_admin_user(db, email=ADMIN_EMAIL, password=ADMIN_PASSWORD):
    """Create the first admin account from the environment if none exists."""
    if not email or not password:
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set, skipping admin seeding")
        return None

    existing_admin = await db["users"].find_one({"role": "admin"})
    if existing_admin:
        return None

    admin_id = generate_user_id()
    await db["users"].insert_one({
        "_id": admin_id,
        "name": "Administrator",
        "email": email,
        "password": hash_password(password),
        "role": "admin",
        "is_active": True,
        "created_at": get_current_datetime()
    })
    logger.info(f"Admin user {email} created")
    return admin_id
