from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING, TEXT, IndexModel
from dotenv import load_dotenv
import logging
import os

load_dotenv()
logger = logging.getLogger(__name__)

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "pharmacy_db")

client = AsyncIOMotorClient(MONGO_URI)
db = client[DATABASE_NAME]

INDEXES = {
    "medicines": [
        IndexModel([("name", TEXT), ("manufacturer", TEXT), ("category", TEXT)]),
        IndexModel([("category", ASCENDING)]),
        IndexModel([("expiry_date", ASCENDING)]),
    ],
    "orders": [
        IndexModel([("customer_id", ASCENDING)]),
        IndexModel([("order_date", DESCENDING)]),
        IndexModel([("order_status", ASCENDING)]),
        IndexModel([("payment_status", ASCENDING)]),
    ],
    "users": [
        IndexModel([("email", ASCENDING)], unique=True),
    ],
}

def get_database():
    return db


async def connect_to_mongo():
    """Ensures MongoDB is connected."""
    await db.command('ping')
    logger.info(f"Connected to MongoDB database '{DATABASE_NAME}'")


async def create_indexes(database=None):
    """Create every index in INDEXES; existing ones are left alone."""
    database = database if database is not None else db
    for collection_name, indexes in INDEXES.items():
        names = await database[collection_name].create_indexes(indexes)
        logger.info(f"Ensured indexes on {collection_name}: {', '.join(names)}")


def close_mongo_connection():
    client.close()
    logger.info("MongoDB connection closed")
