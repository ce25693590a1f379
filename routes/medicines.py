# routes/medicines.py
from fastapi import APIRouter, HTTPException, Depends, Query, Body
from typing import Optional
from database import get_database
from models.medicine import (
    MedicineCategory, validate_medicine, prepare_medicine_for_save, medicine_to_json
)
from security import get_current_user, get_current_staff
from utils import generate_medicine_id, get_current_datetime
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

LOW_STOCK_QUERY = {"$expr": {"$lte": ["$quantity_in_stock", "$low_stock_threshold"]}}

async def paginate(collection, query: dict, skip: int, limit: int, sort=("created_at", -1)):
    total_count = await collection.count_documents(query)
    documents = await collection.find(query) \
        .sort(*sort) \
        .skip(skip) \
        .limit(limit) \
        .to_list(length=limit)

    return {
        "total": total_count,
        "medicines": [medicine_to_json(doc) for doc in documents],
        "page": skip // limit + 1,
        "pages": (total_count + limit - 1) // limit
    }

@router.post("/", status_code=201)
async def create_medicine(
    payload: dict = Body(...),
    staff: dict = Depends(get_current_staff),
    db=Depends(get_database)
):
    medicine = validate_medicine(payload)

    medicine_id = generate_medicine_id()
    medicine_data = prepare_medicine_for_save(medicine)
    medicine_data["_id"] = medicine_id

    await db["medicines"].insert_one(medicine_data)
    logger.info(f"Medicine {medicine_id} created by {staff['user_id']}")

    return {
        "message": "Medicine added successfully",
        "medicine_id": medicine_id,
        "medicine": medicine_to_json(medicine_data)
    }

@router.get("/")
async def list_medicines(
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[MedicineCategory] = None,
    search: Optional[str] = None,
    active: Optional[bool] = None,
    user: dict = Depends(get_current_user),
    db=Depends(get_database)
):
    query = {}
    if category:
        query["category"] = category.value
    if active is not None:
        query["is_active"] = active
    if search:
        query["$text"] = {"$search": search}

    return await paginate(db["medicines"], query, skip, limit)

@router.get("/low-stock")
async def list_low_stock_medicines(
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    user: dict = Depends(get_current_user),
    db=Depends(get_database)
):
    return await paginate(db["medicines"], dict(LOW_STOCK_QUERY), skip, limit, sort=("quantity_in_stock", 1))

@router.get("/expired")
async def list_expired_medicines(
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    user: dict = Depends(get_current_user),
    db=Depends(get_database)
):
    query = {"expiry_date": {"$lt": get_current_datetime()}}
    return await paginate(db["medicines"], query, skip, limit, sort=("expiry_date", 1))

@router.get("/{medicine_id}")
async def get_medicine(
    medicine_id: str,
    user: dict = Depends(get_current_user),
    db=Depends(get_database)
):
    medicine = await db["medicines"].find_one({"_id": medicine_id})
    if not medicine:
        raise HTTPException(status_code=404, detail="Medicine not found")

    return medicine_to_json(medicine)

@router.put("/{medicine_id}")
async def update_medicine(
    medicine_id: str,
    payload: dict = Body(...),
    staff: dict = Depends(get_current_staff),
    db=Depends(get_database)
):
    existing_medicine = await db["medicines"].find_one({"_id": medicine_id})
    if not existing_medicine:
        raise HTTPException(status_code=404, detail="Medicine not found")

    medicine = validate_medicine(payload)
    medicine_data = prepare_medicine_for_save(medicine, existing_medicine)
    medicine_data["_id"] = medicine_id

    await db["medicines"].replace_one({"_id": medicine_id}, medicine_data)
    logger.info(f"Medicine {medicine_id} updated by {staff['user_id']}")

    return {
        "message": "Medicine updated successfully",
        "medicine": medicine_to_json(medicine_data)
    }

@router.delete("/{medicine_id}")
async def delete_medicine(
    medicine_id: str,
    staff: dict = Depends(get_current_staff),
    db=Depends(get_database)
):
    result = await db["medicines"].delete_one({"_id": medicine_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Medicine not found")

    logger.info(f"Medicine {medicine_id} deleted by {staff['user_id']}")
    return {"message": "Medicine deleted successfully"}
