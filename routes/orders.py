from fastapi import APIRouter, HTTPException, Depends, Query, Body
from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from database import get_database
from models.orders import (
    OrderStatus, PaymentStatus, validate_order, prepare_order_for_save, order_to_json
)
from models.users import STAFF_ROLES
from security import get_current_user, get_current_staff
from utils import generate_order_id
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

SYSTEM_FIELDS = ("_id", "created_at", "updated_at")
STAFF_ONLY_FIELDS = ("order_status", "payment_status")

class OrderStatusUpdate(BaseModel):
    order_status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    delivery_date: Optional[datetime] = None

def is_staff(user: dict) -> bool:
    return user["role"] in STAFF_ROLES

async def find_order_for_user(db, order_id: str, user: dict) -> dict:
    order = await db["orders"].find_one({"_id": order_id})
    # customers never learn that other customers' orders exist
    if not order or (not is_staff(user) and order.get("customer_id") != user["user_id"]):
        raise HTTPException(status_code=404, detail="Order not found")
    return order

async def save_order(db, order_id: str, data: dict, existing: Optional[dict] = None) -> dict:
    """Validate, recompute the total and write the full document."""
    order = validate_order(data)
    order_data = prepare_order_for_save(order, existing)
    order_data["_id"] = order_id

    if existing:
        await db["orders"].replace_one({"_id": order_id}, order_data)
    else:
        await db["orders"].insert_one(order_data)
    return order_data

@router.post("/", status_code=201)
async def create_order(
    payload: dict = Body(...),
    user: dict = Depends(get_current_user),
    db=Depends(get_database)
):
    if not is_staff(user):
        payload.setdefault("customer_id", user["user_id"])
        if payload["customer_id"] != user["user_id"]:
            raise HTTPException(status_code=403, detail="Customers can only place their own orders")
        # new customer orders always start pending
        for field in STAFF_ONLY_FIELDS:
            payload.pop(field, None)

    order_id = generate_order_id()
    order_data = await save_order(db, order_id, payload)
    logger.info(f"Order {order_id} created for customer {order_data['customer_id']}")

    return {
        "message": "Order created successfully",
        "order_id": order_id,
        "order": order_to_json(order_data)
    }

@router.get("/")
async def list_orders(
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    order_status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    customer_id: Optional[str] = None,
    user: dict = Depends(get_current_user),
    db=Depends(get_database)
):
    """Orders newest first; customers only see their own"""
    query = {}
    if order_status:
        query["order_status"] = order_status.value
    if payment_status:
        query["payment_status"] = payment_status.value
    if not is_staff(user):
        query["customer_id"] = user["user_id"]
    elif customer_id:
        query["customer_id"] = customer_id

    total_count = await db["orders"].count_documents(query)
    orders = await db["orders"].find(query) \
        .sort("order_date", -1) \
        .skip(skip) \
        .limit(limit) \
        .to_list(length=limit)

    return {
        "total": total_count,
        "orders": [order_to_json(order) for order in orders],
        "page": skip // limit + 1,
        "pages": (total_count + limit - 1) // limit
    }

@router.get("/{order_id}")
async def get_order(
    order_id: str,
    user: dict = Depends(get_current_user),
    db=Depends(get_database)
):
    order = await find_order_for_user(db, order_id, user)
    return order_to_json(order)

@router.put("/{order_id}")
async def update_order(
    order_id: str,
    payload: dict = Body(...),
    staff: dict = Depends(get_current_staff),
    db=Depends(get_database)
):
    existing_order = await find_order_for_user(db, order_id, staff)
    if payload.get("order_date") is None:
        payload["order_date"] = existing_order.get("order_date")
    order_data = await save_order(db, order_id, payload, existing_order)
    logger.info(f"Order {order_id} updated by {staff['user_id']}")

    return {
        "message": "Order updated successfully",
        "order": order_to_json(order_data)
    }

@router.patch("/{order_id}/status")
async def update_order_status(
    order_id: str,
    update: OrderStatusUpdate,
    staff: dict = Depends(get_current_staff),
    db=Depends(get_database)
):
    existing_order = await find_order_for_user(db, order_id, staff)

    data = {k: v for k, v in existing_order.items() if k not in SYSTEM_FIELDS}
    data.update(update.model_dump(exclude_none=True, mode="json"))

    order_data = await save_order(db, order_id, data, existing_order)
    logger.info(
        f"Order {order_id} status set to {order_data['order_status']}/"
        f"{order_data['payment_status']} by {staff['user_id']}"
    )

    return {
        "message": "Order status updated successfully",
        "order": order_to_json(order_data)
    }

@router.delete("/{order_id}")
async def delete_order(
    order_id: str,
    staff: dict = Depends(get_current_staff),
    db=Depends(get_database)
):
    result = await db["orders"].delete_one({"_id": order_id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Order not found")

    logger.info(f"Order {order_id} deleted by {staff['user_id']}")
    return {"message": "Order deleted successfully"}
