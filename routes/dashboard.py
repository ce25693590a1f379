from fastapi import APIRouter, Depends
from database import get_database
from routes.medicines import LOW_STOCK_QUERY
from security import get_current_staff
from utils import get_current_datetime

router = APIRouter()

@router.get("/stats")
async def get_dashboard_stats(
    staff: dict = Depends(get_current_staff),
    db=Depends(get_database)
):
    """Inventory and order figures for the dashboard view"""
    medicines = db["medicines"]
    orders = db["orders"]

    medicine_stats = {
        "total": await medicines.count_documents({}),
        "active": await medicines.count_documents({"is_active": True}),
        "low_stock": await medicines.count_documents(dict(LOW_STOCK_QUERY)),
        "expired": await medicines.count_documents({"expiry_date": {"$lt": get_current_datetime()}})
    }

    inventory_pipeline = [
        {
            "$group": {
                "_id": "$category",
                "total_medicines": {"$sum": 1},
                "total_units": {"$sum": "$quantity_in_stock"},
                "total_value": {"$sum": {"$multiply": ["$price", "$quantity_in_stock"]}}
            }
        },
        {"$sort": {"_id": 1}}
    ]
    inventory_by_category = await medicines.aggregate(inventory_pipeline).to_list(None)

    status_pipeline = [
        {
            "$group": {
                "_id": "$order_status",
                "count": {"$sum": 1}
            }
        }
    ]
    status_counts = await orders.aggregate(status_pipeline).to_list(None)

    revenue_pipeline = [
        {"$match": {"payment_status": "paid"}},
        {"$group": {"_id": None, "revenue": {"$sum": "$total_amount"}}}
    ]
    revenue = await orders.aggregate(revenue_pipeline).to_list(length=1)

    return {
        "medicines": medicine_stats,
        "inventory_by_category": [
            {
                "category": row["_id"],
                "total_medicines": row["total_medicines"],
                "total_units": row["total_units"],
                "total_value": row["total_value"]
            }
            for row in inventory_by_category
        ],
        "orders": {
            "total": await orders.count_documents({}),
            "by_status": {row["_id"]: row["count"] for row in status_counts},
            "revenue": revenue[0]["revenue"] if revenue else 0
        }
    }
