from conftest import future, past


def test_dashboard_stats(staff_client, fake_db):
    medicines = fake_db["medicines"]
    medicines.documents.extend([
        {"_id": "MED-1", "is_active": True, "quantity_in_stock": 2, "low_stock_threshold": 10, "expiry_date": future()},
        {"_id": "MED-2", "is_active": False, "quantity_in_stock": 40, "low_stock_threshold": 10, "expiry_date": past()},
    ])
    medicines.aggregate_results.append([
        {"_id": "Syrup", "total_medicines": 1, "total_units": 40, "total_value": 120.0},
        {"_id": "Tablet", "total_medicines": 1, "total_units": 2, "total_value": 9.0},
    ])
    orders = fake_db["orders"]
    orders.documents.append({"_id": "ORDER-1", "order_status": "pending"})
    orders.aggregate_results.extend([
        [{"_id": "pending", "count": 1}],
        [],
    ])

    response = staff_client.get("/api/dashboard/stats")

    assert response.status_code == 200
    body = response.json()
    assert body["medicines"] == {"total": 2, "active": 1, "low_stock": 1, "expired": 1}
    assert body["inventory_by_category"][0] == {
        "category": "Syrup", "total_medicines": 1, "total_units": 40, "total_value": 120.0
    }
    assert body["orders"] == {"total": 1, "by_status": {"pending": 1}, "revenue": 0}


def test_dashboard_stats_are_staff_only(customer_client):
    assert customer_client.get("/api/dashboard/stats").status_code == 403
