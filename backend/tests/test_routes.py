"""
HTTP API tests: status codes, error bodies, and end-to-end request flows.
"""

from decimal import Decimal

from greenscore.extensions import db
from greenscore.models import Material


def test_health(client, db_session):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.get_json()["checks"]["database"]["status"] == "healthy"


def test_create_and_list_material(client, db_session, seller, project_a):
    response = client.post("/api/materials", json={
        "seller_id": seller.id,
        "material": "Wash Basin",
        "brand": "Hindware",
        "quantity": 12,
        "price_today": 1850,
        "project_id": project_a.id,
    })
    assert response.status_code == 201
    material = response.get_json()["material"]
    assert material["listing_id"].startswith("GS-")
    assert material["project_name"] == "Tower A"

    listed = client.get("/api/materials?search=basin").get_json()["materials"]
    assert [m["id"] for m in listed] == [material["id"]]

    mine = client.get(f"/api/sellers/{seller.id}/materials").get_json()["materials"]
    assert len(mine) == 1


def test_create_material_validation_error(client, db_session, seller):
    response = client.post("/api/materials", json={"seller_id": seller.id, "material": "Pipe"})
    assert response.status_code == 400
    body = response.get_json()
    assert body["success"] is False
    assert "quantity" in body["error"]


def test_request_and_bulk_approve_flow(client, db_session, seller, buyer, buyer_b, make_material):
    material = make_material(quantity=7, price_today=Decimal("100.00"))

    first = client.post("/api/order-requests", json={
        "buyer_id": buyer.id, "material_id": material.id, "quantity": 5,
        "company_name": "Beta Contractors", "contact_person": "Bea Buyer",
    })
    second = client.post("/api/order-requests", json={
        "buyer_id": buyer_b.id, "material_id": material.id, "quantity": 5,
    })
    assert first.status_code == 201
    assert second.status_code == 201

    pending = client.get(f"/api/sellers/{seller.id}/order-requests").get_json()["requests"]
    assert [r["id"] for r in pending] == [first.get_json()["request_id"], second.get_json()["request_id"]]

    response = client.put("/api/order-requests/bulk-approve", json={
        "request_ids": [r["id"] for r in pending],
    })
    assert response.status_code == 200
    body = response.get_json()
    assert body["total_processed"] == 2
    assert body["total_approved"] == 2
    assert sorted(r["fulfilled_qty"] for r in body["results"]) == [2, 5]

    db.session.expire_all()
    assert db.session.get(Material, material.id).quantity == 0

    orders = client.get(f"/api/sellers/{seller.id}/orders").get_json()["orders"]
    assert sorted(o["total_amount"] for o in orders) == [200.0, 500.0]


def test_bulk_approve_requires_ids(client, db_session):
    response = client.put("/api/order-requests/bulk-approve", json={"request_ids": []})
    assert response.status_code == 400


def test_approve_unknown_request(client, db_session):
    response = client.put("/api/order-requests/missing/approve", json={})
    assert response.status_code == 404


def test_request_over_stock_conflict(client, db_session, buyer, make_material):
    material = make_material(quantity=2)
    response = client.post("/api/order-requests", json={
        "buyer_id": buyer.id, "material_id": material.id, "quantity": 3,
    })
    assert response.status_code == 409
    assert response.get_json()["details"] == {"available": 2, "requested": 3}


def test_decline_and_order_status(client, db_session, make_material, make_request):
    material = make_material(quantity=10)
    declined = make_request(material, 1, minutes_ago=2)
    approved = make_request(material, 2, minutes_ago=1)

    response = client.put(f"/api/order-requests/{declined.id}/decline", json={"seller_notes": "No"})
    assert response.status_code == 200
    assert response.get_json()["request"]["status"] == "declined"

    response = client.put(f"/api/order-requests/{approved.id}/approve", json={"seller_notes": "Yes"})
    order_id = response.get_json()["results"][0]["order_id"]

    response = client.put(f"/api/orders/{order_id}/status", json={"status": "shipped"})
    assert response.status_code == 200
    assert response.get_json()["order"]["status"] == "shipped"

    response = client.put(f"/api/orders/{order_id}/status", json={"status": "lost"})
    assert response.status_code == 400


def test_edit_lock_endpoints(client, db_session, seller, other_seller, make_material):
    material = make_material()

    response = client.post(f"/api/materials/{material.id}/lock", json={"user_id": seller.id})
    assert response.status_code == 200
    assert response.get_json()["locked"] is True

    response = client.post(f"/api/materials/{material.id}/lock", json={"user_id": other_seller.id})
    assert response.status_code == 409

    status = client.get(f"/api/materials/{material.id}/lock-status").get_json()
    assert status["edited_by"] == seller.id

    response = client.put(f"/api/materials/{material.id}/edit", json={"user_id": other_seller.id, "quantity": 1})
    assert response.status_code == 409

    response = client.put(f"/api/materials/{material.id}/edit", json={"user_id": seller.id, "quantity": 4})
    assert response.status_code == 200
    assert response.get_json()["material"]["quantity"] == 4
    assert response.get_json()["material"]["is_being_edited"] is False

    response = client.post(f"/api/materials/{material.id}/unlock", json={"user_id": seller.id})
    assert response.status_code == 200
    assert response.get_json()["released"] is False


def test_lock_missing_user_id(client, db_session, make_material):
    material = make_material()
    response = client.post(f"/api/materials/{material.id}/lock", json={})
    assert response.status_code == 400


def test_internal_transfer_endpoints(client, db_session, seller, project_a, project_b, make_material):
    material = make_material(quantity=10)

    response = client.post("/api/internal-transfers", json={
        "user_id": seller.id,
        "material_id": material.id,
        "from_project_id": project_a.id,
        "to_project_id": project_b.id,
        "quantity_transferred": 4,
    })
    assert response.status_code == 201
    body = response.get_json()
    assert body["created_destination"] is True
    assert body["transfer"]["from_project_name"] == "Tower A"

    response = client.post("/api/internal-transfers", json={
        "user_id": seller.id,
        "material_id": material.id,
        "from_project_id": project_a.id,
        "to_project_id": project_a.id,
        "quantity_transferred": 1,
    })
    assert response.status_code == 400

    transfers = client.get(f"/api/users/{seller.id}/internal-transfers").get_json()["transfers"]
    assert len(transfers) == 1

    activity = client.get(f"/api/sellers/{seller.id}/activity?kind=transfer").get_json()["activity"]
    assert activity[0]["kind"] == "TRANSFER"

    response = client.get(f"/api/sellers/{seller.id}/activity?kind=refund")
    assert response.status_code == 400


def test_notification_endpoints(client, db_session, seller, buyer, make_material):
    material = make_material(quantity=10)
    client.post("/api/order-requests", json={
        "buyer_id": buyer.id, "material_id": material.id, "quantity": 1,
    })

    notifications = client.get(f"/api/users/{seller.id}/notifications?unread_only=true").get_json()["notifications"]
    assert len(notifications) == 1

    response = client.put(f"/api/notifications/{notifications[0]['id']}/read")
    assert response.status_code == 200

    remaining = client.get(f"/api/users/{seller.id}/notifications?unread_only=true").get_json()["notifications"]
    assert remaining == []

    response = client.put(f"/api/users/{seller.id}/notifications/read-all")
    assert response.get_json()["changes"] == 0


def test_project_endpoints(client, db_session, seller):
    response = client.post("/api/projects", json={
        "seller_id": seller.id,
        "name": "Tower C",
        "location": "Nagpur",
    })
    assert response.status_code == 201
    project = response.get_json()["project"]
    assert project["name"] == "Tower C"
    assert project["seller_id"] == seller.id

    response = client.post("/api/projects", json={"seller_id": seller.id, "location": "Nagpur"})
    assert response.status_code == 400
    assert response.get_json()["error"] == "name is required"

    response = client.post("/api/projects", json={"seller_id": "missing", "name": "Depot"})
    assert response.status_code == 404

    for url in (f"/api/sellers/{seller.id}/projects", f"/api/projects/{seller.id}"):
        response = client.get(url)
        assert response.status_code == 200
        assert [p["id"] for p in response.get_json()["projects"]] == [project["id"]]


def test_material_weight_must_be_numeric(client, db_session, seller, project_a):
    response = client.post("/api/materials", json={
        "seller_id": seller.id,
        "project_id": project_a.id,
        "material": "Steel Beam",
        "quantity": 2,
        "price_today": 500,
        "weight": "heavy",
    })
    assert response.status_code == 400
    assert response.get_json()["error"] == "weight must be a number"
