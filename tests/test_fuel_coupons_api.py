import re
from decimal import Decimal

from findules.models import AuditLog

COUPON = {
    "staff_name": "Emeka Obi",
    "department": "Logistics",
    "unit": "Dispatch",
    "vehicle_type": "Pickup",
    "plate_number": "LAG-123-XY",
    "purpose": "Deliveries to Ikeja",
    "fuel_type": "DIESEL",
    "quantity_litres": "40",
    "estimated_amount": "32000",
}


def create(client, headers, **overrides):
    return client.post("/api/fuel-coupons/", headers=headers, json={**COUPON, **overrides})


def test_create_assigns_daily_document_code(client, staff_headers, branch):
    first = create(client, staff_headers)
    second = create(client, staff_headers, fuel_type="PETROL")

    assert first.status_code == 201
    assert re.fullmatch(r"FC-\d{8}-0001", first.json()["document_code"])
    assert second.json()["document_code"].endswith("-0002")
    assert first.json()["creator_name"] == "Staff"
    assert Decimal(first.json()["quantity_litres"]) == Decimal("40")


def test_create_validation(client, staff_headers, branch):
    missing = create(client, staff_headers, department="", quantity_litres=None)
    assert missing.status_code == 400
    assert missing.json()["fields"] == ["department", "quantity_litres"]

    zero = create(client, staff_headers, quantity_litres="0")
    assert zero.status_code == 400
    assert zero.json()["detail"] == "Quantity must be greater than 0"

    assert create(client, staff_headers, fuel_type="KEROSENE").status_code == 400


def test_list_filters(client, staff_headers, branch):
    create(client, staff_headers)
    create(client, staff_headers, fuel_type="PETROL", plate_number="ABJ-555-ZZ", staff_name="Ife")

    petrol = client.get("/api/fuel-coupons/", headers=staff_headers, params={"fuel_type": "PETROL"}).json()
    assert [c["staff_name"] for c in petrol] == ["Ife"]
    plate = client.get("/api/fuel-coupons/", headers=staff_headers, params={"plate_number": "lag-123"}).json()
    assert [c["staff_name"] for c in plate] == ["Emeka Obi"]


def test_pdf_download(client, staff_headers, branch):
    code = create(client, staff_headers).json()["document_code"]

    resp = client.get(f"/api/fuel-coupons/{code}/pdf", headers=staff_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert code in resp.headers["content-disposition"]
    assert resp.content.startswith(b"%PDF")


def test_only_managers_delete(client, db, staff_headers, manager_headers, branch):
    code = create(client, staff_headers).json()["document_code"]

    assert client.delete(f"/api/fuel-coupons/{code}", headers=staff_headers).status_code == 403
    assert client.delete(f"/api/fuel-coupons/{code}", headers=manager_headers).status_code == 200
    assert client.get(f"/api/fuel-coupons/{code}", headers=manager_headers).status_code == 404

    db.expire_all()
    assert db.query(AuditLog).filter(AuditLog.action == "DELETE_FUEL_COUPON").count() == 1
