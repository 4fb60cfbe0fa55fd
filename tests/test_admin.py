"""Super admin endpoints integration tests."""
import csv
import io

import pytest

from medibot.models.audit import AdminActivityLog
from medibot.models.user import User
from medibot.services.admin_service import chart_label

from conftest import auth, make_pharmacy, make_user_with_session, unique_email, PASSWORD


@pytest.fixture
def admin(db_session):
    token, user = make_user_with_session(db_session, role="super_admin", name="Root")
    return auth(token), user


async def test_pharmacy_lifecycle(async_client, db_session, admin):
    headers, admin_user = admin

    r = await async_client.post(
        "/admin/pharmacies",
        headers=headers,
        json={"name": "Gikondo Pharmacy", "email": "gikondo@example.com", "latitude": -1.97, "longitude": 30.07},
    )
    assert r.status_code == 201, r.text
    pharmacy = r.json()["data"]
    assert pharmacy["status"] == "pending"

    r = await async_client.put(f"/admin/pharmacies/{pharmacy['id']}", headers=headers, json={"phone": "+250733000000"})
    assert r.json()["data"]["phone"] == "+250733000000"

    r = await async_client.post(f"/admin/pharmacies/{pharmacy['id']}/reject", headers=headers, json={"notes": "no licence"})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "rejected"

    # only pending pharmacies can be decided
    r = await async_client.post(f"/admin/pharmacies/{pharmacy['id']}/approve", headers=headers)
    assert r.status_code == 400

    r = await async_client.delete(f"/admin/pharmacies/{pharmacy['id']}", headers=headers)
    assert r.status_code == 200

    r = await async_client.get("/admin/pharmacies", headers=headers)
    assert pharmacy["id"] not in [p["id"] for p in r.json()]

    activities = [
        log.activity
        for log in db_session.query(AdminActivityLog).filter(AdminActivityLog.admin_id == str(admin_user.id)).all()
    ]
    pid = pharmacy["id"]
    for action in ("create", "update", "reject", "delete"):
        assert f"pharmacy:{pid}:{action}" in activities

    r = await async_client.get("/admin/activity", headers=headers)
    assert r.json()[0]["activity"] == f"pharmacy:{pid}:delete"


async def test_staff_management(async_client, db_session, admin):
    headers, _ = admin
    pharmacy = make_pharmacy(db_session, name="Staffed Pharmacy")

    r = await async_client.post(
        f"/admin/pharmacies/{pharmacy.id}/staff", headers=headers, json={"name": "Claudine", "role": "pharmacist"}
    )
    assert r.status_code == 201, r.text
    staff = r.json()["data"]
    assert staff["status"] == "active"

    r = await async_client.put(
        f"/admin/pharmacies/{pharmacy.id}/staff/{staff['id']}", headers=headers, json={"status": "inactive"}
    )
    assert r.json()["data"]["status"] == "inactive"

    r = await async_client.put(
        f"/admin/pharmacies/{pharmacy.id}/staff/{staff['id']}", headers=headers, json={"status": "fired"}
    )
    assert r.status_code == 422

    r = await async_client.delete(f"/admin/pharmacies/{pharmacy.id}/staff/{staff['id']}", headers=headers)
    assert r.status_code == 200
    r = await async_client.get(f"/admin/pharmacies/{pharmacy.id}/staff", headers=headers)
    assert r.json() == []


async def test_set_stock(async_client, db_session, admin):
    headers, _ = admin
    pharmacy = make_pharmacy(db_session, name="Stock Pharmacy", medicines=[("Insulin", 9000.0, 2)])
    medicine_id = pharmacy.medicines[0].id

    r = await async_client.put(f"/admin/medicines/{medicine_id}/stock", headers=headers, json={"stock": 30})
    assert r.status_code == 200
    assert r.json()["data"]["stock"] == 30

    r = await async_client.put(f"/admin/medicines/{medicine_id}/stock", headers=headers, json={"stock": -3})
    assert r.status_code == 422


async def test_user_management(async_client, db_session, admin):
    headers, _ = admin
    pharmacy = make_pharmacy(db_session, name="Assigned Pharmacy")
    email = unique_email("managed")

    r = await async_client.post(
        "/admin/users",
        headers=headers,
        json={"email": email, "password": PASSWORD, "role": "pharmacy_admin", "name": "Patrick", "pharmacy_id": pharmacy.id},
    )
    assert r.status_code == 201, r.text
    created = r.json()["data"]
    assert created["pharmacy_name"] == "Assigned Pharmacy"
    assert created["name"] == "Patrick"

    # leaving pharmacy_admin drops the pharmacy assignment but keeps the name
    r = await async_client.put(f"/admin/users/{created['user_id']}", headers=headers, json={"role": "patient"})
    assert r.status_code == 200, r.text
    updated = r.json()["data"]
    assert updated["role"] == "patient"
    assert updated["pharmacy_id"] is None
    assert updated["name"] == "Patrick"

    db_session.expire_all()
    user = db_session.query(User).filter(User.id == created["user_id"]).one()
    assert user.pharmacy_admin_profile is None
    assert user.patient_profile is not None

    r = await async_client.get("/admin/users", headers=headers)
    assert email in [u["email"] for u in r.json()]

    r = await async_client.delete(f"/admin/users/{created['user_id']}", headers=headers)
    assert r.status_code == 200
    assert "users" in r.json()["invalidates"]


async def test_admin_cannot_delete_self(async_client, admin):
    headers, admin_user = admin
    r = await async_client.delete(f"/admin/users/{admin_user.id}", headers=headers)
    assert r.status_code == 400


async def test_bulk_operations(async_client, db_session, admin):
    headers, admin_user = admin
    users = [make_user_with_session(db_session)[1] for _ in range(3)]
    ids = [u.id for u in users]

    r = await async_client.post(
        "/admin/users/bulk-role", headers=headers, json={"user_ids": ids, "role": "healthcare_provider"}
    )
    assert r.json()["data"]["updated"] == 3

    db_session.expire_all()
    assert {u.role for u in db_session.query(User).filter(User.id.in_(ids))} == {"healthcare_provider"}

    r = await async_client.post("/admin/users/bulk-delete", headers=headers, json={"user_ids": ids + [admin_user.id]})
    assert r.json()["data"]["deleted"] == 3
    assert db_session.query(User).filter(User.id == admin_user.id).count() == 1


async def test_reset_password_and_export(async_client, db_session, admin):
    headers, _ = admin
    _, patient = make_user_with_session(db_session, name="Exported")

    r = await async_client.post(f"/admin/users/{patient.id}/reset-password", headers=headers)
    assert r.status_code == 200, r.text

    r = await async_client.get("/admin/users/export", headers=headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    rows = list(csv.DictReader(io.StringIO(r.text)))
    row = next(row for row in rows if row["email"] == patient.email)
    assert row["role"] == "patient"
    assert row["name"] == "Exported"


async def test_analytics(async_client, db_session, admin):
    headers, _ = admin
    make_pharmacy(db_session, name="Analytics Pharmacy", status="pending", medicines=[("A very long medicine name", 10.0, 999)])

    r = await async_client.get("/admin/analytics", headers=headers)
    data = r.json()["data"]
    assert set(data["pharmacy_status"]) >= {"approved", "pending", "rejected"}
    assert data["pharmacy_status"]["pending"] >= 1
    assert data["users_by_role"]["super_admin"] >= 1
    assert len(data["top_medicines"]) <= 10
    assert {"name": "A very long med...", "stock": 999} in data["top_medicines"]


def test_chart_label():
    assert chart_label("Short") == "Short"
    assert chart_label("x" * 15) == "x" * 15
    assert chart_label("x" * 16) == "x" * 15 + "..."


async def test_non_admin_forbidden(async_client, db_session):
    token, _ = make_user_with_session(db_session, role="pharmacy_admin")
    r = await async_client.get("/admin/users", headers=auth(token))
    assert r.status_code == 403
