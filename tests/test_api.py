"""Tests API / API tests."""

import pytest

from fleetfuel.api.deps import get_current_user
from fleetfuel.main import app
from fleetfuel.models.user import User
from fleetfuel.utils.seed import seed_roles


def fueling(day, odometer, plate="ABC1D23", liters=20, amount=100, station="Shell Centro"):
    return {
        "date": day,
        "vehicle_name": "Truck 1",
        "plate": plate,
        "driver_name": "Joao Silva",
        "driver_registration": "M-001",
        "liters": liters,
        "amount": amount,
        "odometer": odometer,
        "station": station,
    }


@pytest.mark.asyncio
async def test_root(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "running"
    assert "X-Request-ID" in resp.headers


@pytest.mark.asyncio
async def test_tank_movement_flow(client):
    resp = await client.post("/api/tanks/", json={"name": "Main diesel", "capacity_liters": 1000, "initial_level": 200})
    assert resp.status_code == 201
    tank = resp.json()
    assert tank["fill_percent"] == 20.0

    resp = await client.post(
        f"/api/tanks/{tank['id']}/movements",
        json={"direction": "INBOUND", "quantity_liters": 500, "value": 2900},
    )
    assert resp.status_code == 201
    movement = resp.json()
    assert movement["level_after"] == 700
    assert movement["responsible_name"] == "Ada Admin"

    resp = await client.post(
        f"/api/tanks/{tank['id']}/movements", json={"direction": "OUTBOUND", "quantity_liters": 900}
    )
    assert resp.status_code == 409
    body = resp.json()
    assert body["error_code"] == "ERR_STOCK"
    assert body["details"]["level"] == 700
    assert body["details"]["requested"] == 900

    resp = await client.get(f"/api/tanks/{tank['id']}")
    assert resp.json()["current_level"] == 700

    resp = await client.get(f"/api/tanks/{tank['id']}/movements")
    assert resp.json()["total"] == 1


@pytest.mark.asyncio
async def test_tank_capacity_and_errors(client):
    resp = await client.post("/api/tanks/", json={"name": "Small", "capacity_liters": 100, "initial_level": 80})
    tank_id = resp.json()["id"]

    resp = await client.post(f"/api/tanks/{tank_id}/movements", json={"direction": "INBOUND", "quantity_liters": 30})
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "ERR_CAPACITY"

    resp = await client.put(f"/api/tanks/{tank_id}", json={"capacity_liters": 50})
    assert resp.status_code == 422
    assert resp.json()["error_code"] == "ERR_VALIDATION"

    resp = await client.put(f"/api/tanks/{tank_id}", json={"capacity_liters": 200, "current_level": 5})
    assert resp.status_code == 200
    assert resp.json()["current_level"] == 80

    resp = await client.post("/api/tanks/999/movements", json={"direction": "INBOUND", "quantity_liters": 1})
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "ERR_NOT_FOUND"

    resp = await client.post(f"/api/tanks/{tank_id}/movements", json={"direction": "INBOUND", "quantity_liters": 0})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_fueling_month_view(client):
    for payload in (
        fueling("2024-07-01", 1000),
        fueling("2024-07-03", 1200, liters=10, amount=60),
        fueling("2024-07-15", 1500, station="Ipiranga Sul"),
        fueling("2024-08-01", 1700),
    ):
        resp = await client.post("/api/fueling/", json=payload)
        assert resp.status_code == 201

    resp = await client.get("/api/fueling/", params={"year": 2024, "month": 7, "page_size": 2})
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 3
    assert len(data["items"]) == 2
    assert data["items"][0]["date"] == "2024-07-15"
    assert [w["week"] for w in data["weekly_totals"]] == [27, 29]
    assert data["period_liters"] == 50
    assert data["period_spend"] == 260

    resp = await client.get("/api/fueling/stations")
    assert resp.json() == ["Ipiranga Sul", "Shell Centro"]


@pytest.mark.asyncio
async def test_fueling_edit_and_delete(client):
    first = (await client.post("/api/fueling/", json=fueling("2024-07-01", 1000))).json()
    second = (await client.post("/api/fueling/", json=fueling("2024-07-08", 1300))).json()
    assert second["km_driven"] == 300
    assert second["km_per_liter"] == 15.0

    resp = await client.put(f"/api/fueling/{second['id']}", json={"odometer": 1400})
    assert resp.json()["km_driven"] == 400

    resp = await client.delete(f"/api/fueling/{first['id']}")
    assert resp.status_code == 204
    resp = await client.get(f"/api/fueling/{second['id']}")
    assert resp.json()["km_driven"] is None

    resp = await client.post("/api/fueling/", json={**fueling("2024-07-09", 1500), "liters": 0})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_vehicle_report(client):
    await client.post("/api/vehicles/", json={
        "name": "Truck 1", "year": 2020, "plate": "abc1d23", "fuel_type": "DIESEL",
    })
    await client.post("/api/fueling/", json=fueling("2024-07-01", 1000))
    await client.post("/api/fueling/", json=fueling("2024-07-15", 1400))

    resp = await client.get("/api/reports/vehicles/ABC1D23", params={"year": 2024, "month": 7})
    assert resp.status_code == 200
    report = resp.json()
    assert report["found"] is True
    assert report["vehicle"]["fuel_type"] == "DIESEL"
    assert report["initial_odometer"] == 1000
    assert report["kpis"]["total_spend"] == 200
    assert report["kpis"]["average_efficiency"] == 20.0
    assert len(report["lines"]) == 2

    resp = await client.get("/api/reports/vehicles/ABC1D23", params={"year": 2023})
    assert resp.status_code == 200
    assert resp.json()["found"] is False
    assert resp.json()["reason"] == "No data for the selected period"

    resp = await client.get("/api/reports/vehicles/NOPE000", params={"year": 2024})
    assert resp.json()["found"] is False
    assert resp.json()["reason"] == "Vehicle not found"

    resp = await client.get("/api/reports/vehicles/ABC1D23", params={"year": 2024, "month": 13})
    assert resp.status_code == 422

    resp = await client.get("/api/reports/vehicles/ABC1D23/export", params={"year": 2024, "format": "csv"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "km_per_liter" in resp.content.decode("utf-8-sig").splitlines()[0]

    resp = await client.get("/api/reports/vehicles/ABC1D23/export", params={"year": 2024})
    assert resp.status_code == 200
    assert resp.content[:2] == b"PK"


@pytest.mark.asyncio
async def test_dashboard(client):
    await client.post("/api/vehicles/", json={"name": "Truck 1", "year": 2020, "plate": "ABC1D23", "fuel_type": "DIESEL"})
    await client.post("/api/fueling/", json=fueling("2024-01-10", 1000, amount=300))
    await client.post("/api/fueling/", json=fueling("2024-02-10", 1200, plate="GAS0A00", amount=100))

    resp = await client.get("/api/dashboard/", params={"year": 2024})
    data = resp.json()
    assert data["total_spend"] == 400
    assert len(data["monthly"]) == 12
    assert data["spend_by_vehicle"][0]["key"] == "ABC1D23"

    resp = await client.get("/api/dashboard/", params={"year": 2024, "fuel_type": "DIESEL"})
    assert resp.json()["total_spend"] == 300

    resp = await client.get("/api/dashboard/", params={"year": 2025})
    assert resp.json()["average_cost_per_liter"] is None

    resp = await client.get("/api/dashboard/options")
    assert resp.json()["plates"] == ["ABC1D23", "GAS0A00"]


@pytest.mark.asyncio
async def test_vehicle_registry_rules(client):
    resp = await client.post("/api/vehicles/", json={"name": "Van", "year": 2020, "plate": "SHORT", "fuel_type": "DIESEL"})
    assert resp.status_code == 422
    resp = await client.post("/api/vehicles/", json={"name": "Van", "year": 1900, "plate": "VAN0001", "fuel_type": "DIESEL"})
    assert resp.status_code == 422
    resp = await client.post("/api/vehicles/", json={
        "name": "Excavator", "year": 2019, "plate": "maq0001", "fuel_type": "DIESEL", "kind": "MACHINERY",
    })
    assert resp.status_code == 201
    assert resp.json()["plate"] == "MAQ0001"
    resp = await client.post("/api/vehicles/", json={"name": "Other", "year": 2019, "plate": "MAQ0001", "fuel_type": "DIESEL"})
    assert resp.status_code == 409

    resp = await client.get("/api/vehicles/", params={"kind": "MACHINERY", "search": "excav"})
    assert resp.json()["total"] == 1


@pytest.mark.asyncio
async def test_driver_pin_is_never_returned(client):
    resp = await client.post("/api/drivers/", json={"name": "Joao Silva", "registration": "M-001", "pin": "1234"})
    assert resp.status_code == 201
    assert "pin" not in resp.json() and "hashed_pin" not in resp.json()
    resp = await client.post("/api/drivers/", json={"name": "Other", "registration": "M-001", "pin": "9999"})
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_maintenance_done_sets_completion(client):
    resp = await client.post("/api/maintenance/", json={
        "plate": "ABC1D23", "vehicle_kind": "VEHICLE", "vehicle_name": "Truck 1",
        "problem_description": "Brake pads worn", "registered_date": "2024-07-01",
        "parts_needed": ["brake pads"],
    })
    assert resp.status_code == 201
    ticket = resp.json()
    assert ticket["completed_date"] is None

    resp = await client.put(f"/api/maintenance/{ticket['id']}", json={"status": "DONE", "actual_cost": 320})
    assert resp.json()["completed_date"] is not None


@pytest.mark.asyncio
async def test_me_and_login(client):
    resp = await client.get("/api/auth/me")
    assert resp.json()["permissions"] == ["*:*"]

    resp = await client.post("/api/auth/login", json={"username": "admin", "password": "secret"})
    assert resp.status_code == 200
    assert resp.json()["token_type"] == "bearer"

    resp = await client.post("/api/auth/login", json={"username": "admin", "password": "wrong"})
    assert resp.status_code == 401

    resp = await client.get("/api/audit/", params={"action": "LOGIN_FAILED"})
    assert resp.json()["total"] == 1


@pytest.mark.asyncio
async def test_permission_required(client):
    async def plain_user():
        return User(id=99, username="viewer", email="v@fleetfuel.test", is_active=True, is_superadmin=False, roles=[])

    app.dependency_overrides[get_current_user] = plain_user
    resp = await client.get("/api/tanks/")
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_user_lifecycle(client, session_factory, admin):
    async with session_factory() as session:
        await seed_roles(session)

    payload = {"username": " maria ", "email": "maria@fleetfuel.test", "full_name": "Maria Souza", "password": "pass1234"}
    resp = await client.post("/api/users/", json=payload)
    assert resp.status_code == 201
    user = resp.json()
    assert user["username"] == "maria"
    assert user["display_name"] == "Maria Souza"

    resp = await client.post("/api/users/", json={**payload, "email": "other@fleetfuel.test"})
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "ERR_CONFLICT"

    resp = await client.put(f"/api/users/{user['id']}/role", json={"role": "coordinator"})
    assert [r["name"] for r in resp.json()["roles"]] == ["coordinator"]

    resp = await client.delete(f"/api/users/{admin.id}")
    assert resp.status_code == 422

    resp = await client.delete(f"/api/users/{user['id']}")
    assert resp.status_code == 204
    resp = await client.get("/api/audit/", params={"action": "USER_DELETED"})
    assert resp.json()["items"][0]["details"]["username"] == "maria"
