"""
HTTP surface: envelopes, status codes, camelCase payloads.
"""
from conftest import T0


def _create_bin(client, **over):
    body = {"location": "Main St", "city": "Colombo", "reportedAt": T0, **over}
    return client.post("/api/bins", json=body)


def _create_collector(client, **over):
    body = {"name": "Nimal", "city": "Colombo", **over}
    return client.post("/api/collectors", json=body)


def test_health(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.get_json() == {"status": "ok"}


def test_create_and_get_bin(client):
    r = _create_bin(client)
    assert r.status_code == 201
    body = r.get_json()
    assert body["success"] is True
    assert body["message"] == "Bin created successfully"
    data = body["data"]
    assert data["status"] == "Pending"
    assert data["assignedTo"] is None
    assert data["reportedAt"] == "2026-10-17T08:00:00"

    r = client.get(f"/api/bins/{data['id']}")
    assert r.status_code == 200
    assert r.get_json()["data"]["location"] == "Main St"


def test_create_bin_missing_fields_is_400(client):
    r = client.post("/api/bins", json={"location": "Main St"})
    assert r.status_code == 400
    body = r.get_json()
    assert body == {
        "success": False,
        "error": "InvalidInput",
        "message": "Location, city, and reportedAt are required",
    }


def test_unknown_bin_is_404(client):
    r = client.get("/api/bins/999")
    assert r.status_code == 404
    assert r.get_json()["error"] == "NotFound"


def test_non_numeric_id_is_404(client):
    r = client.get("/api/bins/abc")
    assert r.status_code == 404
    assert r.get_json()["error"] == "NotFound"
    assert client.delete("/api/trucks/x1").status_code == 404


def test_unknown_route_is_404(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.get_json()["success"] is False


def test_assign_flow_over_http(client):
    bin_id = _create_bin(client).get_json()["data"]["id"]
    x = _create_collector(client).get_json()["data"]["id"]
    w = _create_collector(client, name="Kamala").get_json()["data"]["id"]

    r = client.put(f"/api/bins/{bin_id}/assign-collector", json={"collectorId": x})
    assert r.status_code == 200
    data = r.get_json()["data"]
    assert data["status"] == "Assigned"
    assert data["assignedTo"] == {"id": x, "name": "Nimal"}
    assert data["assignedAt"] is not None

    worklist = client.get(f"/api/collectors/{x}").get_json()["data"]["assignedBins"]
    assert [b["id"] for b in worklist] == [bin_id]

    r = client.put(f"/api/bins/{bin_id}/status", json={"status": "Collected", "collectorId": w})
    assert r.status_code == 403
    assert r.get_json()["message"] == "You are not assigned to this bin"

    r = client.put(f"/api/bins/{bin_id}/status", json={"status": "Skipped", "collectorId": str(x)})
    assert r.status_code == 200
    assert r.get_json()["data"]["skippedAt"] is not None
    assert client.get(f"/api/collectors/{x}").get_json()["data"]["assignedBins"] == []

    r = client.get(f"/api/bins/collector/{x}")
    assert r.get_json()["count"] == 1

    r = client.put(f"/api/bins/{bin_id}/reassign", json={"collectorId": w, "status": "Assigned"})
    assert r.status_code == 200
    assert r.get_json()["data"]["assignedTo"]["id"] == w
    assert r.get_json()["data"]["skippedAt"] is None

    r = client.put(f"/api/bins/{bin_id}/reset-status", json={})
    assert r.status_code == 200
    data = r.get_json()["data"]
    assert data["status"] == "Pending"
    assert data["assignedTo"] is None

    r = client.delete(f"/api/bins/{bin_id}")
    assert r.status_code == 200
    assert r.get_json() == {"success": True, "message": "Bin deleted successfully"}


def test_reassign_without_collector_is_400(client):
    bin_id = _create_bin(client).get_json()["data"]["id"]
    r = client.put(f"/api/bins/{bin_id}/reassign", json={"status": "Assigned"})
    assert r.status_code == 400


def test_list_bins_with_filters(client):
    _create_bin(client, city="Colombo")
    _create_bin(client, city="Kandy")

    body = client.get("/api/bins?city=Kandy&status=all").get_json()
    assert body["count"] == 1
    assert body["data"][0]["city"] == "Kandy"

    assert client.get("/api/bins?status=Bogus").status_code == 400


def test_truck_and_collector_over_http(client):
    r = client.post("/api/trucks", json={"plateNumber": "WP-1", "capacity": "5 tons"})
    assert r.status_code == 201
    truck_id = r.get_json()["data"]["id"]

    r = client.post("/api/trucks", json={"plateNumber": "WP-1", "capacity": "3 tons"})
    assert r.status_code == 409
    assert r.get_json()["message"] == "Truck with this plate number already exists"

    r = _create_collector(client, truck=truck_id)
    assert r.status_code == 201
    collector = r.get_json()["data"]
    assert collector["truck"] == {"id": truck_id, "plateNumber": "WP-1", "capacity": "5 tons"}

    r = _create_collector(client, name="Kamala", truck=truck_id)
    assert r.status_code == 409

    r = client.put(f"/api/trucks/{truck_id}", json={"currentLocation": "Fort"})
    assert r.status_code == 200
    truck = r.get_json()["data"]
    assert truck["assignedTo"] == {"id": collector["id"], "name": "Nimal", "city": "Colombo"}
    assert client.get(f"/api/collectors/{collector['id']}").get_json()["data"]["currentLocation"] == "Fort"

    r = client.put(f"/api/collectors/{collector['id']}", json={"truck": None, "status": "idle"})
    assert r.status_code == 200
    assert r.get_json()["data"]["truck"] is None
    assert client.get(f"/api/trucks/{truck_id}").get_json()["data"]["assignedTo"] is None

    r = client.put(f"/api/collectors/{collector['id']}/location", json={"location": "Pettah"})
    assert r.get_json()["data"]["currentLocation"] == "Pettah"

    r = client.get("/api/trucks?status=active")
    assert r.get_json()["count"] == 1

    assert client.delete(f"/api/trucks/{truck_id}").status_code == 200
    assert client.get(f"/api/trucks/{truck_id}").status_code == 404


def test_delete_collector_over_http(client):
    bin_id = _create_bin(client).get_json()["data"]["id"]
    x = _create_collector(client).get_json()["data"]["id"]
    client.put(f"/api/bins/{bin_id}/assign-collector", json={"collectorId": x})

    r = client.delete(f"/api/collectors/{x}")
    assert r.status_code == 200
    assert r.get_json()["message"] == "Collector deleted"

    data = client.get(f"/api/bins/{bin_id}").get_json()["data"]
    assert (data["status"], data["assignedTo"]) == ("Pending", None)
    assert client.get("/api/collectors").get_json()["count"] == 0


def test_method_not_allowed_uses_json_envelope(client):
    r = client.patch("/api/bins")
    assert r.status_code == 405
    assert r.get_json()["success"] is False


def test_config_for_picks_environment_class(monkeypatch):
    from config import Config, DevelopmentConfig, ProductionConfig, TestingConfig, config_for

    assert config_for("production") is ProductionConfig
    assert config_for(" Development ") is DevelopmentConfig
    assert config_for("nope") is Config
    monkeypatch.setenv("APP_ENV", "testing")
    assert config_for() is TestingConfig
