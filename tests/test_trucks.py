import pytest

from db import db
from models.collector import Collector
from models.truck import Truck, TruckStatus
from services import trucks as engine
from services.errors import Conflict, InvalidInput, NotFound

from conftest import assert_consistent


def test_create_truck(app):
    t = engine.create_truck(" WP-1234 ", "5 tons")
    assert t.plate_number == "WP-1234"
    assert t.status == TruckStatus.ACTIVE
    assert t.assigned_to is None
    assert t.last_maintenance is not None


def test_duplicate_plate_conflicts_and_keeps_original(make_truck):
    original = make_truck(plate="WP-1", capacity="5 tons")

    with pytest.raises(Conflict, match="plate number already exists"):
        engine.create_truck("WP-1", "9 tons", status="maintenance")

    assert Truck.query.count() == 1
    fresh = db.session.get(Truck, original.id)
    assert (fresh.capacity, fresh.status) == ("5 tons", TruckStatus.ACTIVE)


def test_create_truck_validation(app):
    with pytest.raises(InvalidInput):
        engine.create_truck("", "5 tons")
    with pytest.raises(InvalidInput):
        engine.create_truck("WP-9", None)
    with pytest.raises(InvalidInput):
        engine.create_truck("WP-9", "5 tons", status="flying")


def test_update_plate_uniqueness(make_truck):
    a = make_truck(plate="WP-1")
    b = make_truck(plate="WP-2")

    with pytest.raises(Conflict):
        engine.update_truck(b.id, {"plate_number": "WP-1"})
    # same plate on itself is fine
    assert engine.update_truck(a.id, {"plate_number": "WP-1", "capacity": "7 tons"}).capacity == "7 tons"
    assert engine.update_truck(b.id, {"plate_number": "WP-3"}).plate_number == "WP-3"


def test_update_status_and_maintenance(make_truck):
    t = make_truck()
    out = engine.update_truck(t.id, {"status": "maintenance", "last_maintenance": "2026-09-01T00:00:00"})
    assert out.status == TruckStatus.MAINTENANCE
    assert out.last_maintenance.isoformat() == "2026-09-01T00:00:00"


def test_assign_truck_to_collector(make_truck, make_collector):
    t = make_truck()
    c = make_collector()

    out = engine.update_truck(t.id, {"assigned_to": c.id})

    assert out.assigned_to_id == c.id
    assert db.session.get(Collector, c.id).truck_id == t.id
    assert_consistent()


def test_reassign_truck_between_collectors(make_truck, make_collector):
    t = make_truck()
    a = make_collector(truck_id=t.id)
    b = make_collector()

    engine.update_truck(t.id, {"assigned_to": b.id})

    assert db.session.get(Collector, a.id).truck is None
    assert db.session.get(Collector, b.id).truck_id == t.id
    assert_consistent()


def test_reassign_truck_to_lower_id_collector(make_truck, make_collector):
    t = make_truck()
    low = make_collector()
    high = make_collector(truck_id=t.id)

    engine.update_truck(t.id, {"assigned_to": low.id})

    assert db.session.get(Collector, high.id).truck is None
    assert db.session.get(Collector, low.id).truck_id == t.id


def test_collector_on_other_truck_conflicts(make_truck, make_collector):
    t1, t2 = make_truck(), make_truck()
    c = make_collector(truck_id=t1.id)

    with pytest.raises(Conflict, match="already assigned to another truck"):
        engine.update_truck(t2.id, {"assigned_to": c.id})

    assert db.session.get(Truck, t2.id).assigned_to is None
    assert db.session.get(Collector, c.id).truck_id == t1.id


def test_unassign_truck(make_truck, make_collector):
    t = make_truck()
    c = make_collector(truck_id=t.id)
    engine.update_truck(t.id, {"assigned_to": ""})
    assert db.session.get(Collector, c.id).truck is None


def test_assign_unknown_collector(make_truck):
    t = make_truck()
    with pytest.raises(NotFound, match="Collector not found"):
        engine.update_truck(t.id, {"assigned_to": 404})


def test_location_propagates_to_driver(make_truck, make_collector):
    t = make_truck()
    c = make_collector(truck_id=t.id)

    out = engine.update_truck(t.id, {"current_location": "Kandy Rd"})

    assert out.current_location == "Kandy Rd"
    assert db.session.get(Collector, c.id).current_location == "Kandy Rd"


def test_location_propagation_failure_is_logged_not_raised(make_truck, make_collector, monkeypatch):
    t = make_truck()
    make_collector(truck_id=t.id)

    def boom(*_a, **_kw):
        raise RuntimeError("collector store down")

    monkeypatch.setattr(db.session(), "commit", boom)
    fresh = db.session.get(Truck, t.id)
    assert engine._propagate_location(fresh, "Somewhere") is False


def test_delete_truck_detaches_collector(make_truck, make_collector):
    t = make_truck()
    c = make_collector(truck_id=t.id)

    engine.delete_truck(t.id)

    assert db.session.get(Truck, t.id) is None
    assert db.session.get(Collector, c.id).truck is None
    with pytest.raises(NotFound):
        engine.delete_truck(t.id)


def test_list_trucks_by_status(make_truck):
    a = make_truck(status="maintenance")
    make_truck()
    assert [t.id for t in engine.list_trucks(status="maintenance")] == [a.id]
    assert len(engine.list_trucks(status="all")) == 2
