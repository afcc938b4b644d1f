"""
Test fixtures: a fresh app + in-memory SQLite per test.
"""
import pytest

from app import create_app
from config import TestingConfig
from db import db
from models.bin import Bin
from models.collector import Collector
from models.truck import Truck
from services import bins as bin_svc
from services import collectors as collector_svc
from services import trucks as truck_svc

T0 = "2026-10-17T08:00:00Z"


class _Config(TestingConfig):
    REALTIME_ENABLED = False


@pytest.fixture
def app():
    app = create_app(_Config)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_bin(app):
    def _make(location="Main St", city="Colombo", reported_at=T0, **kw):
        return bin_svc.create_bin(location, city, reported_at, **kw)
    return _make


@pytest.fixture
def make_collector(app):
    counter = iter(range(1, 10_000))

    def _make(name=None, city="Colombo", status=None, truck_id=None):
        return collector_svc.create_collector(
            name or f"Collector {next(counter)}", city, status=status, truck_id=truck_id
        )
    return _make


@pytest.fixture
def make_truck(app):
    counter = iter(range(1, 10_000))

    def _make(plate=None, capacity="5 tons", status=None):
        return truck_svc.create_truck(plate or f"WP-{1000 + next(counter)}", capacity, status=status)
    return _make


def assert_consistent():
    """Worklist and truck-link invariants over the whole store."""
    for c in Collector.query.all():
        expected = {
            b.id for b in Bin.query.filter(Bin.assigned_to_id == c.id).all() if b.status.is_active
        }
        assert {b.id for b in c.assigned_bins} == expected
        if c.truck is not None:
            assert c.truck.assigned_to is c
    for t in Truck.query.all():
        if t.assigned_to is not None:
            assert t.assigned_to.truck is t
    for b in Bin.query.all():
        if b.worklist_collector is not None:
            assert b.worklist_collector.id == b.assigned_to_id
