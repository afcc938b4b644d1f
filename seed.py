#!/usr/bin/env python3
# seed.py
from datetime import timedelta

from db import db
from models.bin import Bin, BinStatus
from models.collector import Collector, CollectorStatus
from models.truck import Truck, TruckStatus
from services.common import utcnow

TRUCKS = [
    ("WP-CAB-1001", "5 tons"),
    ("WP-CAB-1002", "3 tons"),
    ("CP-KDY-2001", "5 tons"),
]

COLLECTORS = [
    # name, city, truck plate
    ("Nimal Perera", "Colombo", "WP-CAB-1001"),
    ("Kamala Silva", "Colombo", "WP-CAB-1002"),
    ("Ruwan Bandara", "Kandy", "CP-KDY-2001"),
    ("Sunil Fernando", "Kandy", None),
]

BINS = [
    ("Main St & 2nd Lane", "Colombo"),
    ("Galle Face Green north gate", "Colombo"),
    ("Pettah bus stand", "Colombo"),
    ("Temple Rd market", "Kandy"),
    ("Lake Round, boat jetty", "Kandy"),
]


def seed_demo() -> dict:
    """
    Creates demo trucks, collectors and bins. Safe to run repeatedly: rows
    are matched by plate number, collector name and bin location.
    """
    created = {"trucks": 0, "collectors": 0, "bins": 0}

    trucks = {}
    for plate, capacity in TRUCKS:
        t = Truck.query.filter_by(plate_number=plate).first()
        if not t:
            t = Truck(plate_number=plate, capacity=capacity, status=TruckStatus.ACTIVE, current_location="")
            db.session.add(t)
            created["trucks"] += 1
        trucks[plate] = t

    for name, city, plate in COLLECTORS:
        c = Collector.query.filter_by(name=name).first()
        if not c:
            c = Collector(name=name, city=city, status=CollectorStatus.ACTIVE, current_location="")
            db.session.add(c)
            created["collectors"] += 1
        if plate and c.truck is None and trucks[plate].assigned_to is None:
            c.truck = trucks[plate]

    now = utcnow()
    for i, (location, city) in enumerate(BINS):
        if not Bin.query.filter_by(location=location).first():
            db.session.add(Bin(
                location=location,
                city=city,
                status=BinStatus.PENDING,
                reported_at=now - timedelta(hours=i + 1),
                notes="",
            ))
            created["bins"] += 1

    db.session.commit()
    return created


if __name__ == "__main__":
    from app import create_app

    app = create_app()
    with app.app_context():
        print(f"✅ Seeded: {seed_demo()}")
