# services/trucks.py
from __future__ import annotations

from typing import List, Optional

from flask import current_app

from db import db
from models.collector import Collector
from models.truck import Truck, TruckStatus
from services.common import get_or_404, parse_datetime, parse_enum, required_text, transaction
from services.errors import Conflict
from realtime import emit_truck_updated

DUPLICATE_PLATE = "Truck with this plate number already exists"
TRUCK_TAKEN = "Truck already assigned"
_CONFLICTS = {"plate_number": DUPLICATE_PLATE, "truck_id": TRUCK_TAKEN}


def _plate_taken(plate: str, *, exclude_id: Optional[int] = None) -> bool:
    q = Truck.query.filter(Truck.plate_number == plate)
    if exclude_id is not None:
        q = q.filter(Truck.id != exclude_id)
    return db.session.query(q.exists()).scalar()


def list_trucks(status: Optional[str] = None) -> List[Truck]:
    q = Truck.query
    status = (status or "").strip()
    if status and status != "all":
        q = q.filter(Truck.status == parse_enum(TruckStatus, status, "status"))
    return q.order_by(Truck.created_at.desc(), Truck.id.desc()).all()


def get_truck(truck_id) -> Truck:
    return get_or_404(Truck, truck_id, "Truck", "id")


def create_truck(plate_number, capacity, status=None) -> Truck:
    # unique index backs this up; a racing insert surfaces as the same Conflict
    with transaction("trucks", conflicts=_CONFLICTS):
        plate = required_text(plate_number, "plateNumber")
        if _plate_taken(plate):
            raise Conflict(DUPLICATE_PLATE)
        truck = Truck(
            plate_number=plate,
            capacity=required_text(capacity, "capacity"),
            status=parse_enum(TruckStatus, status, "status") if status else TruckStatus.ACTIVE,
            current_location="",
        )
        db.session.add(truck)

    current_app.logger.info("[trucks] created id=%s plate=%s", truck.id, truck.plate_number)
    emit_truck_updated(truck.to_dict())
    return truck


def _propagate_location(truck: Truck, location: str) -> bool:
    """
    Mirror the truck's position onto its driver in a separate write, after
    the truck update has committed. A failure here is logged, not raised.
    """
    collector = truck.assigned_to
    if collector is None:
        return False
    cid = collector.id
    try:
        collector.current_location = location
        db.session.commit()
        return True
    except Exception:
        db.session.rollback()
        current_app.logger.exception(
            "[trucks] failed to update collector currentLocation truck=%s collector=%s",
            truck.id, cid,
        )
        return False


def update_truck(truck_id, fields: dict) -> Truck:
    """
    Partial update. Recognised keys: plate_number, capacity, status,
    last_maintenance, current_location, assigned_to (None/"" detaches).
    """
    with transaction("trucks", conflicts=_CONFLICTS):
        truck = get_or_404(Truck, truck_id, "Truck", "id")

        if "plate_number" in fields:
            plate = required_text(fields["plate_number"], "plateNumber")
            if plate != truck.plate_number and _plate_taken(plate, exclude_id=truck.id):
                raise Conflict(DUPLICATE_PLATE)
            truck.plate_number = plate
        if "capacity" in fields:
            truck.capacity = required_text(fields["capacity"], "capacity")
        if "status" in fields:
            truck.status = parse_enum(TruckStatus, fields["status"], "status")
        if "last_maintenance" in fields:
            truck.last_maintenance = parse_datetime(fields["last_maintenance"], "lastMaintenance")

        if "assigned_to" in fields:
            old = truck.assigned_to
            if fields["assigned_to"] in (None, ""):
                truck.assigned_to = None
            else:
                new = get_or_404(Collector, fields["assigned_to"], "Collector", "assignedTo")
                if new.truck is not None and new.truck is not truck:
                    raise Conflict("Collector is already assigned to another truck")
                if new is not old:
                    if old is not None:
                        old.truck = None
                        # free the unique truck_id slot before the new driver takes it
                        db.session.flush()
                    new.truck = truck

        if "current_location" in fields:
            truck.current_location = str(fields["current_location"] or "").strip()

    if "current_location" in fields:
        _propagate_location(truck, truck.current_location)

    current_app.logger.info(
        "[trucks] updated id=%s fields=%s assigned_to=%s",
        truck.id, sorted(fields), truck.assigned_to_id,
    )
    emit_truck_updated(truck.to_dict())
    return truck


def delete_truck(truck_id) -> int:
    with transaction("trucks"):
        truck = get_or_404(Truck, truck_id, "Truck", "id")
        tid = truck.id
        holder = truck.assigned_to
        if holder is not None:
            holder.truck = None
        db.session.delete(truck)

    current_app.logger.info("[trucks] deleted id=%s collector_released=%s", tid, holder and holder.id)
    return tid
