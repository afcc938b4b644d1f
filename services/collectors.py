# services/collectors.py
from __future__ import annotations

from typing import List

from flask import current_app

from db import db
from models.bin import BinStatus
from models.collector import Collector, CollectorStatus
from models.truck import Truck
from realtime import emit_truck_updated, emit_worklists_changed
from services.common import get_or_404, parse_enum, required_text, transaction
from services.errors import Conflict, InvalidInput

TRUCK_TAKEN = "Truck already assigned"
_CONFLICTS = {"truck_id": TRUCK_TAKEN}


def list_collectors() -> List[Collector]:
    return Collector.query.order_by(Collector.created_at.desc(), Collector.id.desc()).all()


def get_collector(collector_id) -> Collector:
    return get_or_404(Collector, collector_id, "Collector", "id")


def _free_truck(truck_id, *, for_collector: Collector | None = None) -> Truck:
    truck = get_or_404(Truck, truck_id, "Truck", "truck")
    holder = truck.assigned_to
    if holder is not None and holder is not for_collector:
        raise Conflict(TRUCK_TAKEN)
    return truck


def create_collector(name, city, status=None, truck_id=None) -> Collector:
    with transaction("collectors", conflicts=_CONFLICTS):
        collector = Collector(
            name=required_text(name, "name"),
            city=required_text(city, "city"),
            status=parse_enum(CollectorStatus, status, "status") if status else CollectorStatus.ACTIVE,
            current_location="",
        )
        if truck_id not in (None, ""):
            collector.truck = _free_truck(truck_id)
        db.session.add(collector)

    truck = collector.truck
    current_app.logger.info(
        "[collectors] created id=%s city=%s truck=%s", collector.id, collector.city, truck and truck.id
    )
    if truck is not None:
        emit_truck_updated(truck.to_dict())
    return collector


def update_collector(collector_id, fields: dict) -> Collector:
    """
    Partial update. Recognised keys: name, city, status, current_location,
    truck (None/"" detaches; an id attaches, detaching the previous truck).
    """
    touched_trucks = []

    with transaction("collectors", conflicts=_CONFLICTS):
        collector = get_or_404(Collector, collector_id, "Collector", "id")

        if "name" in fields:
            collector.name = required_text(fields["name"], "name")
        if "city" in fields:
            collector.city = required_text(fields["city"], "city")
        if "status" in fields:
            collector.status = parse_enum(CollectorStatus, fields["status"], "status")
        if "current_location" in fields:
            collector.current_location = str(fields["current_location"] or "").strip()

        if "truck" in fields:
            old = collector.truck
            if fields["truck"] in (None, ""):
                collector.truck = None
                new = None
            else:
                new = _free_truck(fields["truck"], for_collector=collector)
                if new is not old:
                    # re-pointing truck_id releases the old truck's inverse side
                    collector.truck = new
            touched_trucks = [t for t in (old, new) if t is not None]

    current_app.logger.info(
        "[collectors] updated id=%s fields=%s truck=%s",
        collector.id, sorted(fields), collector.truck and collector.truck.id,
    )
    for t in {t.id: t for t in touched_trucks}.values():
        emit_truck_updated(t.to_dict())
    return collector


def update_location(collector_id, location) -> Collector:
    if not location or not str(location).strip():
        raise InvalidInput("Location required")
    with transaction("collectors"):
        collector = get_or_404(Collector, collector_id, "Collector", "id")
        collector.current_location = str(location).strip()
    current_app.logger.debug("[collectors] location id=%s -> %s", collector.id, collector.current_location)
    return collector


def delete_collector(collector_id) -> int:
    """
    Detach the truck, release every active bin back to Pending/unassigned,
    then drop the collector. Historical (Collected/Skipped) bins lose their
    pointer too since the row it names is going away.
    """
    with transaction("collectors"):
        collector = get_or_404(Collector, collector_id, "Collector", "id")
        cid = collector.id
        truck = collector.truck
        collector.truck = None

        released = 0
        for bin_ in list(collector.assigned_bins):
            collector.assigned_bins.remove(bin_)
            bin_.assignee = None
            bin_.status = BinStatus.PENDING
            released += 1
        for bin_ in list(collector.bins):
            bin_.assignee = None

        db.session.delete(collector)

    current_app.logger.info(
        "[collectors] deleted id=%s truck_released=%s bins_released=%s",
        cid, truck and truck.id, released,
    )
    if truck is not None:
        emit_truck_updated(truck.to_dict())
    emit_worklists_changed([cid])
    return cid
