# services/bins.py
"""
Bin assignment engine.

State machine per bin:

    Pending -> Assigned -> Collected | Skipped
    Skipped -> Assigned            (reassign)
    any     -> Pending             (reset)

Public API:
  - create_bin(location, city, reported_at, notes="")
  - list_bins(city=None, status=None)
  - get_bin(bin_id)
  - get_bins_by_collector(collector_id)
  - assign_collector(bin_id, collector_id)
  - update_status(bin_id, status, collector_id)
  - reassign(bin_id, collector_id, status=None)
  - reset_status(bin_id, status=None)
  - delete_bin(bin_id)

Every mutating call commits once; the collector worklist (assigned_bins)
and the bin row change in the same transaction.
"""
from __future__ import annotations

from typing import List, Optional

from flask import current_app

from db import db
from models.bin import Bin, BinStatus
from models.collector import Collector, CollectorStatus
from realtime import emit_bin_deleted, emit_bin_updated, emit_worklists_changed
from services.common import (
    get_or_404,
    parse_datetime,
    parse_enum,
    parse_id,
    required_text,
    transaction,
    utcnow,
)
from services.errors import Conflict, Forbidden, InvalidInput


# ---------- worklist helpers ----------

def detach(bin_: Bin, *, keep: Optional[Collector] = None) -> Optional[int]:
    """
    Pull the bin off whichever worklist holds it, unless that is `keep`.
    Returns the id of the collector it was pulled from.
    """
    holder = bin_.worklist_collector
    if holder is None or holder is keep:
        return None
    holder.assigned_bins.remove(bin_)
    return holder.id


def attach(bin_: Bin, collector: Collector) -> bool:
    """Idempotent add to the collector's worklist."""
    if bin_ in collector.assigned_bins:
        return False
    collector.assigned_bins.append(bin_)
    return True


def _check_compatible(bin_: Bin, collector: Collector) -> None:
    if not current_app.config.get("ENFORCE_ASSIGNMENT_COMPATIBILITY"):
        return
    if (collector.city or "").strip().lower() != (bin_.city or "").strip().lower():
        raise Conflict("Collector works in a different city than the bin")
    if collector.status == CollectorStatus.OFFLINE:
        raise Conflict("Collector is offline")


def _publish(bin_: Bin, *worklists: Optional[int]) -> None:
    emit_bin_updated(bin_.to_dict())
    emit_worklists_changed(worklists)


# ---------- queries ----------

def list_bins(city: Optional[str] = None, status: Optional[str] = None) -> List[Bin]:
    q = Bin.query
    city = (city or "").strip()
    status = (status or "").strip()
    if city and city != "all":
        q = q.filter(Bin.city == city)
    if status and status != "all":
        q = q.filter(Bin.status == parse_enum(BinStatus, status, "status"))
    return q.order_by(Bin.created_at.desc(), Bin.id.desc()).all()


def get_bin(bin_id) -> Bin:
    return get_or_404(Bin, bin_id, "Bin")


def get_bins_by_collector(collector_id) -> List[Bin]:
    """All bins pointing at the collector, Collected/Skipped history included."""
    collector = get_or_404(Collector, collector_id, "Collector")
    return (
        Bin.query.filter(Bin.assigned_to_id == collector.id)
        .order_by(Bin.created_at.desc(), Bin.id.desc())
        .all()
    )


# ---------- commands ----------

def create_bin(location, city, reported_at, notes: str = "") -> Bin:
    if not location or not city or not reported_at:
        raise InvalidInput("Location, city, and reportedAt are required")

    with transaction("bins"):
        bin_ = Bin(
            location=required_text(location, "location"),
            city=required_text(city, "city"),
            reported_at=parse_datetime(reported_at, "reportedAt"),
            status=BinStatus.PENDING,
            notes=(notes or "").strip(),
        )
        db.session.add(bin_)

    current_app.logger.info("[bins] created id=%s city=%s", bin_.id, bin_.city)
    emit_bin_updated(bin_.to_dict())
    return bin_


def assign_collector(bin_id, collector_id) -> Bin:
    """
    Last writer wins: an already-assigned bin is moved off its previous
    collector's worklist before being attached to the new one.
    """
    with transaction("bins"):
        collector = get_or_404(Collector, collector_id, "Collector")
        bin_ = get_or_404(Bin, bin_id, "Bin")
        _check_compatible(bin_, collector)

        prev = detach(bin_, keep=collector)
        bin_.assignee = collector
        bin_.status = BinStatus.ASSIGNED
        bin_.assigned_at = utcnow()
        attach(bin_, collector)

    current_app.logger.info(
        "[bins] assign bin=%s collector=%s prev_worklist=%s", bin_.id, collector.id, prev
    )
    _publish(bin_, prev, collector.id)
    return bin_


def update_status(bin_id, status, collector_id=None) -> Bin:
    """
    Field update from the assigned collector. Collected/Skipped drops the bin
    from the worklist but keeps assigned_to for history.
    """
    new_status = parse_enum(BinStatus, status, "status")

    with transaction("bins"):
        bin_ = get_or_404(Bin, bin_id, "Bin")

        if bin_.assigned_to_id is not None:
            caller = None
            if collector_id not in (None, ""):
                caller = parse_id(collector_id, "collectorId")
            if caller != bin_.assigned_to_id:
                raise Forbidden("You are not assigned to this bin")

        bin_.status = new_status
        if new_status == BinStatus.COLLECTED:
            bin_.collected_at = utcnow()
        elif new_status == BinStatus.SKIPPED:
            bin_.skipped_at = utcnow()

        changed = None
        if not new_status.is_active:
            changed = detach(bin_)
        elif bin_.assignee is not None and attach(bin_, bin_.assignee):
            changed = bin_.assignee.id

    current_app.logger.info(
        "[bins] status bin=%s -> %s by=%s worklist_changed=%s",
        bin_.id, new_status.value, collector_id, changed,
    )
    _publish(bin_, changed)
    return bin_


def reassign(bin_id, collector_id, status=None) -> Bin:
    """Move a (typically Skipped) bin onto another collector."""
    if collector_id in (None, ""):
        raise InvalidInput("Collector ID is required")
    new_status = parse_enum(BinStatus, status, "status") if status else BinStatus.ASSIGNED

    with transaction("bins"):
        collector = get_or_404(Collector, collector_id, "Collector")
        bin_ = get_or_404(Bin, bin_id, "Bin")
        _check_compatible(bin_, collector)

        prev = detach(bin_, keep=collector if new_status.is_active else None)
        bin_.assignee = collector
        bin_.status = new_status
        bin_.assigned_at = utcnow()
        bin_.skipped_at = utcnow() if new_status == BinStatus.SKIPPED else None
        if new_status == BinStatus.COLLECTED:
            bin_.collected_at = bin_.assigned_at
        if new_status.is_active:
            attach(bin_, collector)

    current_app.logger.info(
        "[bins] reassign bin=%s collector=%s prev_worklist=%s status=%s",
        bin_.id, collector.id, prev, new_status.value,
    )
    _publish(bin_, prev, collector.id)
    return bin_


def reset_status(bin_id, status=None) -> Bin:
    """Return the bin to the unassigned pool."""
    new_status = parse_enum(BinStatus, status, "status") if status else BinStatus.PENDING

    with transaction("bins"):
        bin_ = get_or_404(Bin, bin_id, "Bin")
        prev = detach(bin_)
        bin_.assignee = None
        bin_.status = new_status
        bin_.assigned_at = None
        bin_.skipped_at = None
        bin_.collected_at = None

    current_app.logger.info("[bins] reset bin=%s status=%s prev_worklist=%s", bin_.id, new_status.value, prev)
    _publish(bin_, prev)
    return bin_


def delete_bin(bin_id) -> int:
    with transaction("bins"):
        bin_ = get_or_404(Bin, bin_id, "Bin")
        deleted_id = bin_.id
        prev = detach(bin_)
        db.session.delete(bin_)

    current_app.logger.info("[bins] deleted bin=%s prev_worklist=%s", deleted_id, prev)
    emit_bin_deleted(deleted_id)
    emit_worklists_changed([prev])
    return deleted_id
