# tasks/reconcile.py
"""
Read-repair for the worklist and truck links.

Rows written before the transactional engine, or edited by hand, can leave a
collector's worklist out of step with the bins that point at it. This pass
brings both back in line:

  - drops worklist entries whose bin is not Pending/Assigned, or whose bin
    points at someone else;
  - adds missing entries for Pending/Assigned bins that point at a collector;
  - clears bins pointing at a collector that no longer exists (active ones
    go back to Pending);
  - clears collectors pointing at a truck that no longer exists.
"""
from __future__ import annotations

from flask import current_app

from db import db
from models.bin import Bin, BinStatus
from models.collector import Collector
from models.truck import Truck
from services.bins import attach
from services.common import transaction


def reconcile_worklists(dry_run: bool = False) -> dict:
    stats = {"pruned": 0, "added": 0, "orphans_cleared": 0, "trucks_cleared": 0}

    with transaction("reconcile"):
        collector_ids = {cid for (cid,) in db.session.query(Collector.id).all()}

        for collector in Collector.query.order_by(Collector.id).all():
            for bin_ in list(collector.assigned_bins):
                if bin_.assigned_to_id != collector.id or not bin_.status.is_active:
                    current_app.logger.info(
                        "[reconcile] prune bin=%s from collector=%s (assigned_to=%s status=%s)",
                        bin_.id, collector.id, bin_.assigned_to_id, bin_.status.value,
                    )
                    collector.assigned_bins.remove(bin_)
                    stats["pruned"] += 1

        for bin_ in Bin.query.filter(Bin.assigned_to_id.isnot(None)).order_by(Bin.id).all():
            if bin_.assigned_to_id not in collector_ids:
                current_app.logger.info(
                    "[reconcile] bin=%s points at missing collector=%s", bin_.id, bin_.assigned_to_id
                )
                bin_.assigned_to_id = None
                if bin_.status.is_active:
                    bin_.status = BinStatus.PENDING
                stats["orphans_cleared"] += 1
                continue
            if bin_.status.is_active and bin_.worklist_collector is None:
                attach(bin_, bin_.assignee)
                stats["added"] += 1

        truck_ids = {tid for (tid,) in db.session.query(Truck.id).all()}
        for collector in Collector.query.filter(Collector.truck_id.isnot(None)).all():
            if collector.truck_id not in truck_ids:
                current_app.logger.info(
                    "[reconcile] collector=%s points at missing truck=%s", collector.id, collector.truck_id
                )
                collector.truck_id = None
                stats["trucks_cleared"] += 1

        if dry_run:
            # leaves transaction() an empty commit
            db.session.rollback()

    current_app.logger.info("[reconcile] done dry_run=%s %s", dry_run, stats)
    return stats
