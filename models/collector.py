# models/collector.py
from __future__ import annotations

import enum
from db import db
from sqlalchemy.sql import func


class CollectorStatus(str, enum.Enum):
    ACTIVE  = "active"
    IDLE    = "idle"
    OFFLINE = "offline"


# Active worklist. bin_id is unique: a bin sits on at most one worklist.
collector_bins = db.Table(
    "collector_bins",
    db.Column("collector_id", db.Integer, db.ForeignKey("collectors.id", ondelete="CASCADE"), nullable=False, index=True),
    db.Column("bin_id", db.Integer, db.ForeignKey("bins.id", ondelete="CASCADE"), primary_key=True),
)


class Collector(db.Model):
    __tablename__ = "collectors"

    id               = db.Column(db.Integer, primary_key=True)
    name             = db.Column(db.String(120), nullable=False)
    city             = db.Column(db.String(120), nullable=False, index=True)
    status           = db.Column(
        db.Enum(CollectorStatus, name="collector_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CollectorStatus.ACTIVE,
    )
    # One-to-one with Truck; the only place the link is stored
    truck_id         = db.Column(db.Integer, db.ForeignKey("trucks.id"), nullable=True, unique=True)
    current_location = db.Column(db.String(255), nullable=False, default="")

    version          = db.Column(db.Integer, nullable=False)
    created_at       = db.Column(db.DateTime, server_default=func.now(), nullable=False)
    updated_at       = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # ── Relationships ────────────────────────────────────────────────────────
    truck = db.relationship(
        "Truck",
        back_populates="assigned_to",
        foreign_keys=[truck_id],
    )

    assigned_bins = db.relationship(
        "Bin",
        secondary=collector_bins,
        back_populates="worklist_collector",
        order_by="Bin.id",
    )

    # Every bin pointing here, including Collected/Skipped history
    bins = db.relationship(
        "Bin",
        back_populates="assignee",
        foreign_keys="Bin.assigned_to_id",
    )

    def to_dict(self) -> dict:
        t = self.truck
        return {
            "id": self.id,
            "name": self.name,
            "city": self.city,
            "status": self.status.value if self.status else None,
            "truck": (
                {"id": t.id, "plateNumber": t.plate_number, "capacity": t.capacity}
                if t else None
            ),
            "assignedBins": [b.to_summary() for b in self.assigned_bins],
            "currentLocation": self.current_location or "",
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
