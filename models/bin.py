# models/bin.py
from __future__ import annotations

import enum
from db import db
from sqlalchemy.sql import func


class BinStatus(str, enum.Enum):
    PENDING   = "Pending"
    ASSIGNED  = "Assigned"
    COLLECTED = "Collected"
    SKIPPED   = "Skipped"

    @property
    def is_active(self) -> bool:
        """Pending/Assigned bins belong on their collector's worklist."""
        return self in (BinStatus.PENDING, BinStatus.ASSIGNED)


def _iso(dt):
    return dt.isoformat() if dt else None


class Bin(db.Model):
    __tablename__ = "bins"

    id             = db.Column(db.Integer, primary_key=True)
    location       = db.Column(db.String(255), nullable=False)
    city           = db.Column(db.String(120), nullable=False, index=True)
    status         = db.Column(
        db.Enum(BinStatus, name="bin_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=BinStatus.PENDING,
        index=True,
    )
    # kept after Collected/Skipped so the dispatch board can show who handled it
    assigned_to_id = db.Column(db.Integer, db.ForeignKey("collectors.id"), nullable=True, index=True)

    reported_at    = db.Column(db.DateTime, nullable=False)
    assigned_at    = db.Column(db.DateTime, nullable=True)
    collected_at   = db.Column(db.DateTime, nullable=True)
    skipped_at     = db.Column(db.DateTime, nullable=True)
    notes          = db.Column(db.Text, nullable=False, default="")

    version        = db.Column(db.Integer, nullable=False)
    created_at     = db.Column(db.DateTime, server_default=func.now(), nullable=False)
    updated_at     = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # ── Relationships ────────────────────────────────────────────────────────
    assignee = db.relationship(
        "Collector",
        back_populates="bins",
        foreign_keys=[assigned_to_id],
    )

    # Inverse of Collector.assigned_bins (the active worklist)
    worklist_collector = db.relationship(
        "Collector",
        secondary="collector_bins",
        back_populates="assigned_bins",
        uselist=False,
    )

    def to_dict(self) -> dict:
        a = self.assignee
        return {
            "id": self.id,
            "location": self.location,
            "city": self.city,
            "status": self.status.value if self.status else None,
            "assignedTo": {"id": a.id, "name": a.name} if a else None,
            "reportedAt": _iso(self.reported_at),
            "assignedAt": _iso(self.assigned_at),
            "collectedAt": _iso(self.collected_at),
            "skippedAt": _iso(self.skipped_at),
            "notes": self.notes or "",
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "location": self.location,
            "city": self.city,
            "status": self.status.value if self.status else None,
            "reportedAt": _iso(self.reported_at),
        }
