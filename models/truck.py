# models/truck.py
from __future__ import annotations

import enum
from db import db
from sqlalchemy.sql import func


class TruckStatus(str, enum.Enum):
    ACTIVE      = "active"
    MAINTENANCE = "maintenance"
    INACTIVE    = "inactive"


class Truck(db.Model):
    __tablename__ = "trucks"

    id               = db.Column(db.Integer, primary_key=True)
    plate_number     = db.Column(db.String(32), nullable=False, unique=True, index=True)
    capacity         = db.Column(db.String(64), nullable=False)
    status           = db.Column(
        db.Enum(TruckStatus, name="truck_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=TruckStatus.ACTIVE,
    )
    current_location = db.Column(db.String(255), nullable=False, default="")
    last_maintenance = db.Column(db.DateTime, server_default=func.now(), nullable=False)

    version          = db.Column(db.Integer, nullable=False)
    created_at       = db.Column(db.DateTime, server_default=func.now(), nullable=False)
    updated_at       = db.Column(db.DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __mapper_args__ = {"version_id_col": version}

    # Inverse of Collector.truck
    assigned_to = db.relationship(
        "Collector",
        back_populates="truck",
        foreign_keys="Collector.truck_id",
        uselist=False,
    )

    @property
    def assigned_to_id(self) -> int | None:
        return self.assigned_to.id if self.assigned_to else None

    def to_dict(self) -> dict:
        c = self.assigned_to
        return {
            "id": self.id,
            "plateNumber": self.plate_number,
            "capacity": self.capacity,
            "status": self.status.value if self.status else None,
            "assignedTo": {"id": c.id, "name": c.name, "city": c.city} if c else None,
            "currentLocation": self.current_location or "",
            "lastMaintenance": self.last_maintenance.isoformat() if self.last_maintenance else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
