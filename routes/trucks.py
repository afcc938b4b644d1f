# routes/trucks.py
from __future__ import annotations

from flask import Blueprint, request, jsonify

from services import trucks as engine

trucks_bp = Blueprint("trucks", __name__, url_prefix="/api/trucks")

_UPDATABLE = {
    "plateNumber": "plate_number",
    "capacity": "capacity",
    "status": "status",
    "assignedTo": "assigned_to",
    "currentLocation": "current_location",
    "lastMaintenance": "last_maintenance",
}


@trucks_bp.route("", methods=["GET"])
@trucks_bp.route("/", methods=["GET"])
def list_trucks():
    rows = engine.list_trucks(status=request.args.get("status"))
    return jsonify(success=True, count=len(rows), data=[t.to_dict() for t in rows]), 200


@trucks_bp.route("/<truck_id>", methods=["GET"])
def get_truck(truck_id):
    return jsonify(success=True, data=engine.get_truck(truck_id).to_dict()), 200


@trucks_bp.route("", methods=["POST"])
@trucks_bp.route("/", methods=["POST"])
def create_truck():
    """Body: { "plateNumber": str, "capacity": str, "status"?: str }"""
    data = request.get_json(silent=True) or {}
    truck = engine.create_truck(data.get("plateNumber"), data.get("capacity"), status=data.get("status"))
    return jsonify(success=True, message="Truck created", data=truck.to_dict()), 201


@trucks_bp.route("/<truck_id>", methods=["PUT"])
def update_truck(truck_id):
    data = request.get_json(silent=True) or {}
    fields = {svc: data[wire] for wire, svc in _UPDATABLE.items() if wire in data}
    truck = engine.update_truck(truck_id, fields)
    return jsonify(success=True, message="Truck updated successfully", data=truck.to_dict()), 200


@trucks_bp.route("/<truck_id>", methods=["DELETE"])
def delete_truck(truck_id):
    engine.delete_truck(truck_id)
    return jsonify(success=True, message="Truck deleted"), 200
