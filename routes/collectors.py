# routes/collectors.py
from __future__ import annotations

from flask import Blueprint, request, jsonify

from services import collectors as engine

collectors_bp = Blueprint("collectors", __name__, url_prefix="/api/collectors")

# wire name -> service field
_UPDATABLE = {
    "name": "name",
    "city": "city",
    "status": "status",
    "truck": "truck",
    "currentLocation": "current_location",
}


@collectors_bp.route("", methods=["GET"])
@collectors_bp.route("/", methods=["GET"])
def list_collectors():
    rows = engine.list_collectors()
    return jsonify(success=True, count=len(rows), data=[c.to_dict() for c in rows]), 200


@collectors_bp.route("/<collector_id>", methods=["GET"])
def get_collector(collector_id):
    return jsonify(success=True, data=engine.get_collector(collector_id).to_dict()), 200


@collectors_bp.route("", methods=["POST"])
@collectors_bp.route("/", methods=["POST"])
def create_collector():
    """Body: { "name": str, "city": str, "status"?: str, "truck"?: id }"""
    data = request.get_json(silent=True) or {}
    collector = engine.create_collector(
        data.get("name"),
        data.get("city"),
        status=data.get("status"),
        truck_id=data.get("truck"),
    )
    return jsonify(success=True, message="Collector created", data=collector.to_dict()), 201


@collectors_bp.route("/<collector_id>", methods=["PUT"])
def update_collector(collector_id):
    data = request.get_json(silent=True) or {}
    fields = {svc: data[wire] for wire, svc in _UPDATABLE.items() if wire in data}
    collector = engine.update_collector(collector_id, fields)
    return jsonify(success=True, message="Collector updated", data=collector.to_dict()), 200


@collectors_bp.route("/<collector_id>/location", methods=["PUT"])
def update_collector_location(collector_id):
    data = request.get_json(silent=True) or {}
    collector = engine.update_location(collector_id, data.get("location"))
    return jsonify(success=True, message="Location updated", data=collector.to_dict()), 200


@collectors_bp.route("/<collector_id>", methods=["DELETE"])
def delete_collector(collector_id):
    engine.delete_collector(collector_id)
    return jsonify(success=True, message="Collector deleted"), 200
