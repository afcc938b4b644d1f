# routes/bins.py
from __future__ import annotations

from flask import Blueprint, request, jsonify

from services import bins as engine

bins_bp = Blueprint("bins", __name__, url_prefix="/api/bins")


def _body() -> dict:
    return request.get_json(silent=True) or {}


@bins_bp.route("", methods=["GET"])
@bins_bp.route("/", methods=["GET"])
def list_bins():
    """
    Optional query:
      - city=<name>|all
      - status=Pending|Assigned|Collected|Skipped|all
    """
    rows = engine.list_bins(city=request.args.get("city"), status=request.args.get("status"))
    return jsonify(success=True, count=len(rows), data=[b.to_dict() for b in rows]), 200


@bins_bp.route("/collector/<collector_id>", methods=["GET"])
def bins_by_collector(collector_id):
    rows = engine.get_bins_by_collector(collector_id)
    return jsonify(success=True, count=len(rows), data=[b.to_dict() for b in rows]), 200


@bins_bp.route("/<bin_id>", methods=["GET"])
def get_bin(bin_id):
    return jsonify(success=True, data=engine.get_bin(bin_id).to_dict()), 200


@bins_bp.route("", methods=["POST"])
@bins_bp.route("/", methods=["POST"])
def create_bin():
    """Body: { "location": str, "city": str, "reportedAt": ISO-8601, "notes"?: str }"""
    data = _body()
    bin_ = engine.create_bin(
        data.get("location"),
        data.get("city"),
        data.get("reportedAt"),
        notes=data.get("notes") or "",
    )
    return jsonify(success=True, message="Bin created successfully", data=bin_.to_dict()), 201


@bins_bp.route("/<bin_id>/status", methods=["PUT"])
def update_bin_status(bin_id):
    """Body: { "status": str, "collectorId": id } — only the assignee may update."""
    data = _body()
    bin_ = engine.update_status(bin_id, data.get("status"), data.get("collectorId"))
    return jsonify(success=True, message="Bin status updated successfully", data=bin_.to_dict()), 200


@bins_bp.route("/<bin_id>/assign-collector", methods=["PUT"])
def assign_collector(bin_id):
    data = _body()
    bin_ = engine.assign_collector(bin_id, data.get("collectorId"))
    return jsonify(success=True, message="Collector assigned", data=bin_.to_dict()), 200


@bins_bp.route("/<bin_id>/reassign", methods=["PUT"])
def reassign_bin(bin_id):
    data = _body()
    bin_ = engine.reassign(bin_id, data.get("collectorId"), data.get("status"))
    return jsonify(success=True, message="Bin reassigned successfully", data=bin_.to_dict()), 200


@bins_bp.route("/<bin_id>/reset-status", methods=["PUT"])
def reset_bin_status(bin_id):
    data = _body()
    bin_ = engine.reset_status(bin_id, data.get("status"))
    return jsonify(success=True, message="Bin status reset successfully", data=bin_.to_dict()), 200


@bins_bp.route("/<bin_id>", methods=["DELETE"])
def delete_bin(bin_id):
    engine.delete_bin(bin_id)
    return jsonify(success=True, message="Bin deleted successfully"), 200
