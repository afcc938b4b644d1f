# realtime.py
from __future__ import annotations

from flask import current_app
from flask_socketio import SocketIO, emit, join_room, leave_room

# one shared instance for the whole app
socketio = SocketIO(cors_allowed_origins="*", ping_interval=25, ping_timeout=20)

NS = "/rt"


def collector_room(collector_id: int) -> str:
    return f"collector:{collector_id}"


@socketio.on("connect", namespace=NS)
def on_connect(auth=None):
    emit("connected", {"ok": True})

@socketio.on("disconnect", namespace=NS)
def on_disconnect(*_):
    pass

@socketio.on("subscribe", namespace=NS)
def on_subscribe(data):
    collector_id = (data or {}).get("collector_id")
    if collector_id:
        join_room(collector_room(collector_id))
        emit("subscribed", {"collector_id": collector_id})

@socketio.on("unsubscribe", namespace=NS)
def on_unsubscribe(data):
    collector_id = (data or {}).get("collector_id")
    if collector_id:
        leave_room(collector_room(collector_id))


def _emit(event: str, payload: dict, *, room: str | None = None) -> bool:
    """Best-effort: a dead socket layer never fails a committed write."""
    if not current_app.config.get("REALTIME_ENABLED", True):
        return False
    try:
        if room:
            socketio.emit(event, payload, room=room, namespace=NS)
        else:
            socketio.emit(event, payload, namespace=NS)
        return True
    except Exception:
        current_app.logger.exception("[rt] emit %s failed room=%s", event, room)
        return False


def emit_bin_updated(payload: dict):
    _emit("bin:updated", payload)
    assignee = payload.get("assignedTo") or {}
    if assignee.get("id"):
        _emit("bin:updated", payload, room=collector_room(assignee["id"]))

def emit_bin_deleted(bin_id: int):
    _emit("bin:deleted", {"id": bin_id})

def emit_worklists_changed(collector_ids):
    """Tell each affected collector to refetch its worklist."""
    for cid in sorted({c for c in collector_ids if c}):
        _emit("worklist:changed", {"collector_id": cid}, room=collector_room(cid))

def emit_truck_updated(payload: dict):
    _emit("truck:updated", payload)
