# services/errors.py
"""
Error kinds raised by the assignment engine.

Each carries the HTTP status the app factory renders it with, so route
handlers never build error responses for engine failures themselves.
"""
from __future__ import annotations


class EngineError(Exception):
    kind = "Error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class NotFound(EngineError):
    kind = "NotFound"
    status_code = 404


class Conflict(EngineError):
    kind = "Conflict"
    status_code = 409


class Forbidden(EngineError):
    kind = "Forbidden"
    status_code = 403


class InvalidInput(EngineError):
    kind = "InvalidInput"
    status_code = 400


class StoreError(EngineError):
    kind = "StoreError"
    status_code = 503
