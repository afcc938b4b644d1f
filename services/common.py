# services/common.py
from __future__ import annotations

import enum
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional, Type

from flask import current_app
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from db import db
from services.errors import Conflict, EngineError, InvalidInput, NotFound, StoreError


# ---------- small utils ----------

def utcnow() -> datetime:
    """Naive UTC, the way every DateTime column stores it."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_id(value: Any, field: str) -> int:
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be an integer id")
    if n <= 0:
        raise InvalidInput(f"{field} must be an integer id")
    return n


def parse_datetime(value: Any, field: str) -> datetime:
    """Accept datetimes or ISO-8601 strings (a trailing 'Z' is fine)."""
    if isinstance(value, datetime):
        dt = value
    else:
        raw = str(value or "").strip()
        if not raw:
            raise InvalidInput(f"{field} is required")
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            raise InvalidInput(f"{field} must be an ISO-8601 date/time")
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def parse_enum(enum_cls: Type[enum.Enum], value: Any, field: str):
    if isinstance(value, enum_cls):
        return value
    raw = str(value or "").strip()
    for member in enum_cls:
        if member.value == raw:
            return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise InvalidInput(f"{field} must be one of: {allowed}")


def required_text(value: Any, field: str) -> str:
    s = str(value).strip() if value is not None else ""
    if not s:
        raise InvalidInput(f"{field} is required")
    return s


def get_or_404(model, ident: Any, label: str, field: Optional[str] = None):
    try:
        pk = parse_id(ident, field or f"{label.lower()}Id")
    except InvalidInput:
        # an id that cannot be parsed names no row
        raise NotFound(f"{label} not found")
    obj = db.session.get(model, pk)
    if obj is None:
        raise NotFound(f"{label} not found")
    return obj


# ---------- transaction boundary ----------

GENERIC_CONFLICT = "Write conflicts with an existing record"


def _conflict_message(exc: IntegrityError, conflicts: Optional[Dict[str, str]]) -> str:
    """Pick the message for the column the violated constraint names."""
    detail = str(exc.orig)
    for column, message in (conflicts or {}).items():
        if column in detail:
            return message
    return GENERIC_CONFLICT


@contextmanager
def transaction(tag: str, *, conflicts: Optional[Dict[str, str]] = None) -> Iterator[None]:
    """
    One engine operation == one commit. Anything raised inside (engine
    errors included) rolls the whole operation back, so both sides of a
    relationship change land together or not at all.

    ``conflicts`` maps a unique column name to the message reported when
    a write trips that column's constraint.
    """
    try:
        yield
        db.session.commit()
    except EngineError:
        db.session.rollback()
        raise
    except StaleDataError:
        db.session.rollback()
        current_app.logger.warning("[%s] concurrent modification detected", tag)
        raise Conflict("Record was modified by another request; reload and retry")
    except IntegrityError as e:
        db.session.rollback()
        current_app.logger.warning("[%s] integrity error: %s", tag, e.orig)
        raise Conflict(_conflict_message(e, conflicts))
    except DBAPIError:
        db.session.rollback()
        current_app.logger.exception("[%s] store rejected the write", tag)
        raise StoreError("Entity store unavailable or rejected the write")
