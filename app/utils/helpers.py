"""
Miscellaneous helpers used across blueprints.
"""
from datetime import datetime, timezone

from flask import request


def relative_time(dt: datetime) -> str:
    """'just now', '5m ago', '3h ago', '2d ago', or 'Mar 04' for older rows."""
    if dt is None:
        return ""
    if dt.tzinfo is None:
        # SQLite hands back naive datetimes; everything is stored as UTC.
        dt = dt.replace(tzinfo=timezone.utc)
    s = int((datetime.now(timezone.utc) - dt).total_seconds())
    if s < 60:      return "just now"
    if s < 3600:    return f"{s // 60}m ago"
    if s < 86400:   return f"{s // 3600}h ago"
    if s < 604800:  return f"{s // 86400}d ago"
    return dt.strftime("%b %d")


def wants_json() -> bool:
    """True for /api/ calls and JSON bodies; they get JSON instead of redirects."""
    return request.path.startswith("/api/") or request.is_json


def parse_topic_id(raw):
    """Topic filter from a query string value; blank or junk means 'all topics'."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def json_body() -> dict:
    """The request's JSON object, or {} when the body is missing or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
