"""Row conversion helpers."""

import uuid
from datetime import date, datetime


def to_plain(row):
    """Convert a dict row into JSON-friendly values (UUID -> str, datetimes -> ISO)."""
    if row is None:
        return None
    plain = {}
    for key, value in dict(row).items():
        if isinstance(value, uuid.UUID):
            value = str(value)
        elif isinstance(value, (datetime, date)):
            value = value.isoformat()
        plain[key] = value
    return plain
