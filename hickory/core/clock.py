# hickory/core/clock.py
from datetime import datetime, timezone


def utcnow() -> datetime:
    # naive UTC, same convention as the DateTime columns
    return datetime.now(tz=timezone.utc).replace(tzinfo=None)
