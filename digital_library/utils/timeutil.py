from datetime import datetime, timezone


def utcnow() -> datetime:
    # naive UTC, matches the DateTime columns
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today():
    return datetime.now(timezone.utc).date()
