from datetime import datetime, timezone


def utcnow():
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso_z(value):
    return value.isoformat() + "Z" if value else None
