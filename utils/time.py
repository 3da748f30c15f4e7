# utils/time.py
from datetime import datetime, timezone


def utcnow() -> datetime:
     """Naive UTC timestamp, the form every DateTime column stores."""
     return datetime.now(timezone.utc).replace(tzinfo=None)


def to_iso_utc(ts: datetime) -> str:
     """Format a naive UTC timestamp as ISO 8601 with millisecond precision and a Z suffix."""
     return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def parse_iso_utc(value: str) -> datetime:
     """Parse an ISO 8601 timestamp (optionally Z-suffixed) into naive UTC."""
     parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
     if parsed.tzinfo is not None:
          parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
     return parsed
