"""Timestamp parsing for stored records."""

from datetime import datetime


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse an ISO timestamp into a naive local datetime.

    Records written elsewhere may carry a UTC offset; those are converted to
    local time and the offset dropped so they compare with naive values.
    """
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed
