"""
RFC 3339 timestamp parsing for IAM Credentials responses.
"""

import re
from datetime import datetime, timezone

_FRACTION = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp into an aware datetime.

    IAM returns nanosecond precision (e.g. "2020-07-31T00:00:00.123456789Z");
    fractional seconds are clamped to microseconds.

    Raises:
        ValueError: If the value is not a timestamp
    """
    value = value.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"

    match = _FRACTION.search(value)
    if match:
        value = value.replace(
            match.group(0),
            f"{match.group(1)}.{match.group(2)[:6].ljust(6, '0')}",
            1,
        )

    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
