"""Accounting period keys.

Every quota document lives under a ``YYYY-MM`` period key, so counters and
config roll over at each month boundary without a reset job: a new period
simply has no documents yet.
"""

import re
from datetime import datetime

PERIOD_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def current_period(now: datetime | None = None) -> str:
    """Get the accounting period for the caller's local wall-clock time.

    Args:
        now: Reference time. Defaults to the current local time.

    Returns:
        Period key in YYYY-MM format (zero-padded month)
    """
    now = now or datetime.now()
    return f"{now.year:04d}-{now.month:02d}"


def is_valid_period(period: str) -> bool:
    """Check whether a string is a well-formed period key."""
    return bool(PERIOD_PATTERN.match(period))
