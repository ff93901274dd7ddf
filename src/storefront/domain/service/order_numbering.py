"""Domain service: display order numbers.

Format is ``CS`` + ``YYMMDD`` + a four-digit sequence that restarts
every day, e.g. ``CS2610180007``.
"""

from __future__ import annotations

from datetime import datetime

ORDER_NUMBER_PREFIX = "CS"
SEQUENCE_WIDTH = 4


def daily_prefix(day: datetime) -> str:
    return f"{ORDER_NUMBER_PREFIX}{day:%y%m%d}"


def next_order_number(day: datetime, latest_for_day: str | None) -> str:
    """Return the number following *latest_for_day* (or the first of the day)."""
    prefix = daily_prefix(day)
    sequence = 1
    if latest_for_day and latest_for_day.startswith(prefix):
        sequence = int(latest_for_day[-SEQUENCE_WIDTH:]) + 1
    return f"{prefix}{sequence:0{SEQUENCE_WIDTH}d}"
