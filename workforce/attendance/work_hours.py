"""Work-hours calculation from a day's clock-in / clock-out times.

Times are "HH:MM" strings on a 24-hour clock (``datetime.time`` values are
accepted too). Both are placed on a shared reference date; when the
clock-out is not after the clock-in the shift is taken to run past
midnight, so equal times mean a full 24-hour shift.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

from workforce.common.constants import TIME_FORMAT

logger = logging.getLogger(__name__)

_REFERENCE_DATE = date(2000, 1, 1)

TimeValue = Union[str, time, None]


def parse_time(value: TimeValue) -> Optional[time]:
    """Parse an "HH:MM" string into ``time``; ``None`` if empty or malformed."""
    if value is None:
        return None
    if isinstance(value, time):
        return value
    text = value.strip()
    if not text:
        return None
    try:
        return datetime.strptime(text, TIME_FORMAT).time()
    except ValueError:
        logger.debug("Ignoring malformed time value %r", value)
        return None


def compute_work_hours(in_time: TimeValue, out_time: TimeValue) -> Optional[float]:
    """Hours between *in_time* and *out_time*, rounded to 2 decimals.

    Returns ``None`` when either side is missing or cannot be parsed.
    """
    start = parse_time(in_time)
    end = parse_time(out_time)
    if start is None or end is None:
        return None

    start_dt = datetime.combine(_REFERENCE_DATE, start)
    end_dt = datetime.combine(_REFERENCE_DATE, end)
    if end_dt <= start_dt:
        end_dt += timedelta(days=1)

    return round((end_dt - start_dt).total_seconds() / 3600, 2)
