from __future__ import annotations

from datetime import date, datetime, time, tzinfo
from typing import Any, Optional

import pandas as pd

# Shipment exports written by the legacy dashboard use the en-IN locale
LEGACY_FORMATS = ("%d/%m/%Y, %H:%M:%S", "%d/%m/%Y %H:%M:%S", "%d/%m/%Y")


def parse_timestamp(value: Any, tz: tzinfo) -> Optional[datetime]:
    """Parse a record timestamp into an aware datetime.

    Accepts datetimes, dates (start of day), ISO 8601 strings and the legacy
    ``DD/MM/YYYY, HH:MM:SS`` format. Naive values are taken to be in ``tz``.
    Empty values return None.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        value = _parse_legacy(value) if "/" in value else pd.Timestamp(value).to_pydatetime()
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if not isinstance(value, datetime):
        raise ValueError(f"Unsupported timestamp value: {value!r}")
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz)
    return value


def _parse_legacy(value: str) -> datetime:
    for fmt in LEGACY_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f"Unrecognised timestamp: {value!r}")
