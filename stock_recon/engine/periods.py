from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

from stock_recon.config import get_config
from stock_recon.data.models import Period


class PeriodCalculator:
    """Calendar-month periods in one fixed reference timezone.

    The host's local timezone is never consulted: naive datetimes are taken
    to already be in the reference timezone.
    """

    def __init__(self, tz: Optional[tzinfo] = None) -> None:
        self.tz = tz or get_config().reference_tz

    def localize(self, moment: datetime) -> datetime:
        """Express ``moment`` in the reference timezone."""
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self.tz)
        return moment.astimezone(self.tz)

    def local_date(self, moment: datetime) -> date:
        return self.localize(moment).date()

    def start_of_day(self, day: date) -> datetime:
        return datetime.combine(day, time.min, tzinfo=self.tz)

    def end_of_day(self, day: date) -> datetime:
        return datetime.combine(day, time.max, tzinfo=self.tz)

    def period_for(self, year: int, month: int) -> Period:
        start = date(year, month, 1)
        end = date(year, month, calendar.monthrange(year, month)[1])
        return Period(start=start, end=end, start_ts=self.start_of_day(start), end_ts=self.end_of_day(end))

    def current_period(self, now: datetime) -> Period:
        """Period containing ``now``."""
        local = self.localize(now)
        return self.period_for(local.year, local.month)

    def previous_period(self, period: Period) -> Period:
        """Month before ``period``; January rolls back to December of the prior year."""
        last_day = period.start - timedelta(days=1)
        return self.period_for(last_day.year, last_day.month)
