from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from dateutil.relativedelta import relativedelta


@dataclass(frozen=True)
class MonthWindow:
    start: datetime
    end: datetime

    @property
    def label(self) -> str:
        return self.start.strftime("%B %Y")

    def contains(self, moment: datetime) -> bool:
        return self.start <= ensure_aware(moment) <= self.end


def ensure_aware(moment: datetime) -> datetime:
    """Naive datetimes are taken as server-local time."""
    if moment.tzinfo is None:
        return moment.astimezone()
    return moment


def local_now() -> datetime:
    return datetime.now().astimezone()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _wall_clock(naive: datetime, tz) -> datetime:
    # Each boundary gets its own offset, so a DST change inside the month is honoured
    if tz is None:
        return naive.astimezone()
    return naive.replace(tzinfo=tz)


def current_month_window(now: Optional[datetime] = None) -> MonthWindow:
    """
    Inclusive window of the calendar month containing `now`:
    day 1 at 00:00:00 through the last day at 23:59:59.

    Without `now`, or with a naive one, the boundaries are on the server-local clock.
    An aware `now` keeps its own time zone.
    """
    if now is None:
        now = datetime.now()
    tz = now.tzinfo
    start = datetime(now.year, now.month, 1)
    end = start + relativedelta(months=1) - relativedelta(seconds=1)
    return MonthWindow(start=_wall_clock(start, tz), end=_wall_clock(end, tz))


def month_key(moment: datetime) -> str:
    return ensure_aware(moment).strftime("%Y-%m")


def previous_month_key(now: datetime) -> str:
    return (now - relativedelta(months=1)).strftime("%Y-%m")


def months_ago(now: datetime, months: int) -> datetime:
    """Same day-of-month `months` earlier, clamped to the month's last day."""
    return now - relativedelta(months=months)
