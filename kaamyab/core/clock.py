"""Injectable clock.

Every component that needs "now" takes a Clock. Pure functions take the
datetime itself. Nothing in the core reads the wall clock implicitly.
"""

from datetime import date, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in the user's local time zone (timezone-aware)."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class FixedClock:
    """Manually advanced clock for tests and replays."""

    def __init__(self, current: datetime) -> None:
        self._current = current

    def now(self) -> datetime:
        return self._current

    def advance(self, **kwargs: float) -> datetime:
        self._current = self._current + timedelta(**kwargs)
        return self._current

    def set(self, current: datetime) -> None:
        self._current = current


def to_local(value: datetime, reference: datetime) -> datetime:
    """Express ``value`` in the time zone of ``reference``.

    Naive datetimes are taken to already be in the reference zone.
    """
    if reference.tzinfo is None:
        return value.replace(tzinfo=None) if value.tzinfo is None else value.astimezone().replace(tzinfo=None)
    if value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    return value.astimezone(reference.tzinfo)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def local_date(value: datetime, reference: datetime) -> date:
    """Calendar day of ``value`` as seen on the ``reference`` clock."""
    return to_local(value, reference).date()


def elapsed_seconds_between(started_at: datetime, now: datetime) -> int:
    """Whole seconds from ``started_at`` to ``now``, never negative."""
    delta = (now - to_local(started_at, now)).total_seconds()
    return max(0, int(delta))
