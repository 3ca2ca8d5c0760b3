"""Statement period resolution.

A period is either the calendar month, or a billing cycle starting on a fixed
day of the month. Cycles starting on the 29th-31st start on the last day of
months that are shorter.

Periods are UTC calendar dates. A timestamp belongs to the period containing
its UTC date, the same boundary the database queries use (midnight UTC).
"""

import calendar
from datetime import date, datetime, timedelta, timezone

from cardrewards.schemas.rewards import PaymentInstrument, StatementPeriod


def utc_date(moment: datetime) -> date:
    """UTC calendar date of `moment`. Naive datetimes are taken as UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def _clamped(year: int, month: int, day: int) -> date:
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def calendar_period(as_of: date) -> StatementPeriod:
    last_day = calendar.monthrange(as_of.year, as_of.month)[1]
    return StatementPeriod(
        start=as_of.replace(day=1),
        end=as_of.replace(day=last_day),
    )


def statement_cycle_period(as_of: date, start_day: int) -> StatementPeriod:
    """Billing cycle containing `as_of` for cycles starting on `start_day`.

    On or after the start day the cycle began this month, otherwise the
    previous month. It ends the day before the next cycle starts.
    """
    this_month_start = _clamped(as_of.year, as_of.month, start_day)
    if as_of >= this_month_start:
        start = this_month_start
        next_year, next_month = _shift_month(as_of.year, as_of.month, 1)
    else:
        prev_year, prev_month = _shift_month(as_of.year, as_of.month, -1)
        start = _clamped(prev_year, prev_month, start_day)
        next_year, next_month = as_of.year, as_of.month

    next_start = _clamped(next_year, next_month, start_day)
    return StatementPeriod(start=start, end=next_start - timedelta(days=1))


class StatementPeriodResolver:
    """Resolves the aggregation window for monthly caps and spend thresholds."""

    def resolve(self, instrument: PaymentInstrument, as_of: date | datetime) -> StatementPeriod:
        if isinstance(as_of, datetime):
            as_of = utc_date(as_of)
        if not instrument.use_statement_month or not instrument.statement_day:
            return calendar_period(as_of)
        return statement_cycle_period(as_of, instrument.statement_day)
