"""Recurrence rules and next-occurrence calendar arithmetic."""

from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta
from dateutil.tz import tzlocal

SATURDAY = 5
SUNDAY = 6


class Recurrence(Enum):
    """How a completed task's due date advances."""

    NONE = "none"
    DAILY = "daily"
    WEEKDAYS = "weekdays"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, raw: "str | Recurrence | None") -> "Recurrence":
        if isinstance(raw, cls):
            return raw
        if not raw:
            return cls.NONE
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.NONE


def parse_due(value) -> datetime | None:
    """
    Parse a due value into a datetime.

    Accepts datetimes, epoch milliseconds and ISO-8601 strings. Anything else
    (including garbage strings) yields None rather than raising.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            return date_parser.isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
    return None


def to_local(dt: datetime, tz: tzinfo | None = None) -> datetime:
    """
    Express dt in the observer's local time.

    With tz=None the system zone is used as a DST-aware tzlocal, so calendar
    arithmetic on the result keeps wall-clock time. Naive datetimes are taken
    to already be local wall-clock time.
    """
    zone = tz if tz is not None else tzlocal()
    if dt.tzinfo is None:
        return dt.replace(tzinfo=zone)
    return dt.astimezone(zone)


def next_occurrence(due, recur, tz: tzinfo | None = None) -> datetime | None:
    """
    Compute the next due time of a recurring task.

    Pure function. due may be a datetime, an ISO string or epoch millis.
    Returns None if due is missing or unparseable, or if the
    rule is missing, "none" or unknown. Days and months are counted on the
    local calendar, so time-of-day is preserved.
    """
    rule = Recurrence.parse(recur)
    if rule is Recurrence.NONE:
        return None
    start = parse_due(due)
    if start is None:
        return None

    nd = to_local(start, tz)
    match rule:
        case Recurrence.DAILY:
            nd = nd + timedelta(days=1)
        case Recurrence.WEEKDAYS:
            nd = nd + timedelta(days=1)
            if nd.weekday() == SATURDAY:
                nd = nd + timedelta(days=2)
            if nd.weekday() == SUNDAY:
                nd = nd + timedelta(days=1)
        case Recurrence.WEEKLY:
            nd = nd + timedelta(days=7)
        case Recurrence.MONTHLY:
            # relativedelta clamps the 31st to the last day of shorter months
            nd = nd + relativedelta(months=1)
    return nd
