import calendar
import locale
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from functools import lru_cache
from typing import Dict, Union

from pydantic import TypeAdapter

TIME_FORMAT = "%H:%M"
WEEKDAYS = (1, 2, 3, 4, 5, 6, 7)
WEEKEND = (6, 7)

_duration_adapter = TypeAdapter(timedelta)

DateLike = Union[date, datetime, str]


def parse_time(value: str) -> datetime:
    """Parse a bare ``HH:mm`` into an instant on a fixed reference day.

    Only meaningful for diffing two times of the same day.
    """
    return datetime.strptime(value, TIME_FORMAT)


def format_time(value: datetime) -> str:
    return value.strftime(TIME_FORMAT)


def combine(day: date, value: str) -> datetime:
    return datetime.combine(day, parse_time(value).time())


def hours_diff(earlier: str, later: str) -> str:
    # Same-day only: a "later" time past midnight comes out negative.
    return format_hours(parse_time(later) - parse_time(earlier))


def format_hours(value: timedelta) -> str:
    sign = "-" if value < timedelta(0) else ""
    minutes = int(abs(value).total_seconds()) // 60
    hours, minutes = divmod(minutes, 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def parse_duration(value: Union[str, timedelta]) -> timedelta:
    return _duration_adapter.validate_python(value)


def format_duration(value: timedelta) -> str:
    """ISO-8601 form of a duration, always rescaled: ``PT8H0M``, ``-PT1H30M``, ``P1DT2H0M``."""
    sign = "-" if value < timedelta(0) else ""
    total = abs(value)
    hours, rest = divmod(total.seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    text = f"{sign}P"
    if total.days:
        text += f"{total.days}D"
    text += f"T{hours}H{minutes}M"
    if seconds:
        text += f"{seconds}S"
    return text


def to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError as exc:
            raise ValueError(f"Invalid date: {value!r}") from exc
    raise ValueError(f"Invalid date: {value!r}")


def iso_day(value: DateLike) -> str:
    return to_date(value).isoformat()


def weekday_of(value: DateLike) -> int:
    return to_date(value).isoweekday()


@contextmanager
def _user_time_locale():
    """Switch ``LC_TIME`` to the host user's locale for the block, then restore it."""
    previous = locale.setlocale(locale.LC_TIME)
    try:
        locale.setlocale(locale.LC_TIME, "")
        yield
    finally:
        locale.setlocale(locale.LC_TIME, previous)


@lru_cache(maxsize=None)
def is_24_hour_clock() -> bool:
    try:
        with _user_time_locale():
            time_format = locale.nl_langinfo(locale.T_FMT)
    except (AttributeError, locale.Error):
        return True

    if not time_format:
        return True
    return not any(token in time_format for token in ("%I", "%l", "%r", "%p"))


def _weekday_labels(names) -> Dict[int, str]:
    return {weekday: names[weekday - 1] for weekday in WEEKDAYS}


def weekday_names(style: str = "narrow") -> Dict[int, str]:
    """Weekday labels in the host user's language, keyed 1 (Monday) to 7."""
    if style not in ("long", "short", "narrow"):
        raise ValueError(f"Unknown weekday style: {style}")
    names = calendar.day_name if style == "long" else calendar.day_abbr
    try:
        with _user_time_locale():
            labels = _weekday_labels(names)
    except locale.Error:
        labels = _weekday_labels(names)
    if style == "narrow":
        return {weekday: label[:1] for weekday, label in labels.items()}
    return labels
