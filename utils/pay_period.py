from datetime import date, timedelta
from typing import List, Tuple

PERIOD_LENGTH = timedelta(days=30)


def _anchor(year: int, month: int, first_day: int) -> date:
    # a first day past the end of a short month rolls into the next month
    return date(year, month, 1) + timedelta(days=first_day - 1)


def month_days_range(first_day: int, today: date) -> Tuple[date, date]:
    """Rolling pay window ``[start, start + 30 days]`` anchored on ``first_day``."""
    if not 1 <= first_day <= 31:
        raise ValueError(f"first day of month must be 1..31, got {first_day}")

    if today.day >= first_day:
        start = _anchor(today.year, today.month, first_day)
    elif today.month == 1:
        start = _anchor(today.year - 1, 12, first_day)
    else:
        start = _anchor(today.year, today.month - 1, first_day)

    return start, start + PERIOD_LENGTH


def days(first_day: int, today: date) -> List[str]:
    start, end = month_days_range(first_day, today)
    return [(start + timedelta(days=offset)).isoformat() for offset in range((end - start).days + 1)]


def index_today(first_day: int, today: date) -> int:
    start, _ = month_days_range(first_day, today)
    return (today - start).days
