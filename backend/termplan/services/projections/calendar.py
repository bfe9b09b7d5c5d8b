import datetime as dt
import math
from typing import Any

from termplan.schemas.types import YearMonth

TERM_MONTHS = 12
AVG_DAYS_PER_MONTH = 30.44


def parse_local_date(v: Any) -> dt.date | None:
    """Parse ``YYYY-MM-DD`` into a plain calendar date.

    Never goes through a timestamp, so no timezone can move the day.
    Returns None on empty or unparseable input.
    """
    if v is None:
        return None
    if isinstance(v, dt.datetime):
        return v.date()
    if isinstance(v, dt.date):
        return v
    if isinstance(v, str):
        s = v.strip()
        if not s:
            return None
        try:
            return dt.datetime.strptime(s[:10], "%Y-%m-%d").date()
        except ValueError:
            return None
    return None


def fiscal_term_range(year: int) -> tuple[dt.date, dt.date]:
    # term N runs Dec (N-1) .. Nov N
    return dt.date(year - 1, 12, 1), dt.date(year, 11, 30)


def term_months(term_start: dt.date) -> list[YearMonth]:
    first = YearMonth.from_date(term_start)
    return [first.shift(i) for i in range(TERM_MONTHS)]


def current_term_for(today: dt.date) -> int:
    return today.year + 1 if today.month == 12 else today.year


def is_past_month(ym: YearMonth, today: dt.date) -> bool:
    return ym < YearMonth.from_date(today)


def month_label(ym: YearMonth) -> str:
    return f"{ym.month}月"


def months_with_weeks(year: int) -> list[dict]:
    start, end = fiscal_term_range(year)
    months = [
        {"label": month_label(ym), "year_month": ym, "date": ym.first_day, "weeks": []}
        for ym in term_months(start)
    ]
    by_key = {m["year_month"]: m for m in months}

    current = start - dt.timedelta(days=start.weekday())  # Monday on/before term start
    while current <= end:
        week_end = current + dt.timedelta(days=4)  # Friday
        if week_end >= start:
            target = by_key.get(YearMonth.from_date(current))
            if target is None and current < start:
                target = months[0]
            if target is not None:
                target["weeks"].append(
                    {
                        "label": f"{current.month}/{current.day}~{week_end.day}",
                        "start_date": current.isoformat(),
                        "week_num": len(target["weeks"]) + 1,
                    }
                )
        current += dt.timedelta(days=7)
    return months


def exact_months_between(start: Any, end: Any) -> float:
    """Approximate duration in months for display: ``ceil(days) / 30.44``, one decimal."""
    s = parse_local_date(start)
    e = parse_local_date(end)
    if s is None or e is None or s > e:
        return 0.0
    days = math.ceil(abs((e - s).days))
    months = days / AVG_DAYS_PER_MONTH
    # half-up, not banker's rounding
    return math.floor(months * 10 + 0.5) / 10


def overlaps_month(ym: YearMonth, range_start: dt.date, range_end: dt.date) -> bool:
    return not (ym.last_day < range_start or ym.first_day > range_end)
