import datetime as dt

import pytest

from termplan.schemas.types import YearMonth
from termplan.services.projections.calendar import (
    current_term_for,
    exact_months_between,
    fiscal_term_range,
    is_past_month,
    months_with_weeks,
    parse_local_date,
    term_months,
)


def test_fiscal_term_runs_december_to_november():
    assert fiscal_term_range(2025) == (dt.date(2024, 12, 1), dt.date(2025, 11, 30))


def test_term_months_cross_year():
    months = term_months(dt.date(2024, 12, 1))
    assert len(months) == 12
    assert months[0] == YearMonth(2024, 12)
    assert months[1] == YearMonth(2025, 1)
    assert months[-1] == YearMonth(2025, 11)


def test_december_belongs_to_next_term():
    assert current_term_for(dt.date(2024, 12, 5)) == 2025
    assert current_term_for(dt.date(2025, 11, 30)) == 2025


def test_is_past_month_is_strict():
    today = dt.date(2025, 3, 15)
    assert is_past_month(YearMonth(2025, 2), today)
    assert not is_past_month(YearMonth(2025, 3), today)
    assert not is_past_month(YearMonth(2025, 4), today)


def test_weeks_skip_those_ending_before_term():
    # 2024-12-01 is a Sunday: the week of Mon 11/25 ends before the term
    months = months_with_weeks(2025)
    assert len(months) == 12
    first = months[0]
    assert first["label"] == "12月"
    assert first["weeks"][0] == {"label": "12/2~6", "start_date": "2024-12-02", "week_num": 1}


def test_week_straddling_term_start_goes_to_first_month():
    # 2026-12-01 is a Tuesday
    first = months_with_weeks(2027)[0]
    assert first["weeks"][0]["start_date"] == "2026-11-30"
    assert first["weeks"][0]["label"] == "11/30~4"


def test_week_belongs_to_month_of_its_monday():
    months = {m["year_month"]: m for m in months_with_weeks(2025)}
    march = months[YearMonth(2025, 3)]
    april = months[YearMonth(2025, 4)]
    assert march["weeks"][-1]["label"] == "3/31~4"
    assert april["weeks"][0]["start_date"] == "2025-04-07"
    assert [w["week_num"] for w in april["weeks"]] == list(range(1, len(april["weeks"]) + 1))


def test_exact_months_between():
    assert exact_months_between("2025-01-01", "2025-06-30") == 5.9
    assert exact_months_between(dt.date(2025, 1, 1), dt.date(2025, 1, 1)) == 0.0
    assert exact_months_between("2025-06-30", "2025-01-01") == 0.0
    assert exact_months_between("", "2025-01-01") == 0.0
    assert exact_months_between(None, None) == 0.0


@pytest.mark.parametrize("raw", ["", "  ", "not-a-date", None, "2025-13-01"])
def test_parse_local_date_rejects_garbage(raw):
    assert parse_local_date(raw) is None


def test_parse_local_date_keeps_calendar_day():
    assert parse_local_date("2025-01-31") == dt.date(2025, 1, 31)
    assert parse_local_date("2025-01-31T23:30:00+09:00") == dt.date(2025, 1, 31)


def test_year_month_arithmetic():
    ym = YearMonth.parse("2024-12")
    assert ym.shift(1) == YearMonth(2025, 1)
    assert ym.shift(-12) == YearMonth(2023, 12)
    assert YearMonth(2024, 2).days == 29
    assert YearMonth(2025, 2).last_day == dt.date(2025, 2, 28)
    assert str(YearMonth(2025, 1)) == "2025-01"
    assert YearMonth(2024, 12) < YearMonth(2025, 1)
    with pytest.raises(ValueError):
        YearMonth.parse("2025/01")
