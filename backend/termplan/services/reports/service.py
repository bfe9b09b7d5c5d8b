import datetime as dt
from typing import Literal

from termplan.schemas.entities import AppSettings, Employee, Project, WorkLog
from termplan.schemas.types import YearMonth
from termplan.services.projections.calendar import (
    fiscal_term_range,
    month_label,
    months_with_weeks,
    term_months,
)
from termplan.services.projections.cost import monthly_labor_cost
from termplan.services.projections.revenue import monthly_revenue

PeriodKind = Literal["half", "third", "quarter"]

_PERIOD_SIZES: dict[PeriodKind, int] = {"half": 6, "third": 4, "quarter": 3}
_PERIOD_PREFIX: dict[PeriodKind, str] = {"half": "H", "third": "T", "quarter": "Q"}

WEEKS_PER_MONTH = 4.33
UNSET_LEAD_SOURCE = "unset"


def _pct(num: float, denom: float) -> float:
    return (num / denom * 100.0) if denom > 0 else 0.0


def project_metrics(
    projects: list[Project],
    employees: list[Employee],
    work_logs: list[WorkLog],
    term: int,
    settings: AppSettings,
    today: dt.date,
):
    """Per-project term revenue and hybrid cost, sorted by revenue.

    Revenue is tax-exclusive. The target margin band is derived from the
    labor-share guardrails (labor share 40-50% means margin 50-60%).
    """
    start, _ = fiscal_term_range(term)
    months = term_months(start)
    margin_min = 100 - settings.target_labor_share_max
    margin_max = 100 - settings.target_labor_share_min

    rows = []
    for p in projects:
        revenue = sum(monthly_revenue(p, ym) for ym in months)
        cost = sum(monthly_labor_cost(p, employees, work_logs, ym, today) for ym in months)
        profit = revenue - cost
        margin = _pct(profit, revenue)
        rows.append(
            dict(
                project_id=p.id,
                client_name=p.client_name,
                project_name=p.project_name,
                status=p.status,
                total_revenue=revenue,
                total_cost=cost,
                profit=profit,
                profit_margin=margin,
                labor_share=_pct(cost, revenue),
                on_target=revenue > 0 and margin >= margin_min,
            )
        )
    rows.sort(key=lambda r: r["total_revenue"], reverse=True)
    return dict(term=term, target_margin_min=margin_min, target_margin_max=margin_max, rows=rows)


def _period_label(months: list[YearMonth], start_idx: int, end_idx: int) -> str:
    return f"{month_label(months[start_idx])}-{month_label(months[end_idx - 1])}"


def _period_totals(projections: list[dict], start_idx: int, end_idx: int) -> dict:
    chunk = projections[start_idx:end_idx]
    revenue = sum(r["revenue"] for r in chunk)
    target = sum(r["target"] for r in chunk)
    return dict(revenue=revenue, target=target, diff=revenue - target, rate=_pct(revenue, target))


def current_month_index(term: int, today: dt.date) -> int:
    # clamped so past/future terms still show their first/last period
    start, _ = fiscal_term_range(term)
    idx = YearMonth.from_date(today).index - YearMonth.from_date(start).index
    return min(max(idx, 0), 11)


def term_summary(projections: list[dict], term: int, today: dt.date) -> dict:
    start, _ = fiscal_term_range(term)
    months = term_months(start)
    idx = current_month_index(term, today)

    periods = []
    for kind, size in _PERIOD_SIZES.items():
        n = idx // size
        s, e = n * size, n * size + size
        periods.append(
            dict(
                kind=kind,
                name=f"{_PERIOD_PREFIX[kind]}{n + 1}",
                label=_period_label(months, s, e),
                start_idx=s,
                end_idx=e,
                **_period_totals(projections, s, e),
            )
        )

    annual = _period_totals(projections, 0, len(projections))
    return dict(
        term=term,
        annual_revenue=annual["revenue"],
        annual_target=annual["target"],
        annual_diff=annual["diff"],
        achievement=annual["rate"],
        current_month_index=idx,
        periods=periods,
    )


def revenue_breakdown(projects: list[Project], term: int, start_idx: int, end_idx: int) -> list[dict]:
    """Projects earning revenue in months ``[start_idx, end_idx)`` of the term, largest first."""
    if end_idx <= start_idx:
        end_idx = start_idx + 1
    start, _ = fiscal_term_range(term)
    months = term_months(start)[start_idx:end_idx]

    rows = []
    for p in projects:
        total = sum(monthly_revenue(p, ym) for ym in months)
        if total > 0:
            rows.append(
                dict(
                    project_id=p.id,
                    client_name=p.client_name,
                    project_name=p.project_name,
                    revenue_method=p.revenue_method if p.use_flow else None,
                    period_revenue=total,
                )
            )
    rows.sort(key=lambda r: r["period_revenue"], reverse=True)
    return rows


def lead_source_counts(projects: list[Project]) -> list[dict]:
    counts: dict[str, int] = {}
    for p in projects:
        key = p.lead_source_category or UNSET_LEAD_SOURCE
        counts[key] = counts.get(key, 0) + 1
    return [dict(name=k, value=v) for k, v in counts.items()]


def employee_utilization(
    employee: Employee,
    projects: list[Project],
    work_logs: list[WorkLog],
    term: int,
) -> dict:
    """Weekly logged hours against a standard week, plus planned weekly hours per project."""
    standard_weekly = employee.default_monthly_hours / WEEKS_PER_MONTH
    own_logs = [log for log in work_logs if log.employee_id == employee.id]

    weeks = []
    for m in months_with_weeks(term):
        for w in m["weeks"]:
            week_start = dt.date.fromisoformat(w["start_date"])
            actual = sum(log.actual_hours for log in own_logs if log.week_start_date == week_start)
            weeks.append(
                dict(
                    year_month=m["year_month"],
                    week_num=w["week_num"],
                    label=w["label"],
                    start_date=week_start,
                    actual_hours=actual,
                    utilization=_pct(actual, standard_weekly),
                )
            )

    planned = []
    for p in projects:
        a = next((a for a in p.assignments if a.employee_id == employee.id), None)
        if a is None:
            continue
        monthly_hours = employee.default_monthly_hours * (a.utilization_rate / 100)
        planned.append(
            dict(
                project_id=p.id,
                project_name=p.project_name,
                utilization_rate=a.utilization_rate,
                planned_weekly_hours=round(monthly_hours / WEEKS_PER_MONTH, 1),
            )
        )

    return dict(employee_id=employee.id, standard_weekly_hours=standard_weekly, weeks=weeks, projects=planned)
