import datetime as dt
from collections import defaultdict

from termplan.core.logging import logger
from termplan.schemas.entities import (
    AppSettings,
    Employee,
    Project,
    ProjectStatus,
    WorkLog,
)
from termplan.schemas.types import YearMonth
from termplan.services.projections.calendar import (
    current_term_for,
    fiscal_term_range,
    month_label,
    term_months,
)
from termplan.services.projections.cash import (
    CashEvent,
    cash_events,
    ledger_bucket,
    with_tax,
)
from termplan.services.projections.cost import total_labor_cost
from termplan.services.projections.revenue import monthly_revenue, stock_revenue

CONFIRMED_STATUSES = (ProjectStatus.ordered, ProjectStatus.delivered)


def _events_by_month(events: list[CashEvent]) -> dict[YearMonth, list[CashEvent]]:
    out: dict[YearMonth, list[CashEvent]] = defaultdict(list)
    for ev in events:
        out[YearMonth.from_date(ev.date)].append(ev)
    return out


def _revenue_split(projects: list[Project], ym: YearMonth) -> dict[str, int]:
    revenue = confirmed = potential = flow = stock = 0
    for p in projects:
        rev = monthly_revenue(p, ym)
        revenue += rev
        if p.status in CONFIRMED_STATUSES:
            confirmed += rev
        elif p.status == ProjectStatus.pre_order:
            potential += rev
        s_part = min(stock_revenue(p, ym), rev)
        stock += s_part
        flow += rev - s_part
    return dict(
        revenue=revenue,
        confirmed_revenue=confirmed,
        potential_revenue=potential,
        flow_revenue=flow,
        stock_revenue=stock,
    )


def sales_target(settings: AppSettings, ym: YearMonth) -> int:
    return settings.sales_targets.get(ym) or settings.monthly_sales_target or 0


def generate_projections(
    projects: list[Project],
    employees: list[Employee],
    work_logs: list[WorkLog],
    term_start: dt.date,
    settings: AppSettings,
    today: dt.date,
) -> list[dict]:
    """Twelve monthly P&L / cash-flow records starting at ``term_start``.

    Labor cost is actual for months before ``today``'s month and planned from
    assignments otherwise; it is paid one month in arrears. Project cash-in is
    marked up with consumption tax after summing the month's receipts.
    """
    months = term_months(term_start)
    events = _events_by_month(cash_events(projects, settings, months[0], months[-1]))

    rows = []
    balance = settings.initial_cash_balance
    for ym in months:
        split = _revenue_split(projects, ym)
        labor_cost = total_labor_cost(projects, employees, work_logs, ym, today)
        paid_cost = total_labor_cost(projects, employees, work_logs, ym.shift(-1), today)

        receipts = 0
        ledger = {"sga": 0, "tax_repayment": 0, "investment": 0, "financial_in": 0}
        for ev in events.get(ym, []):
            if ev.is_project_inflow:
                receipts += ev.amount
            else:
                bucket = ledger_bucket(ev.category)
                ledger[bucket] += ev.amount if bucket == "financial_in" else -ev.amount

        cash_in = with_tax(receipts)
        total_cash_in = cash_in + ledger["financial_in"]
        total_cash_out = paid_cost + ledger["sga"] + ledger["tax_repayment"] + ledger["investment"]
        change = total_cash_in - total_cash_out
        balance += change

        rows.append(
            dict(
                label=month_label(ym),
                date=ym.first_day,
                year_month=ym,
                target=sales_target(settings, ym),
                **split,
                labor_cost=labor_cost,
                paid_cost=paid_cost,
                sga=ledger["sga"],
                tax_repayment=ledger["tax_repayment"],
                investment=ledger["investment"],
                cash_in=cash_in,
                financial_in=ledger["financial_in"],
                total_cash_in=total_cash_in,
                total_cash_out=total_cash_out,
                cash_balance_change=change,
                cash_balance=balance,
            )
        )

    logger.debug(
        "projections_generated",
        term_start=term_start.isoformat(),
        projects=len(projects),
        closing_balance=balance,
    )
    return rows


def generate_daily_cash_flow(
    date: dt.date,
    projects: list[Project],
    settings: AppSettings,
    initial_balance: int,
) -> list[dict]:
    """Running balance for each calendar day of the month containing ``date``.

    Tax on project receipts is allocated cumulatively, so the days of a month
    add up to exactly the monthly ``cash_in``. Labor payments are not dated
    and do not appear here.
    """
    ym = YearMonth.from_date(date)
    receipts: dict[int, int] = defaultdict(int)
    ledger: dict[int, int] = defaultdict(int)
    for ev in cash_events(projects, settings, ym, ym):
        if ev.is_project_inflow:
            receipts[ev.date.day] += ev.amount
        else:
            ledger[ev.date.day] += ev.amount

    rows = []
    balance = initial_balance
    cum_receipts = 0
    taxed_so_far = 0
    for day in range(1, ym.days + 1):
        cum_receipts += receipts[day]
        taxed_cum = with_tax(cum_receipts)
        change = (taxed_cum - taxed_so_far) + ledger[day]
        taxed_so_far = taxed_cum
        balance += change
        rows.append(dict(day=day, date=dt.date(ym.year, ym.month, day), change=change, balance=balance))
    return rows


def opening_balance_for(
    ym: YearMonth,
    projects: list[Project],
    employees: list[Employee],
    work_logs: list[WorkLog],
    settings: AppSettings,
    today: dt.date,
) -> int:
    """Projected balance at the close of the month before ``ym`` within its term."""
    term_start, _ = fiscal_term_range(current_term_for(ym.first_day))
    if ym == YearMonth.from_date(term_start):
        return settings.initial_cash_balance
    rows = generate_projections(projects, employees, work_logs, term_start, settings, today)
    prev = ym.shift(-1)
    for row in rows:
        if row["year_month"] == prev:
            return row["cash_balance"]
    return settings.initial_cash_balance
