import datetime as dt
import math
from dataclasses import dataclass
from decimal import Decimal

from termplan.core.config import settings as app_config
from termplan.core.logging import logger
from termplan.schemas.entities import (
    END_OF_MONTH,
    AppSettings,
    CashFlowCategory,
    CashFlowItem,
    Project,
)
from termplan.schemas.types import YearMonth
from termplan.services.projections.revenue import (
    flow_end_portion,
    flow_start_portion,
    recurring_revenue,
)

DEFAULT_LEDGER_PAY_DAY = 25

# cash-out buckets of the monthly ledger; loan-in is the only inflow
LEDGER_BUCKETS = {
    CashFlowCategory.operating_expense.value: "sga",
    CashFlowCategory.tax.value: "tax_repayment",
    CashFlowCategory.loan_repayment.value: "tax_repayment",
    CashFlowCategory.investment.value: "investment",
    CashFlowCategory.loan_in.value: "financial_in",
}


@dataclass(frozen=True)
class CashEvent:
    date: dt.date
    amount: int  # project events: tax-exclusive; ledger events: signed
    kind: str  # flow_start | flow_end | recurring_revenue | ledger
    source_id: str
    category: str | None = None

    @property
    def is_project_inflow(self) -> bool:
        return self.kind != "ledger"


def _resolve_day(ym: YearMonth, pay_day: int | None, default: int = END_OF_MONTH) -> dt.date:
    day = default if not pay_day else pay_day
    if day == END_OF_MONTH:
        return ym.last_day
    # Not clamped to the month length: day 31 in a 30-day month is the 1st of
    # the next month, exactly what adding days to the 1st gives.
    resolved = ym.first_day + dt.timedelta(days=day - 1)
    if not ym.contains(resolved):
        logger.debug("pay_day_rolled_over", year_month=str(ym), pay_day=day, resolved=resolved.isoformat())
    return resolved


def payment_date(year: int, month: int, delay: int, pay_day: int | None) -> dt.date:
    """Date a billing event in ``year``/``month`` is paid: ``delay`` months later on ``pay_day``.

    ``pay_day`` 99 (or 0/None) is the last day of the shifted month.
    """
    return _resolve_day(YearMonth(year, month).shift(delay or 0), pay_day)


def recurring_payment_date(ym: YearMonth, pay_day: int | None, default: int = END_OF_MONTH) -> dt.date:
    """Pay day of a monthly charge, kept inside ``ym``.

    A day past the month length falls on the last day, so every month of a
    recurrence is booked exactly once and in its own month.
    """
    day = default if not pay_day else pay_day
    if day == END_OF_MONTH or day > ym.days:
        return ym.last_day
    return dt.date(ym.year, ym.month, day)


def with_tax(amount: int | float) -> int:
    rate = Decimal(str(app_config.CONSUMPTION_TAX_RATE))
    return math.floor(Decimal(str(amount)) * (1 + rate))


def ledger_bucket(category: str | None) -> str:
    return LEDGER_BUCKETS.get(category or "", "sga")


def ledger_sign(category: str | None) -> int:
    return 1 if category == CashFlowCategory.loan_in.value else -1


def _months(first: YearMonth, last: YearMonth) -> list[YearMonth]:
    return [first.shift(i) for i in range(last.index - first.index + 1)]


def _project_events(project: Project, window_start: YearMonth, window_end: YearMonth) -> list[CashEvent]:
    events: list[CashEvent] = []
    bc = project.billing_config

    if project.use_flow:
        if project.flow_start_date:
            s = project.flow_start_date
            amount = flow_start_portion(project)
            if amount:
                events.append(
                    CashEvent(
                        payment_date(s.year, s.month, bc.flow_start_delay, bc.flow_start_pay_day),
                        amount,
                        "flow_start",
                        project.id,
                    )
                )
        if project.flow_end_date:
            e = project.flow_end_date
            amount = flow_end_portion(project)
            if amount:
                events.append(
                    CashEvent(
                        payment_date(e.year, e.month, bc.flow_end_delay, bc.flow_end_pay_day),
                        amount,
                        "flow_end",
                        project.id,
                    )
                )

    if (project.use_stock and project.stock_start_date) or project.use_time_charge:
        delay = bc.stock_delay or 0
        for rev_month in _months(window_start.shift(-delay), window_end):
            rev = recurring_revenue(project, rev_month)
            if rev > 0:
                events.append(
                    CashEvent(
                        recurring_payment_date(rev_month.shift(delay), bc.stock_pay_day),
                        rev,
                        "recurring_revenue",
                        project.id,
                    )
                )
    return events


def _ledger_events(item: CashFlowItem, window_start: YearMonth, window_end: YearMonth) -> list[CashEvent]:
    sign = ledger_sign(item.category)
    dates: list[dt.date] = []
    if item.is_recurring:
        if item.period_start is None:
            return []
        for ym in _months(window_start, window_end):
            if ym < item.period_start:
                continue
            if item.period_end is not None and ym > item.period_end:
                continue
            dates.append(recurring_payment_date(ym, item.pay_day, default=DEFAULT_LEDGER_PAY_DAY))
    else:
        if item.payment_date is not None:
            dates.append(item.payment_date)
        elif item.target_month is not None:
            dates.append(item.target_month.first_day)
    return [CashEvent(d, sign * item.amount, "ledger", item.id, item.category) for d in dates]


def cash_events(
    projects: list[Project],
    settings: AppSettings,
    window_start: YearMonth,
    window_end: YearMonth,
) -> list[CashEvent]:
    """Every dated cash movement falling between the first and last month (inclusive).

    Both the monthly projection and the daily distribution sample this list.
    """
    lo, hi = window_start.first_day, window_end.last_day
    events: list[CashEvent] = []
    for p in projects:
        events.extend(_project_events(p, window_start, window_end))
    for item in settings.cash_flow_items:
        events.extend(_ledger_events(item, window_start, window_end))
    return sorted(
        (ev for ev in events if lo <= ev.date <= hi),
        key=lambda ev: (ev.date, ev.kind, ev.source_id),
    )
