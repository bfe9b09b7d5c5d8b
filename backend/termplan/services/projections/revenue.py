"""Monthly revenue recognition per contract kind.

Flow (fixed fee) follows the project's recognition method:

* milestone: the start portion ``floor(amount * ratio / 100)`` lands in the
  start month when billing is split, the rest (or everything, for a lump sum)
  in the end month;
* duration: ``amount // months`` in every month of the inclusive range, the
  remainder in the last month.

Stock posts its full monthly amount from the month containing its start date
onwards, with no pro-ration. Time charge is whatever was entered for the month.
"""
import datetime as dt
import math

from termplan.schemas.entities import Project, RevenueRecognitionMethod
from termplan.schemas.types import YearMonth


def _as_month(d: dt.date | YearMonth) -> YearMonth:
    return d if isinstance(d, YearMonth) else YearMonth.from_date(d)


def flow_start_portion(project: Project) -> int:
    """Amount billed at the start milestone; zero for lump-sum billing."""
    bc = project.billing_config
    if not bc.flow_split:
        return 0
    ratio = bc.flow_start_ratio or 0
    return math.floor(project.flow_amount * ratio / 100)


def flow_end_portion(project: Project) -> int:
    return project.flow_amount - flow_start_portion(project)


def flow_revenue(project: Project, ym: YearMonth) -> int:
    if not (project.use_flow and project.flow_start_date and project.flow_end_date):
        return 0
    s = project.flow_start_date
    e = project.flow_end_date

    if project.revenue_method == RevenueRecognitionMethod.milestone:
        revenue = 0
        if ym.contains(s) and project.billing_config.flow_split:
            revenue += flow_start_portion(project)
        if ym.contains(e):
            revenue += flow_end_portion(project)
        return revenue

    start_idx = YearMonth.from_date(s).index
    end_idx = YearMonth.from_date(e).index
    if not start_idx <= ym.index <= end_idx:
        return 0
    total_months = end_idx - start_idx + 1
    base, remainder = divmod(project.flow_amount, total_months)
    if ym.index == end_idx:
        return base + remainder
    return base


def stock_revenue(project: Project, ym: YearMonth) -> int:
    if not (project.use_stock and project.stock_start_date):
        return 0
    if project.stock_start_date <= ym.last_day:
        return project.stock_amount
    return 0


def time_charge_revenue(project: Project, ym: YearMonth) -> int:
    if not project.use_time_charge:
        return 0
    return project.time_charge_prices.get(ym) or 0


def recurring_revenue(project: Project, ym: YearMonth) -> int:
    """Stock plus time charge: the revenue billed on the stock payment schedule."""
    return stock_revenue(project, ym) + time_charge_revenue(project, ym)


def monthly_revenue(project: Project, d: dt.date | YearMonth) -> int:
    ym = _as_month(d)
    revenue = flow_revenue(project, ym) + stock_revenue(project, ym) + time_charge_revenue(project, ym)
    return math.floor(revenue)
