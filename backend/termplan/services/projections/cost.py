import datetime as dt
import math
from typing import Iterable

from termplan.schemas.entities import Employee, Project, WorkLog
from termplan.schemas.types import YearMonth
from termplan.services.projections.calendar import is_past_month, overlaps_month


def _employee_map(employees: Iterable[Employee]) -> dict[str, Employee]:
    return {e.id: e for e in employees}


def effective_monthly_data(employee: Employee, ym: YearMonth) -> tuple[int, float]:
    """(cost, hours) for the month: the per-month override if present, else defaults."""
    override = employee.monthly_data.get(ym)
    if override is not None:
        return override.cost, override.monthly_hours
    return employee.default_monthly_cost, employee.default_monthly_hours


def _plan_cost_applies(project: Project, ym: YearMonth) -> bool:
    # With a flow contract the team is assumed to work only during delivery,
    # not during the stock-only maintenance phase that may follow.
    if project.use_flow and project.flow_start_date and project.flow_end_date:
        return overlaps_month(ym, project.flow_start_date, project.flow_end_date)
    if not project.use_flow and project.use_stock and project.stock_start_date:
        return ym.last_day >= project.stock_start_date
    if not (project.use_flow or project.use_stock or project.use_time_charge):
        return False
    return True


def planned_monthly_cost(project: Project, employees: Iterable[Employee], year: int, month: int) -> int:
    ym = YearMonth(year, month)
    if not _plan_cost_applies(project, ym):
        return 0

    by_id = _employee_map(employees)
    cost = 0.0
    for a in project.assignments:
        emp = by_id.get(a.employee_id)
        if emp is None:
            continue
        emp_cost, _ = effective_monthly_data(emp, ym)
        cost += emp_cost * (a.utilization_rate / 100)
    return math.floor(cost)


def project_month_logs(project: Project, work_logs: Iterable[WorkLog], ym: YearMonth) -> list[WorkLog]:
    return [
        log for log in work_logs
        if log.project_id == project.id and ym.contains(log.week_start_date)
    ]


def actual_monthly_cost(
    project: Project,
    employees: Iterable[Employee],
    work_logs: Iterable[WorkLog],
    year: int,
    month: int,
) -> int:
    ym = YearMonth(year, month)
    by_id = _employee_map(employees)
    cost = 0.0
    for log in project_month_logs(project, work_logs, ym):
        emp = by_id.get(log.employee_id)
        if emp is None:
            continue
        emp_cost, hours = effective_monthly_data(emp, ym)
        hourly_rate = emp_cost / hours if hours > 0 else 0.0
        cost += log.actual_hours * hourly_rate
    return math.floor(cost)


def monthly_labor_cost(
    project: Project,
    employees: list[Employee],
    work_logs: list[WorkLog],
    ym: YearMonth,
    today: dt.date,
) -> int:
    """Actual cost for months before ``today``'s month, planned cost otherwise."""
    if is_past_month(ym, today):
        return actual_monthly_cost(project, employees, work_logs, ym.year, ym.month)
    return planned_monthly_cost(project, employees, ym.year, ym.month)


def total_labor_cost(
    projects: list[Project],
    employees: list[Employee],
    work_logs: list[WorkLog],
    ym: YearMonth,
    today: dt.date,
) -> int:
    return sum(monthly_labor_cost(p, employees, work_logs, ym, today) for p in projects)


def cost_breakdown(
    project: Project,
    employees: list[Employee],
    work_logs: list[WorkLog],
    months: list[YearMonth],
    today: dt.date,
) -> list[dict]:
    rows = []
    for ym in months:
        hours = None
        if is_past_month(ym, today):
            cost = actual_monthly_cost(project, employees, work_logs, ym.year, ym.month)
            logs = project_month_logs(project, work_logs, ym)
            if logs:
                method = "actual"
                hours = sum(log.actual_hours for log in logs)
            else:
                method = "no_actual"
        else:
            cost = planned_monthly_cost(project, employees, ym.year, ym.month)
            method = "planned" if cost > 0 else "no_plan"
        rows.append(
            dict(
                year_month=ym,
                label=f"{ym.year}/{ym.month}",
                cost=cost,
                method=method,
                hours=hours,
            )
        )
    return rows
