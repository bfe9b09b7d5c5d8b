import datetime as dt
from pydantic import BaseModel

from termplan.schemas.entities import ProjectStatus, RevenueRecognitionMethod
from termplan.schemas.types import YearMonth


class TermWeek(BaseModel):
    label: str
    start_date: dt.date
    week_num: int

class TermMonth(BaseModel):
    label: str
    year_month: YearMonth
    date: dt.date
    weeks: list[TermWeek]

class TermCalendarOut(BaseModel):
    term: int
    start: dt.date
    end: dt.date
    months: list[TermMonth]


class MonthlyProjection(BaseModel):
    label: str
    date: dt.date
    year_month: YearMonth
    revenue: int
    target: int
    confirmed_revenue: int
    potential_revenue: int
    flow_revenue: int
    stock_revenue: int
    labor_cost: int
    paid_cost: int
    sga: int
    tax_repayment: int
    investment: int
    cash_in: int
    financial_in: int
    total_cash_in: int
    total_cash_out: int
    cash_balance_change: int
    cash_balance: int

class ProjectionsOut(BaseModel):
    term: int
    months: list[MonthlyProjection]


class DailyCashFlowPoint(BaseModel):
    day: int
    date: dt.date
    change: int
    balance: int

class DailyCashFlowOut(BaseModel):
    year_month: YearMonth
    opening_balance: int
    days: list[DailyCashFlowPoint]


class ProjectMetricsRow(BaseModel):
    project_id: str
    client_name: str
    project_name: str
    status: ProjectStatus
    total_revenue: int
    total_cost: int
    profit: int
    profit_margin: float
    labor_share: float
    on_target: bool

class ProjectMetricsOut(BaseModel):
    term: int
    target_margin_min: float
    target_margin_max: float
    rows: list[ProjectMetricsRow]


class CostBreakdownRow(BaseModel):
    year_month: YearMonth
    label: str
    cost: int
    method: str  # actual | no_actual | planned | no_plan
    hours: float | None = None

class CostBreakdownOut(BaseModel):
    project_id: str
    rows: list[CostBreakdownRow]


class PeriodSummary(BaseModel):
    kind: str
    name: str
    label: str
    start_idx: int
    end_idx: int
    revenue: int
    target: int
    diff: int
    rate: float

class TermSummaryOut(BaseModel):
    term: int
    annual_revenue: int
    annual_target: int
    annual_diff: int
    achievement: float
    current_month_index: int
    periods: list[PeriodSummary]


class BreakdownRow(BaseModel):
    project_id: str
    client_name: str
    project_name: str
    revenue_method: RevenueRecognitionMethod | None = None
    period_revenue: int


class LeadSourceCount(BaseModel):
    name: str
    value: int


class WeekUtilization(BaseModel):
    year_month: YearMonth
    week_num: int
    label: str
    start_date: dt.date
    actual_hours: float
    utilization: float

class PlannedHours(BaseModel):
    project_id: str
    project_name: str
    utilization_rate: float
    planned_weekly_hours: float

class EmployeeUtilizationOut(BaseModel):
    employee_id: str
    standard_weekly_hours: float
    weeks: list[WeekUtilization]
    projects: list[PlannedHours]
