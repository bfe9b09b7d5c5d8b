import datetime as dt
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse

from termplan.core.deps import get_snapshot, get_today, resolve_term
from termplan.crud.snapshot import get_employee, get_project
from termplan.schemas.entities import Snapshot
from termplan.schemas.reports import (
    BreakdownRow,
    CostBreakdownOut,
    DailyCashFlowOut,
    EmployeeUtilizationOut,
    LeadSourceCount,
    ProjectionsOut,
    ProjectMetricsOut,
    TermCalendarOut,
    TermSummaryOut,
)
from termplan.schemas.types import YearMonth
from termplan.services.exports.exporter import (
    default_export_path,
    export_metrics_pdf,
    export_projections_xlsx,
)
from termplan.services.projections.calendar import fiscal_term_range, months_with_weeks, term_months
from termplan.services.projections.cost import cost_breakdown
from termplan.services.projections.service import (
    generate_daily_cash_flow,
    generate_projections,
    opening_balance_for,
)
from termplan.services.reports.service import (
    employee_utilization,
    lead_source_counts,
    project_metrics,
    revenue_breakdown,
    term_summary,
)

router = APIRouter()

def _parse_month(s: str) -> YearMonth:
    try:
        return YearMonth.parse(s)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid month: {s}")

def _projections(snap: Snapshot, term: int, today: dt.date) -> list[dict]:
    start, _ = fiscal_term_range(term)
    return generate_projections(snap.projects, snap.employees, snap.work_logs, start, snap.settings, today)

@router.get("/calendar", response_model=TermCalendarOut)
def calendar(term: int | None = Query(None), snap: Snapshot = Depends(get_snapshot)):
    term = resolve_term(snap, term)
    start, end = fiscal_term_range(term)
    return {"term": term, "start": start, "end": end, "months": months_with_weeks(term)}

@router.get("/projections", response_model=ProjectionsOut)
def projections(
    term: int | None = Query(None),
    snap: Snapshot = Depends(get_snapshot),
    today: dt.date = Depends(get_today),
):
    term = resolve_term(snap, term)
    return {"term": term, "months": _projections(snap, term, today)}

@router.get("/daily-cashflow", response_model=DailyCashFlowOut)
def daily_cashflow(
    month: str = Query(..., pattern=r"^\d{4}-\d{2}$"),
    opening_balance: int | None = Query(None),
    snap: Snapshot = Depends(get_snapshot),
    today: dt.date = Depends(get_today),
):
    ym = _parse_month(month)
    if opening_balance is None:
        opening_balance = opening_balance_for(
            ym, snap.projects, snap.employees, snap.work_logs, snap.settings, today
        )
    days = generate_daily_cash_flow(ym.first_day, snap.projects, snap.settings, opening_balance)
    return {"year_month": ym, "opening_balance": opening_balance, "days": days}

@router.get("/projects", response_model=ProjectMetricsOut)
def projects_metrics(
    term: int | None = Query(None),
    snap: Snapshot = Depends(get_snapshot),
    today: dt.date = Depends(get_today),
):
    term = resolve_term(snap, term)
    return project_metrics(snap.projects, snap.employees, snap.work_logs, term, snap.settings, today)

@router.get("/projects/{project_id}/cost-breakdown", response_model=CostBreakdownOut)
def project_cost_breakdown(
    project_id: str,
    term: int | None = Query(None),
    snap: Snapshot = Depends(get_snapshot),
    today: dt.date = Depends(get_today),
):
    p = get_project(snap, project_id)
    if not p:
        raise HTTPException(status_code=404, detail="Project not found")
    start, _ = fiscal_term_range(resolve_term(snap, term))
    rows = cost_breakdown(p, snap.employees, snap.work_logs, term_months(start), today)
    return {"project_id": project_id, "rows": rows}

@router.get("/summary", response_model=TermSummaryOut)
def summary(
    term: int | None = Query(None),
    snap: Snapshot = Depends(get_snapshot),
    today: dt.date = Depends(get_today),
):
    term = resolve_term(snap, term)
    return term_summary(_projections(snap, term, today), term, today)

@router.get("/breakdown", response_model=list[BreakdownRow])
def breakdown(
    start: int = Query(0, ge=0, le=11),
    end: int = Query(12, ge=0, le=12),
    term: int | None = Query(None),
    snap: Snapshot = Depends(get_snapshot),
):
    return revenue_breakdown(snap.projects, resolve_term(snap, term), start, end)

@router.get("/lead-sources", response_model=list[LeadSourceCount])
def lead_sources(snap: Snapshot = Depends(get_snapshot)):
    return lead_source_counts(snap.projects)

@router.get("/employees/{employee_id}/utilization", response_model=EmployeeUtilizationOut)
def utilization(
    employee_id: str,
    term: int | None = Query(None),
    snap: Snapshot = Depends(get_snapshot),
):
    emp = get_employee(snap, employee_id)
    if not emp:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee_utilization(emp, snap.projects, snap.work_logs, resolve_term(snap, term))

@router.get("/export/projections.xlsx")
def export_projections(
    term: int | None = Query(None),
    snap: Snapshot = Depends(get_snapshot),
    today: dt.date = Depends(get_today),
):
    term = resolve_term(snap, term)
    out = default_export_path(f"projections_{term}", "xlsx")
    export_projections_xlsx(_projections(snap, term, today), out)
    return FileResponse(str(out), media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", filename=out.name)

@router.get("/export/metrics.pdf")
def export_metrics(
    term: int | None = Query(None),
    snap: Snapshot = Depends(get_snapshot),
    today: dt.date = Depends(get_today),
):
    term = resolve_term(snap, term)
    data = project_metrics(snap.projects, snap.employees, snap.work_logs, term, snap.settings, today)
    out = default_export_path(f"metrics_{term}", "pdf")
    export_metrics_pdf(data, out)
    return FileResponse(str(out), media_type="application/pdf", filename=out.name)
