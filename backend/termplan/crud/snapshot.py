import datetime as dt
import uuid

from pydantic import ValidationError
from sqlalchemy.orm import Session

from termplan.core.config import settings
from termplan.core.logging import logger
from termplan.db.models.snapshot import AppSnapshot
from termplan.schemas.entities import (
    AppSettings,
    Employee,
    EmployeeIn,
    Project,
    ProjectIn,
    Snapshot,
    WorkLog,
    WorkLogIn,
)
from termplan.services.projections.calendar import current_term_for
from termplan.services.seed import default_settings, seed_snapshot


def generate_id() -> str:
    return uuid.uuid4().hex[:12]


def _empty_snapshot(today: dt.date) -> Snapshot:
    term = current_term_for(today)
    return Snapshot(settings=default_settings(term), current_term=term)


def load_snapshot(db: Session, today: dt.date) -> Snapshot:
    row = db.get(AppSnapshot, settings.STORAGE_KEY)
    if row is None:
        snap = seed_snapshot(today) if settings.SEED_DEMO else _empty_snapshot(today)
        logger.info("snapshot_initialized", storage_key=settings.STORAGE_KEY, seeded=settings.SEED_DEMO)
        return save_snapshot(db, snap)
    try:
        snap = Snapshot.model_validate(row.payload)
    except ValidationError:
        logger.exception("snapshot_invalid", storage_key=settings.STORAGE_KEY)
        raise
    if snap.current_term is None:
        snap.current_term = current_term_for(today)
    return snap


def save_snapshot(db: Session, snap: Snapshot) -> Snapshot:
    payload = snap.model_dump(mode="json")
    row = db.get(AppSnapshot, settings.STORAGE_KEY)
    if row is None:
        db.add(AppSnapshot(storage_key=settings.STORAGE_KEY, payload=payload))
    else:
        row.payload = payload
    db.commit()
    return snap


# -----------------------------
# Employees
# -----------------------------
def get_employee(snap: Snapshot, employee_id: str) -> Employee | None:
    return next((e for e in snap.employees if e.id == employee_id), None)


def add_employee(db: Session, snap: Snapshot, data: EmployeeIn) -> Employee:
    emp = Employee(**data.model_dump(), id=generate_id())
    snap.employees.append(emp)
    save_snapshot(db, snap)
    logger.info("employee_added", employee_id=emp.id)
    return emp


def update_employee(db: Session, snap: Snapshot, employee_id: str, data: EmployeeIn) -> Employee:
    emp = Employee(**data.model_dump(), id=employee_id)
    snap.employees = [emp if e.id == emp.id else e for e in snap.employees]
    save_snapshot(db, snap)
    logger.info("employee_updated", employee_id=emp.id)
    return emp


def delete_employee(db: Session, snap: Snapshot, employee_id: str) -> None:
    snap.employees = [e for e in snap.employees if e.id != employee_id]
    # assignments go with the employee; work logs stay and simply stop costing
    for p in snap.projects:
        p.assignments = [a for a in p.assignments if a.employee_id != employee_id]
    save_snapshot(db, snap)
    logger.info("employee_deleted", employee_id=employee_id)


# -----------------------------
# Projects
# -----------------------------
def get_project(snap: Snapshot, project_id: str) -> Project | None:
    return next((p for p in snap.projects if p.id == project_id), None)


def add_project(db: Session, snap: Snapshot, data: ProjectIn) -> Project:
    proj = Project(**data.model_dump(), id=generate_id())
    snap.projects.append(proj)
    save_snapshot(db, snap)
    logger.info("project_added", project_id=proj.id)
    return proj


def update_project(db: Session, snap: Snapshot, project_id: str, data: ProjectIn) -> Project:
    proj = Project(**data.model_dump(), id=project_id)
    snap.projects = [proj if p.id == project_id else p for p in snap.projects]
    # logs of removed tasks are kept: cost is attributed per project, not per task
    save_snapshot(db, snap)
    logger.info("project_updated", project_id=project_id)
    return proj


def delete_project(db: Session, snap: Snapshot, project_id: str) -> None:
    snap.projects = [p for p in snap.projects if p.id != project_id]
    before = len(snap.work_logs)
    snap.work_logs = [log for log in snap.work_logs if log.project_id != project_id]
    save_snapshot(db, snap)
    logger.info("project_deleted", project_id=project_id, work_logs_removed=before - len(snap.work_logs))


# -----------------------------
# Work logs
# -----------------------------
def list_work_logs(snap: Snapshot, project_id: str | None = None, employee_id: str | None = None) -> list[WorkLog]:
    out = snap.work_logs
    if project_id is not None:
        out = [log for log in out if log.project_id == project_id]
    if employee_id is not None:
        out = [log for log in out if log.employee_id == employee_id]
    return out


def upsert_work_log(db: Session, snap: Snapshot, data: WorkLogIn) -> WorkLog:
    for log in snap.work_logs:
        if (
            log.project_id == data.project_id
            and log.task_id == data.task_id
            and log.employee_id == data.employee_id
            and log.week_start_date == data.week_start_date
        ):
            log.actual_hours = data.actual_hours
            save_snapshot(db, snap)
            return log
    log = WorkLog(**data.model_dump(), id=generate_id())
    snap.work_logs.append(log)
    save_snapshot(db, snap)
    return log


# -----------------------------
# Settings / term
# -----------------------------
def update_settings(db: Session, snap: Snapshot, new_settings: AppSettings) -> AppSettings:
    snap.settings = new_settings
    save_snapshot(db, snap)
    logger.info("settings_updated", cash_flow_items=len(new_settings.cash_flow_items))
    return new_settings


def set_current_term(db: Session, snap: Snapshot, term: int) -> int:
    snap.current_term = term
    save_snapshot(db, snap)
    return term
