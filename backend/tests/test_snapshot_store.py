import datetime as dt

import structlog

from termplan.core.config import settings
from termplan.core.deps import get_snapshot
from termplan.crud.snapshot import (
    add_employee,
    add_project,
    delete_employee,
    delete_project,
    load_snapshot,
    save_snapshot,
    update_project,
    upsert_work_log,
)
from termplan.schemas.entities import EmployeeIn, MonthlyEmployeeData, ProjectIn, ProjectTask, Snapshot, WorkLogIn
from termplan.schemas.types import YearMonth

TODAY = dt.date(2025, 3, 15)


def test_first_load_seeds_demo_data(db, monkeypatch):
    monkeypatch.setattr(settings, "SEED_DEMO", True)
    snap = load_snapshot(db, TODAY)
    assert snap.current_term == 2025
    assert [e.id for e in snap.employees] == ["1", "2"]
    assert snap.projects[0].flow_start_date == dt.date(2025, 1, 1)
    assert snap.settings.cash_flow_items[0].period_start == YearMonth(2024, 12)


def test_empty_store_without_seed(db, monkeypatch):
    monkeypatch.setattr(settings, "SEED_DEMO", False)
    snap = load_snapshot(db, dt.date(2024, 12, 2))
    assert snap.projects == []
    assert snap.current_term == 2025
    assert snap.settings.initial_cash_balance == 10_000_000


def test_snapshot_round_trips_through_json(db, monkeypatch):
    monkeypatch.setattr(settings, "SEED_DEMO", False)
    snap = load_snapshot(db, TODAY)
    emp = add_employee(db, snap, EmployeeIn(name="Ito", default_monthly_cost=500_000, default_monthly_hours=150))
    snap.employees[0].monthly_data[YearMonth(2025, 4)] = MonthlyEmployeeData(cost=1, monthly_hours=2)
    save_snapshot(db, Snapshot.model_validate(snap.model_dump(mode="json")))

    again = load_snapshot(db, TODAY)
    assert again.employees[0].id == emp.id
    assert again.employees[0].monthly_data[YearMonth(2025, 4)].cost == 1


def _project(**kw):
    data = dict(client_name="Acme", use_time_charge=True)
    data.update(kw)
    return ProjectIn(**data)


def test_delete_employee_removes_assignments_keeps_logs(db, monkeypatch):
    monkeypatch.setattr(settings, "SEED_DEMO", False)
    snap = load_snapshot(db, TODAY)
    emp = add_employee(db, snap, EmployeeIn(name="Ito"))
    proj = add_project(db, snap, _project(assignments=[{"employee_id": emp.id, "utilization_rate": 40}]))
    upsert_work_log(db, snap, WorkLogIn(project_id=proj.id, employee_id=emp.id, week_start_date="2025-03-03", actual_hours=8))

    delete_employee(db, snap, emp.id)
    snap = load_snapshot(db, TODAY)
    assert snap.employees == []
    assert snap.projects[0].assignments == []
    assert len(snap.work_logs) == 1


def test_delete_project_purges_its_logs(db, monkeypatch):
    monkeypatch.setattr(settings, "SEED_DEMO", False)
    snap = load_snapshot(db, TODAY)
    keep = add_project(db, snap, _project(client_name="Keep"))
    drop = add_project(db, snap, _project(client_name="Drop"))
    for pid in (keep.id, drop.id):
        upsert_work_log(db, snap, WorkLogIn(project_id=pid, employee_id="e", week_start_date="2025-03-03", actual_hours=1))

    delete_project(db, snap, drop.id)
    snap = load_snapshot(db, TODAY)
    assert [p.id for p in snap.projects] == [keep.id]
    assert [log.project_id for log in snap.work_logs] == [keep.id]


def test_work_log_upsert_updates_hours(db, monkeypatch):
    monkeypatch.setattr(settings, "SEED_DEMO", False)
    snap = load_snapshot(db, TODAY)
    data = WorkLogIn(project_id="p", task_id="t", employee_id="e", week_start_date="2025-03-03", actual_hours=4)
    first = upsert_work_log(db, snap, data)
    second = upsert_work_log(db, snap, data.model_copy(update={"actual_hours": 6}))
    assert first.id == second.id
    assert len(snap.work_logs) == 1
    assert snap.work_logs[0].actual_hours == 6


def test_removing_task_keeps_its_logs(db, monkeypatch):
    monkeypatch.setattr(settings, "SEED_DEMO", False)
    snap = load_snapshot(db, TODAY)
    proj = add_project(db, snap, _project(project_tasks=[ProjectTask(id="t1", name="Build")]))
    upsert_work_log(db, snap, WorkLogIn(project_id=proj.id, task_id="t1", employee_id="e", week_start_date="2025-03-03", actual_hours=3))

    update_project(db, snap, proj.id, _project(project_tasks=[]))
    snap = load_snapshot(db, TODAY)
    assert snap.projects[0].project_tasks == []
    assert snap.work_logs[0].task_id == "t1"


def test_request_log_context_holds_only_the_term(db, monkeypatch):
    monkeypatch.setattr(settings, "SEED_DEMO", False)
    structlog.contextvars.bind_contextvars(stale="left over")
    try:
        get_snapshot(db, TODAY)
        assert structlog.contextvars.get_contextvars() == {"term": 2025}
    finally:
        structlog.contextvars.clear_contextvars()
