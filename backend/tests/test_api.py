PROJECT = {
    "client_name": "Sample Co.",
    "project_name": "Build",
    "status": "ordered",
    "use_flow": True,
    "flow_amount": 6_000_000,
    "flow_start_date": "2025-01-01",
    "flow_end_date": "2025-06-30",
    "revenue_method": "milestone",
    "billing_config": {
        "flow_split": True,
        "flow_start_ratio": 50,
        "flow_start_delay": 1,
        "flow_start_pay_day": 99,
        "flow_end_delay": 1,
        "flow_end_pay_day": 99,
    },
}


def _setup(client):
    emp = client.post("/employees", json={"name": "Ito", "default_monthly_cost": 600_000, "default_monthly_hours": 160})
    assert emp.status_code == 200
    emp_id = emp.json()["id"]
    body = dict(PROJECT, assignments=[{"employee_id": emp_id, "utilization_rate": 50}])
    proj = client.post("/projects", json=body)
    assert proj.status_code == 200
    return emp_id, proj.json()["id"]


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_project_validation(client):
    r = client.post("/projects", json={"client_name": "No contract"})
    assert r.status_code == 422
    r = client.post("/projects", json=dict(PROJECT, client_name="  "))
    assert r.status_code == 422
    r = client.post("/projects", json=dict(PROJECT, flow_end_date="2024-12-31"))
    assert r.status_code == 422


def test_crud_round_trip(client):
    emp_id, proj_id = _setup(client)
    assert [e["id"] for e in client.get("/employees").json()] == [emp_id]

    r = client.put(f"/projects/{proj_id}", json=dict(PROJECT, project_name="Renamed"))
    assert r.json()["project_name"] == "Renamed"
    assert client.get(f"/projects/{proj_id}/duration").json()["months"] == 5.9

    assert client.delete(f"/employees/{emp_id}").status_code == 204
    assert client.get("/employees").json() == []
    assert client.put("/projects/missing", json=PROJECT).status_code == 404
    assert client.delete("/projects/missing").status_code == 404


def test_work_logs(client):
    emp_id, proj_id = _setup(client)
    log = {"project_id": proj_id, "employee_id": emp_id, "week_start_date": "2025-02-03", "actual_hours": 10}
    assert client.put("/worklogs", json=log).status_code == 200
    assert client.put("/worklogs", json=dict(log, actual_hours=12)).status_code == 200
    logs = client.get("/worklogs", params={"project_id": proj_id}).json()
    assert len(logs) == 1 and logs[0]["actual_hours"] == 12
    assert client.put("/worklogs", json=dict(log, project_id="nope")).status_code == 404

    rows = client.get(f"/reports/projects/{proj_id}/cost-breakdown", params={"term": 2025}).json()["rows"]
    feb = next(r for r in rows if r["year_month"] == "2025-02")
    assert feb["method"] == "actual"
    assert feb["cost"] == 45_000


def test_projections_and_daily_cash(client):
    _setup(client)
    months = client.get("/reports/projections", params={"term": 2025}).json()["months"]
    assert len(months) == 12
    feb = months[2]
    assert feb["year_month"] == "2025-02"
    assert feb["cash_in"] == 3_300_000
    assert months[1]["revenue"] == 3_000_000

    daily = client.get("/reports/daily-cashflow", params={"month": "2025-02"}).json()
    assert daily["opening_balance"] == months[1]["cash_balance"]
    assert len(daily["days"]) == 28
    assert daily["days"][-1]["balance"] == feb["cash_balance"]

    explicit = client.get("/reports/daily-cashflow", params={"month": "2025-02", "opening_balance": 0}).json()
    assert explicit["days"][-1]["balance"] == feb["cash_balance"] - months[1]["cash_balance"]
    assert client.get("/reports/daily-cashflow", params={"month": "2025-13"}).status_code == 422


def test_term_setting_drives_defaults(client):
    assert client.get("/settings/term").json() == {"term": 2025}
    assert client.put("/settings/term", json={"term": 2026}).json() == {"term": 2026}
    cal = client.get("/reports/calendar").json()
    assert cal["term"] == 2026
    assert cal["start"] == "2025-12-01"
    assert cal["months"][0]["year_month"] == "2025-12"


def test_settings_replace(client):
    s = client.get("/settings").json()
    s["initial_cash_balance"] = 0
    s["cash_flow_items"] = []
    assert client.put("/settings", json=s).status_code == 200
    months = client.get("/reports/projections").json()["months"]
    assert all(m["cash_balance"] == 0 for m in months)


def test_reports(client):
    emp_id, proj_id = _setup(client)
    metrics = client.get("/reports/projects").json()
    assert metrics["rows"][0]["project_id"] == proj_id
    summary = client.get("/reports/summary").json()
    assert summary["current_month_index"] == 3
    assert summary["annual_revenue"] == 6_000_000
    breakdown = client.get("/reports/breakdown", params={"start": 1, "end": 2}).json()
    assert breakdown[0]["period_revenue"] == 3_000_000
    assert client.get("/reports/lead-sources").json() == [{"name": "unset", "value": 1}]
    util = client.get(f"/reports/employees/{emp_id}/utilization").json()
    assert util["projects"][0]["planned_weekly_hours"] == 18.5
    assert client.get("/reports/employees/nope/utilization").status_code == 404
    assert client.get("/reports/projects/nope/cost-breakdown").status_code == 404


def test_exports(client):
    _setup(client)
    xlsx = client.get("/reports/export/projections.xlsx")
    assert xlsx.status_code == 200
    assert xlsx.content[:2] == b"PK"
    pdf = client.get("/reports/export/metrics.pdf")
    assert pdf.status_code == 200
    assert pdf.content.startswith(b"%PDF")
