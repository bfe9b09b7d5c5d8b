import datetime as dt
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from termplan.core.config import settings
from termplan.core.deps import get_db, get_today
from termplan.db.base import Base
import termplan.db.models  # noqa: F401
from termplan.schemas.entities import (
    AppSettings,
    Assignment,
    BillingConfig,
    Employee,
    Project,
    ProjectStatus,
    RevenueRecognitionMethod,
)

TODAY = dt.date(2025, 3, 15)  # inside term 2025 (Dec 2024 .. Nov 2025)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db, monkeypatch, tmp_path):
    from termplan.main import app

    monkeypatch.setattr(settings, "SEED_DEMO", False)
    monkeypatch.setattr(settings, "EXPORT_DIR", str(tmp_path / "exports"))

    def _db():
        yield db

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_today] = lambda: TODAY
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def employee():
    return Employee(
        id="e1",
        name="Hayashi",
        default_monthly_cost=600_000,
        default_monthly_hours=160,
    )


@pytest.fixture
def flow_project():
    """6,000,000 build from Jan to Jun 2025, billed 50/50 at month end one month later."""
    return Project(
        id="p1",
        client_name="Sample Co.",
        project_name="Build",
        status=ProjectStatus.ordered,
        use_flow=True,
        flow_amount=6_000_000,
        flow_start_date=dt.date(2025, 1, 1),
        flow_end_date=dt.date(2025, 6, 30),
        revenue_method=RevenueRecognitionMethod.milestone,
        billing_config=BillingConfig(
            flow_split=True,
            flow_start_ratio=50,
            flow_start_delay=1,
            flow_start_pay_day=99,
            flow_end_delay=1,
            flow_end_pay_day=99,
        ),
        assignments=[Assignment(employee_id="e1", utilization_rate=50)],
    )


@pytest.fixture
def app_settings():
    return AppSettings(initial_cash_balance=1_000_000, monthly_sales_target=2_000_000)
