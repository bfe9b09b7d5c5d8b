import datetime as dt

from termplan.schemas.entities import (
    AppSettings,
    BillingConfig,
    CashFlowCategory,
    CashFlowItem,
    ContractType,
    Employee,
    Project,
    ProjectStatus,
    ProjectTask,
    ProjectType,
    RevenueRecognitionMethod,
    Snapshot,
    Assignment,
)
from termplan.services.projections.calendar import current_term_for


def default_settings(term: int) -> AppSettings:
    return AppSettings(
        target_labor_share_min=40,
        target_labor_share_max=50,
        monthly_sales_target=5_000_000,
        initial_cash_balance=10_000_000,
        cash_flow_items=[
            CashFlowItem(
                id="cf-1",
                name="Office rent",
                category=CashFlowCategory.operating_expense,
                amount=200_000,
                is_recurring=True,
                period_start=f"{term - 1}-12",
                pay_day=25,
            ),
            CashFlowItem(
                id="cf-2",
                name="Interim corporate tax",
                category=CashFlowCategory.tax,
                amount=1_500_000,
                payment_date=dt.date(term, 5, 31),
            ),
            CashFlowItem(
                id="cf-3",
                name="Loan repayment",
                category=CashFlowCategory.loan_repayment,
                amount=150_000,
                is_recurring=True,
                period_start=f"{term - 1}-12",
                pay_day=10,
            ),
        ],
        lead_source_options={
            "networking": [],
            "referral": [],
            "exhibition": [],
            "inbound": ["press release"],
            "outbound": [],
            "repeat": [],
        },
    )


def seed_snapshot(today: dt.date) -> Snapshot:
    term = current_term_for(today)
    employees = [
        Employee(
            id="1",
            name="Hayashi",
            contract_type=ContractType.full_time,
            default_monthly_cost=600_000,
            default_monthly_hours=160,
        ),
        Employee(
            id="2",
            name="Andrews",
            contract_type=ContractType.contractor,
            default_monthly_cost=400_000,
            default_monthly_hours=120,
        ),
    ]
    # six-month build billed 50/50, then maintenance from the following month
    projects = [
        Project(
            id="101",
            client_name="Sample Co., Ltd.",
            project_name="DX platform build + maintenance",
            project_type=ProjectType.dev,
            status=ProjectStatus.ordered,
            use_flow=True,
            flow_amount=6_000_000,
            flow_start_date=dt.date(term, 1, 1),
            flow_end_date=dt.date(term, 6, 30),
            revenue_method=RevenueRecognitionMethod.milestone,
            use_stock=True,
            stock_amount=50_000,
            stock_start_date=dt.date(term, 7, 1),
            project_tasks=[
                ProjectTask(id="t1", name="Requirements"),
                ProjectTask(id="t2", name="Design & build"),
                ProjectTask(id="t3", name="Test & delivery"),
            ],
            billing_config=BillingConfig(
                flow_split=True,
                flow_start_ratio=50,
                flow_start_delay=1,
                flow_start_pay_day=99,
                flow_end_delay=1,
                flow_end_pay_day=99,
                stock_delay=1,
                stock_pay_day=99,
            ),
            assignments=[Assignment(employee_id="1", utilization_rate=50)],
        )
    ]
    return Snapshot(
        employees=employees,
        projects=projects,
        work_logs=[],
        settings=default_settings(term),
        current_term=term,
    )
