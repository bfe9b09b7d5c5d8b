import datetime as dt
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from termplan.schemas.types import YearMonth

END_OF_MONTH = 99


class ContractType(str, Enum):
    full_time = "full_time"
    contractor = "contractor"


class ProjectType(str, Enum):
    dev = "dev"
    consulting = "consulting"
    seminar = "seminar"
    bpo = "bpo"


class ProjectStatus(str, Enum):
    pre_order = "pre_order"
    ordered = "ordered"
    delivered = "delivered"
    lost = "lost"


class RevenueRecognitionMethod(str, Enum):
    duration = "duration"
    milestone = "milestone"


class CashFlowCategory(str, Enum):
    operating_expense = "operating_expense"
    tax = "tax"
    loan_repayment = "loan_repayment"
    loan_in = "loan_in"
    investment = "investment"
    other = "other"


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class MonthlyEmployeeData(BaseModel):
    cost: int
    monthly_hours: float


class EmployeeIn(BaseModel):
    name: str = Field(min_length=1)
    contract_type: ContractType = ContractType.full_time
    default_monthly_cost: int = 0
    default_monthly_hours: float = 0.0
    monthly_data: dict[YearMonth, MonthlyEmployeeData] = Field(default_factory=dict)


class Employee(EmployeeIn):
    id: str


class Assignment(BaseModel):
    employee_id: str
    utilization_rate: float = Field(ge=0, le=100)


class ProjectTask(BaseModel):
    id: str
    name: str


class BillingConfig(BaseModel):
    flow_split: bool = False
    flow_start_ratio: float = Field(default=0, ge=0, le=100)
    flow_start_delay: int = Field(default=0, ge=0)
    flow_start_pay_day: int | None = END_OF_MONTH
    flow_end_delay: int = Field(default=0, ge=0)  # also used for lump-sum payment
    flow_end_pay_day: int | None = END_OF_MONTH
    stock_delay: int = Field(default=0, ge=0)
    stock_pay_day: int | None = END_OF_MONTH


class ProjectBase(BaseModel):
    client_name: str
    project_name: str = ""
    project_type: ProjectType = ProjectType.dev
    status: ProjectStatus = ProjectStatus.pre_order
    lead_source_category: str | None = None
    lead_source_detail: str | None = None

    use_flow: bool = False
    use_stock: bool = False
    use_time_charge: bool = False

    revenue_method: RevenueRecognitionMethod = RevenueRecognitionMethod.duration

    flow_amount: int = 0
    flow_start_date: dt.date | None = None
    flow_end_date: dt.date | None = None  # inclusive

    stock_amount: int = 0  # per month
    stock_start_date: dt.date | None = None

    time_charge_prices: dict[YearMonth, int] = Field(default_factory=dict)

    project_tasks: list[ProjectTask] = Field(default_factory=list)
    billing_config: BillingConfig = Field(default_factory=BillingConfig)
    assignments: list[Assignment] = Field(default_factory=list)
    is_archived: bool = False

    _normalize_dates = field_validator(
        "flow_start_date", "flow_end_date", "stock_start_date", mode="before"
    )(_blank_to_none)


class Project(ProjectBase):
    id: str


class ProjectIn(ProjectBase):
    """Project as submitted by the editing form; stricter than stored data."""

    @field_validator("client_name")
    @classmethod
    def _client_name_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("client name is required")
        return v.strip()

    @model_validator(mode="after")
    def _check_contract(self):
        if not (self.use_flow or self.use_stock or self.use_time_charge):
            raise ValueError("at least one contract kind (flow, stock, time charge) must be active")
        if self.flow_start_date and self.flow_end_date and self.flow_end_date < self.flow_start_date:
            raise ValueError("flow_end_date must not precede flow_start_date")
        return self


class WorkLog(BaseModel):
    id: str
    project_id: str
    task_id: str | None = None
    employee_id: str
    week_start_date: dt.date
    actual_hours: float = 0.0


class WorkLogIn(BaseModel):
    project_id: str
    task_id: str | None = None
    employee_id: str
    week_start_date: dt.date
    actual_hours: float = Field(default=0.0, ge=0)


class CashFlowItem(BaseModel):
    id: str
    name: str
    # plain string so categories this build doesn't know still load (booked as SG&A)
    category: str = CashFlowCategory.operating_expense.value
    amount: int
    is_recurring: bool = False

    period_start: YearMonth | None = None
    period_end: YearMonth | None = None
    pay_day: int | None = None  # 1-31, 99 = end of month

    payment_date: dt.date | None = None
    target_month: YearMonth | None = None  # legacy one-time month

    _normalize = field_validator(
        "period_start", "period_end", "payment_date", "target_month", mode="before"
    )(_blank_to_none)

    @field_validator("category", mode="before")
    @classmethod
    def _category_value(cls, v):
        return v.value if isinstance(v, Enum) else v


class AppSettings(BaseModel):
    target_labor_share_min: float = 40
    target_labor_share_max: float = 50
    sales_targets: dict[YearMonth, int] = Field(default_factory=dict)
    monthly_sales_target: int | None = None
    initial_cash_balance: int = 0
    cash_flow_items: list[CashFlowItem] = Field(default_factory=list)
    lead_source_options: dict[str, list[str]] = Field(default_factory=dict)


class Snapshot(BaseModel):
    employees: list[Employee] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    work_logs: list[WorkLog] = Field(default_factory=list)
    settings: AppSettings = Field(default_factory=AppSettings)
    current_term: int | None = None
