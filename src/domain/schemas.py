from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, Field, PlainSerializer, field_validator, model_validator

T = TypeVar("T")

# Decimal internally, plain JSON number at the boundary.
MoneyField = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

CategoryKind = Literal["income", "expense"]

# Alias keeps `date` usable as a field name.
CalendarDate = date


def _coerce_date_text(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date) or not isinstance(value, str):
        return value

    text = value.strip()
    if not text:
        return value

    # Canonical format first.
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return value


class DateRange(BaseModel):
    start: date = Field(description="Start date in YYYY-MM-DD format, e.g. 2026-01-01.")
    end: date = Field(description="End date in YYYY-MM-DD format, e.g. 2026-01-31.")

    @field_validator("start", "end", mode="before")
    @classmethod
    def coerce_date(cls, value: Any) -> Any:
        return _coerce_date_text(value)

    @model_validator(mode="after")
    def validate_order(self) -> "DateRange":
        if self.start > self.end:
            raise ValueError("date_range.start must be <= date_range.end")
        return self


class ServiceResult(BaseModel, Generic[T]):
    """Structured outcome returned by every application service."""

    ok: bool = True
    data: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, data: Any = None) -> "ServiceResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: str) -> "ServiceResult":
        return cls(ok=False, error=error)


# ---- budget validation ----

class BudgetValidationRequest(BaseModel):
    category_id: str = Field(min_length=1)
    amount: MoneyField = Field(gt=0, decimal_places=2)
    date: CalendarDate

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value: Any) -> Any:
        return _coerce_date_text(value)


class BudgetValidation(BaseModel):
    is_valid: bool
    budget_amount: Optional[MoneyField] = None
    spent_amount: Optional[MoneyField] = None
    remaining_amount: Optional[MoneyField] = None
    would_exceed: Optional[bool] = None
    error_message: Optional[str] = None


# ---- analytics ----

class AnalyticsQuery(BaseModel):
    year: int = Field(ge=1900, le=9999)
    month: int = Field(ge=1, le=12, description="Calendar month number (1=Jan ... 12=Dec).")
    type: CategoryKind = "expense"


class DailyFlow(BaseModel):
    date: CalendarDate
    amount: MoneyField
    accumulated: MoneyField


class CategoryOverview(BaseModel):
    category_id: str
    category_name: str
    category_color: str
    category_icon: str
    total_amount: MoneyField
    percentage: float
    transaction_count: int


class MonthlyAnalytics(BaseModel):
    year: int
    month: int
    type: CategoryKind
    total_amount: MoneyField
    daily_flow: List[DailyFlow] = Field(default_factory=list)
    category_overview: List[CategoryOverview] = Field(default_factory=list)


class DayTransaction(BaseModel):
    id: str
    name: str
    amount: MoneyField
    category_name: str
    category_color: str
    category_icon: str


class TransactionsByDay(BaseModel):
    date: CalendarDate
    day_name: str
    total: MoneyField
    transactions: List[DayTransaction] = Field(default_factory=list)


# ---- transactions ----

class CreateTransactionRequest(BaseModel):
    name: str = Field(min_length=1)
    type: CategoryKind
    amount: MoneyField = Field(gt=0, decimal_places=2)
    date: CalendarDate
    category_id: str = Field(min_length=1)
    income_category_id: Optional[str] = None
    observation: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value: Any) -> Any:
        return _coerce_date_text(value)

    @model_validator(mode="after")
    def validate_funding_source(self) -> "CreateTransactionRequest":
        if self.type == "expense" and not self.income_category_id:
            raise ValueError("expense transactions require income_category_id")
        if self.type == "income" and self.income_category_id:
            raise ValueError("income transactions cannot carry income_category_id")
        return self


class UpdateTransactionRequest(BaseModel):
    """Partial edit; only the fields that were set are written. The type never changes."""

    name: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[MoneyField] = Field(default=None, gt=0, decimal_places=2)
    date: Optional[CalendarDate] = None
    category_id: Optional[str] = Field(default=None, min_length=1)
    income_category_id: Optional[str] = None
    observation: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value: Any) -> Any:
        return _coerce_date_text(value)

    def changes(self) -> Dict[str, Any]:
        # name, amount, date and category_id cannot be cleared
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key in ("income_category_id", "observation")
        }


class TransactionView(BaseModel):
    id: str
    name: str
    type: CategoryKind
    amount: MoneyField
    date: CalendarDate
    category_id: str
    income_category_id: Optional[str] = None
    observation: Optional[str] = None


class DaySummary(BaseModel):
    date: CalendarDate
    total_income: MoneyField
    total_expense: MoneyField
    balance: MoneyField
    transactions_count: int


# ---- categories & goals ----

class CategoryBudgetView(BaseModel):
    year: int
    month: int
    budget_amount: Optional[MoneyField] = None
    spent_amount: Optional[MoneyField] = None


class CategoryWithBudget(BaseModel):
    id: str
    name: str
    type: CategoryKind
    icon: str = ""
    color: str = ""
    monthly_budget: Optional[MoneyField] = None
    current_budget: Optional[CategoryBudgetView] = None
    spent_amount: Optional[MoneyField] = None
    remaining_amount: Optional[MoneyField] = None
    budget_percentage: Optional[float] = None


class GoalWithProgress(BaseModel):
    id: str
    name: str
    current_amount: MoneyField
    target_amount: Optional[MoneyField] = None
    color: str = ""
    icon: str = ""
    deadline: Optional[date] = None
    is_completed: bool = False
    progress_percentage: Optional[float] = None
    remaining_amount: Optional[MoneyField] = None
    days_remaining: Optional[int] = None
    is_overdue: Optional[bool] = None


class AddBalanceRequest(BaseModel):
    goal_id: str = Field(min_length=1)
    amount: MoneyField = Field(gt=0, decimal_places=2)


# ---- tool envelope ----

class ToolContext(BaseModel):
    timezone: str = "UTC"
    locale: Optional[str] = None


class ToolRequest(BaseModel):
    request_id: str
    tool: str
    args: Dict[str, Any] = Field(default_factory=dict)
    context: ToolContext = Field(default_factory=ToolContext)


class ToolResponse(BaseModel):
    request_id: str
    tool: str
    ok: bool = True
    result: Dict[str, Any] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)
    context: ToolContext = Field(default_factory=ToolContext)
