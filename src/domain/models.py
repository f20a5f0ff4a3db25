from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

CENTS = Decimal("0.01")


class CategoryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


def to_money(value: Any) -> Decimal:
    """Coerce a store/user value into a two-place Decimal."""
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, float):
        # str() avoids carrying binary float noise into the Decimal
        amount = Decimal(str(value))
    else:
        amount = Decimal(value)
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def optional_money(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    return to_money(value)


@dataclass
class Category:
    id: str
    user_id: str
    name: str
    type: CategoryType
    icon: str = ""
    color: str = ""
    monthly_budget: Decimal | None = None
    is_active: bool = True


@dataclass
class CategoryBudget:
    category_id: str
    year: int
    month: int
    budget_amount: Decimal | None
    spent_amount: Decimal | None = None
    user_id: str | None = None
    id: str | None = None


@dataclass
class Transaction:
    id: str
    user_id: str
    name: str
    type: CategoryType
    amount: Decimal
    date: date
    category_id: str
    income_category_id: str | None = None
    observation: str | None = None


@dataclass
class TransactionRow:
    """Flat transaction + category join consumed by the analytics aggregator."""

    id: str
    name: str
    amount: Decimal
    date: date
    category_id: str
    category_name: str = ""
    category_color: str = ""
    category_icon: str = ""


@dataclass
class Goal:
    id: str
    user_id: str
    name: str
    current_amount: Decimal
    color: str = ""
    icon: str = ""
    target_amount: Decimal | None = None
    deadline: date | None = None
    is_completed: bool = False
