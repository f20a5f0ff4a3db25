from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Any

from domain.models import Category, CategoryBudget, CategoryType, Goal, Transaction, TransactionRow
from domain.schemas import CreateTransactionRequest, DateRange


class StoreError(RuntimeError):
    pass


class DataStore(ABC):
    """Base contract for the hosted data store the services read from.

    Every query is scoped to the authenticated user by the store itself;
    callers do not re-check row ownership.
    """

    name: str = "store"

    @abstractmethod
    def current_user_id(self) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def fetch_budget(self, category_id: str, year: int, month: int) -> CategoryBudget | None:
        raise NotImplementedError

    @abstractmethod
    def fetch_transactions(
        self, user_id: str, txn_type: CategoryType, date_range: DateRange
    ) -> list[TransactionRow]:
        raise NotImplementedError

    @abstractmethod
    def fetch_day_transactions(self, user_id: str, day: date) -> list[Transaction]:
        raise NotImplementedError

    @abstractmethod
    def fetch_categories(self, user_id: str, txn_type: CategoryType | None = None) -> list[Category]:
        raise NotImplementedError

    @abstractmethod
    def fetch_category(self, category_id: str) -> Category | None:
        raise NotImplementedError

    @abstractmethod
    def insert_transaction(self, user_id: str, payload: CreateTransactionRequest) -> Transaction:
        raise NotImplementedError

    @abstractmethod
    def fetch_transaction(self, transaction_id: str) -> Transaction | None:
        raise NotImplementedError

    @abstractmethod
    def update_transaction(self, transaction_id: str, changes: dict[str, Any]) -> Transaction:
        """Apply a partial edit; the store moves spent_amount between budget periods as needed."""
        raise NotImplementedError

    @abstractmethod
    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction; an expense gives its amount back to its budget period."""
        raise NotImplementedError

    @abstractmethod
    def fetch_goals(self, user_id: str) -> list[Goal]:
        raise NotImplementedError

    @abstractmethod
    def fetch_goal(self, goal_id: str) -> Goal | None:
        raise NotImplementedError

    @abstractmethod
    def update_goal_amount(self, goal_id: str, current_amount: Decimal) -> Goal:
        raise NotImplementedError
