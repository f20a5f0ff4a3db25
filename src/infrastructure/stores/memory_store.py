from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Iterable

from domain.models import (
    Category,
    CategoryBudget,
    CategoryType,
    Goal,
    Transaction,
    TransactionRow,
    to_money,
)
from domain.schemas import CreateTransactionRequest, DateRange
from infrastructure.stores.store import DataStore, StoreError

logger = logging.getLogger(__name__)


class MemoryStore(DataStore):
    """
    In-process store with the same bookkeeping the hosted backend does in triggers.

    - Budget rows are materialized lazily from the category's monthly_budget
      on the first expense posted in a period.
    - spent_amount is incremented as expenses are inserted, given back when
      they are deleted, and moved between periods when an edit changes the
      amount, category or month.
    """

    name = "memory"

    def __init__(
        self,
        user_id: str | None = None,
        categories: Iterable[Category] | None = None,
        budgets: Iterable[CategoryBudget] | None = None,
        transactions: Iterable[Transaction] | None = None,
        goals: Iterable[Goal] | None = None,
    ) -> None:
        self._user_id = user_id
        self._categories: dict[str, Category] = {}
        self._budgets: dict[tuple[str, int, int], CategoryBudget] = {}
        self._transactions: list[Transaction] = []
        self._goals: list[Goal] = list(goals or [])

        for category in categories or []:
            self.add_category(category)
        for budget in budgets or []:
            self.put_budget(budget)
        for txn in transactions or []:
            self._transactions.append(txn)

    # ---- seeding helpers ----
    def sign_in(self, user_id: str | None) -> None:
        self._user_id = user_id

    def add_category(self, category: Category) -> None:
        self._categories[category.id] = category

    def put_budget(self, budget: CategoryBudget) -> None:
        self._budgets[(budget.category_id, budget.year, budget.month)] = budget

    def add_goal(self, goal: Goal) -> None:
        self._goals.append(goal)

    # ---- DataStore ----
    def current_user_id(self) -> str | None:
        return self._user_id

    def fetch_budget(self, category_id: str, year: int, month: int) -> CategoryBudget | None:
        return self._budgets.get((category_id, year, month))

    def fetch_transactions(
        self, user_id: str, txn_type: CategoryType, date_range: DateRange
    ) -> list[TransactionRow]:
        rows: list[TransactionRow] = []
        for txn in sorted(self._transactions, key=lambda t: t.date):
            if txn.user_id != user_id or txn.type != txn_type:
                continue
            if txn.date < date_range.start or txn.date > date_range.end:
                continue
            rows.append(self._join_category(txn))
        return rows

    def fetch_day_transactions(self, user_id: str, day: date) -> list[Transaction]:
        return [t for t in self._transactions if t.user_id == user_id and t.date == day]

    def fetch_categories(self, user_id: str, txn_type: CategoryType | None = None) -> list[Category]:
        return [
            c
            for c in self._categories.values()
            if c.user_id == user_id and c.is_active and (txn_type is None or c.type == txn_type)
        ]

    def fetch_category(self, category_id: str) -> Category | None:
        return self._categories.get(category_id)

    def insert_transaction(self, user_id: str, payload: CreateTransactionRequest) -> Transaction:
        if payload.category_id not in self._categories:
            raise StoreError(f"Unknown category_id: {payload.category_id}")

        txn = Transaction(
            id=str(uuid.uuid4()),
            user_id=user_id,
            name=payload.name,
            type=CategoryType(payload.type),
            amount=to_money(payload.amount),
            date=payload.date,
            category_id=payload.category_id,
            income_category_id=payload.income_category_id,
            observation=payload.observation,
        )
        self._transactions.append(txn)
        if txn.type == CategoryType.EXPENSE:
            self._post_expense(txn)
        logger.info("MemoryStore inserted transaction id=%s type=%s amount=%s", txn.id, txn.type.value, txn.amount)
        return txn

    def fetch_transaction(self, transaction_id: str) -> Transaction | None:
        return next((t for t in self._transactions if t.id == transaction_id and t.user_id == self._user_id), None)

    def update_transaction(self, transaction_id: str, changes: dict[str, Any]) -> Transaction:
        current = self._require_transaction(transaction_id)
        category_id = changes.get("category_id", current.category_id)
        if category_id not in self._categories:
            raise StoreError(f"Unknown category_id: {category_id}")
        if "amount" in changes:
            changes = {**changes, "amount": to_money(changes["amount"])}

        updated = replace(current, **changes)
        if current.type == CategoryType.EXPENSE:
            self._release_expense(current)
            self._post_expense(updated)
        self._transactions[self._transactions.index(current)] = updated
        logger.info("MemoryStore updated transaction id=%s fields=%s", transaction_id, ",".join(sorted(changes)))
        return updated

    def delete_transaction(self, transaction_id: str) -> None:
        txn = self._require_transaction(transaction_id)
        self._transactions.remove(txn)
        if txn.type == CategoryType.EXPENSE:
            self._release_expense(txn)
        logger.info("MemoryStore deleted transaction id=%s amount=%s", txn.id, txn.amount)

    def fetch_goals(self, user_id: str) -> list[Goal]:
        return [g for g in self._goals if g.user_id == user_id]

    def fetch_goal(self, goal_id: str) -> Goal | None:
        return next((g for g in self._goals if g.id == goal_id and g.user_id == self._user_id), None)

    def update_goal_amount(self, goal_id: str, current_amount: Decimal) -> Goal:
        goal = self.fetch_goal(goal_id)
        if goal is None:
            raise StoreError(f"Unknown goal_id: {goal_id}")
        goal.current_amount = to_money(current_amount)
        return goal

    # ---- internals ----
    def _require_transaction(self, transaction_id: str) -> Transaction:
        txn = self.fetch_transaction(transaction_id)
        if txn is None:
            raise StoreError(f"Unknown transaction_id: {transaction_id}")
        return txn

    def _release_expense(self, txn: Transaction) -> None:
        budget = self._budgets.get((txn.category_id, txn.date.year, txn.date.month))
        if budget is not None:
            budget.spent_amount = max(to_money(budget.spent_amount) - txn.amount, Decimal("0.00"))

    def _post_expense(self, txn: Transaction) -> None:
        key = (txn.category_id, txn.date.year, txn.date.month)
        budget = self._budgets.get(key)
        if budget is None:
            category = self._categories[txn.category_id]
            if category.monthly_budget is None:
                return
            budget = CategoryBudget(
                id=str(uuid.uuid4()),
                category_id=txn.category_id,
                user_id=txn.user_id,
                year=key[1],
                month=key[2],
                budget_amount=category.monthly_budget,
                spent_amount=Decimal("0.00"),
            )
            self._budgets[key] = budget
            logger.info(
                "MemoryStore materialized budget category_id=%s period=%d-%02d amount=%s",
                txn.category_id,
                key[1],
                key[2],
                budget.budget_amount,
            )
        budget.spent_amount = to_money(budget.spent_amount) + txn.amount

    def _join_category(self, txn: Transaction) -> TransactionRow:
        category = self._categories.get(txn.category_id)
        return TransactionRow(
            id=txn.id,
            name=txn.name,
            amount=txn.amount,
            date=txn.date,
            category_id=txn.category_id,
            category_name=category.name if category else "",
            category_color=category.color if category else "",
            category_icon=category.icon if category else "",
        )
