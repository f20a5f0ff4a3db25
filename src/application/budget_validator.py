from __future__ import annotations

import logging
import threading
from datetime import date
from decimal import Decimal
from typing import Any

from domain.models import CategoryBudget, to_money
from domain.schemas import BudgetValidation, ServiceResult
from infrastructure.stores.store import DataStore, StoreError

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "User not authenticated"
VALIDATION_FAILED = "Could not validate budget"


def assess_budget(budget: CategoryBudget | None, amount: Decimal, currency_symbol: str = "R$") -> BudgetValidation:
    """
    Decide whether `amount` fits the remaining budget of one budget period.

    A missing row or an unset/zero budget_amount means "no limit". Spending
    exactly up to the ceiling is allowed; only spent + amount > budget fails.
    remaining_amount reflects the state before the candidate expense.
    """
    if budget is None or not budget.budget_amount:
        return BudgetValidation(is_valid=True)

    budget_amount = to_money(budget.budget_amount)
    spent_amount = to_money(budget.spent_amount)
    amount = to_money(amount)
    remaining_amount = budget_amount - spent_amount
    would_exceed = spent_amount + amount > budget_amount

    validation = BudgetValidation(
        is_valid=not would_exceed,
        budget_amount=budget_amount,
        spent_amount=spent_amount,
        remaining_amount=remaining_amount,
        would_exceed=would_exceed,
    )
    if would_exceed:
        validation.error_message = (
            f"This expense of {currency_symbol} {amount:.2f} would exceed the budget. "
            f"You have already spent {currency_symbol} {spent_amount:.2f} "
            f"of {currency_symbol} {budget_amount:.2f} this month."
        )
    return validation


class BudgetValidator:
    """Reads the budget snapshot for a candidate expense and advises whether it fits."""

    def __init__(self, store: DataStore, currency_symbol: str = "R$"):
        self._store = store
        self._currency_symbol = currency_symbol

    def validate(self, category_id: str, amount: Decimal, on_date: date) -> ServiceResult[BudgetValidation]:
        try:
            if self._store.current_user_id() is None:
                return ServiceResult[BudgetValidation].failure(NOT_AUTHENTICATED)

            # Period comes from the transaction date, not from the wall clock.
            year, month = on_date.year, on_date.month
            budget = self._store.fetch_budget(category_id, year, month)
        except StoreError:
            logger.exception("BudgetValidator fetch failed category_id=%s date=%s", category_id, on_date)
            return ServiceResult[BudgetValidation].failure(VALIDATION_FAILED)

        validation = assess_budget(budget, amount, self._currency_symbol)
        logger.info(
            "BudgetValidator category_id=%s period=%d-%02d amount=%s valid=%s",
            category_id,
            year,
            month,
            amount,
            validation.is_valid,
        )
        return ServiceResult[BudgetValidation].success(validation)


class LatestValidation:
    """
    Last-write-wins gate for validations issued in quick succession.

    Library helper for interactive front ends that re-validate on every edit of
    an amount field; hold one instance per input being edited. The tool and
    HTTP paths answer each request independently and do not go through it.

    Callers take a ticket before starting a validation and offer the result
    with that ticket; results from any ticket older than the newest issued one
    are dropped, so a slow earlier request cannot overwrite a newer verdict.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._issued = 0
        self._current: Any = None

    def next_ticket(self) -> int:
        with self._lock:
            self._issued += 1
            return self._issued

    def offer(self, ticket: int, result: Any) -> bool:
        with self._lock:
            if ticket != self._issued:
                logger.debug("LatestValidation dropped stale ticket=%d newest=%d", ticket, self._issued)
                return False
            self._current = result
            return True

    @property
    def current(self) -> Any:
        with self._lock:
            return self._current

    def run(self, validator: BudgetValidator, category_id: str, amount: Decimal, on_date: date) -> ServiceResult[BudgetValidation] | None:
        """Validate under a fresh ticket; returns None when a newer request superseded this one."""
        ticket = self.next_ticket()
        result = validator.validate(category_id, amount, on_date)
        return result if self.offer(ticket, result) else None
