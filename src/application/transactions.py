from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date
from decimal import Decimal
from typing import Any

from application.budget_validator import BudgetValidator
from domain.models import CategoryType, Transaction
from domain.schemas import (
    CreateTransactionRequest,
    DaySummary,
    ServiceResult,
    TransactionView,
    UpdateTransactionRequest,
)
from infrastructure.stores.store import DataStore, StoreError

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "User not authenticated"
NOT_FOUND = "Transaction not found"
CREATE_FAILED = "Could not create transaction"
UPDATE_FAILED = "Could not update transaction"
DELETE_FAILED = "Could not delete transaction"
SUMMARY_FAILED = "Could not compute day summary"


def transaction_view(txn: Transaction) -> TransactionView:
    return TransactionView(**{**asdict(txn), "type": txn.type.value})


class TransactionService:
    """Creates, edits and deletes transactions (budget-gated for expenses) and summarizes days."""

    def __init__(self, store: DataStore, validator: BudgetValidator):
        self._store = store
        self._validator = validator

    def create_transaction(self, payload: CreateTransactionRequest) -> ServiceResult[TransactionView]:
        try:
            user_id = self._store.current_user_id()
            if user_id is None:
                return ServiceResult[TransactionView].failure(NOT_AUTHENTICATED)

            if payload.type == CategoryType.EXPENSE.value:
                funding_error = self._check_funding_source(payload.income_category_id)
                if funding_error:
                    return ServiceResult[TransactionView].failure(funding_error)

                budget_error = self._check_budget(payload.category_id, payload.amount, payload.date, CREATE_FAILED)
                if budget_error:
                    return ServiceResult[TransactionView].failure(budget_error)

            txn = self._store.insert_transaction(user_id, payload)
        except StoreError:
            logger.exception("Create transaction failed category_id=%s", payload.category_id)
            return ServiceResult[TransactionView].failure(CREATE_FAILED)

        logger.info("Created transaction id=%s type=%s amount=%s", txn.id, txn.type.value, txn.amount)
        return ServiceResult[TransactionView].success(transaction_view(txn))

    def update_transaction(
        self, transaction_id: str, payload: UpdateTransactionRequest
    ) -> ServiceResult[TransactionView]:
        changes = payload.changes()
        try:
            if self._store.current_user_id() is None:
                return ServiceResult[TransactionView].failure(NOT_AUTHENTICATED)
            current = self._store.fetch_transaction(transaction_id)
            if current is None:
                return ServiceResult[TransactionView].failure(NOT_FOUND)

            if current.type == CategoryType.INCOME:
                if changes.get("income_category_id"):
                    return ServiceResult[TransactionView].failure("Income transactions cannot carry a funding income category")
            else:
                if "income_category_id" in changes:
                    funding_error = self._check_funding_source(changes["income_category_id"])
                    if funding_error:
                        return ServiceResult[TransactionView].failure(funding_error)
                budget_error = self._check_edit_budget(current, changes)
                if budget_error:
                    return ServiceResult[TransactionView].failure(budget_error)

            txn = self._store.update_transaction(transaction_id, changes) if changes else current
        except StoreError:
            logger.exception("Update transaction failed id=%s", transaction_id)
            return ServiceResult[TransactionView].failure(UPDATE_FAILED)

        logger.info("Updated transaction id=%s fields=%s", transaction_id, ",".join(sorted(changes)))
        return ServiceResult[TransactionView].success(transaction_view(txn))

    def delete_transaction(self, transaction_id: str) -> ServiceResult[TransactionView]:
        try:
            if self._store.current_user_id() is None:
                return ServiceResult[TransactionView].failure(NOT_AUTHENTICATED)
            txn = self._store.fetch_transaction(transaction_id)
            if txn is None:
                return ServiceResult[TransactionView].failure(NOT_FOUND)
            self._store.delete_transaction(transaction_id)
        except StoreError:
            logger.exception("Delete transaction failed id=%s", transaction_id)
            return ServiceResult[TransactionView].failure(DELETE_FAILED)

        logger.info("Deleted transaction id=%s type=%s amount=%s", txn.id, txn.type.value, txn.amount)
        return ServiceResult[TransactionView].success(transaction_view(txn))

    def _check_funding_source(self, income_category_id: str | None) -> str | None:
        if not income_category_id:
            return "Expense transactions require a funding income category"
        source = self._store.fetch_category(income_category_id)
        if source is None or not source.is_active or source.type != CategoryType.INCOME:
            return "Funding source must be an active income category"
        return None

    def _check_budget(self, category_id: str, amount: Decimal, on_date: date, fallback: str) -> str | None:
        validation = self._validator.validate(category_id, amount, on_date)
        if not validation.ok:
            return validation.error or fallback
        if validation.data is not None and not validation.data.is_valid:
            logger.info("Blocked expense over budget category_id=%s amount=%s", category_id, amount)
            return validation.data.error_message or "Budget exceeded"
        return None

    def _check_edit_budget(self, current: Transaction, changes: dict[str, Any]) -> str | None:
        category_id = changes.get("category_id", current.category_id)
        on_date = changes.get("date", current.date)
        amount = changes.get("amount", current.amount)
        same_period = category_id == current.category_id and (on_date.year, on_date.month) == (
            current.date.year,
            current.date.month,
        )
        # In its own period the current amount is already counted in spent_amount.
        added = amount - current.amount if same_period else amount
        if added <= 0:
            return None
        return self._check_budget(category_id, added, on_date, UPDATE_FAILED)

    def day_summary(self, day: date) -> ServiceResult[DaySummary]:
        try:
            user_id = self._store.current_user_id()
            if user_id is None:
                return ServiceResult[DaySummary].failure(NOT_AUTHENTICATED)
            transactions = self._store.fetch_day_transactions(user_id, day)
        except StoreError:
            logger.exception("Day summary fetch failed date=%s", day)
            return ServiceResult[DaySummary].failure(SUMMARY_FAILED)

        total_income = sum((t.amount for t in transactions if t.type == CategoryType.INCOME), Decimal("0.00"))
        total_expense = sum((t.amount for t in transactions if t.type == CategoryType.EXPENSE), Decimal("0.00"))
        return ServiceResult[DaySummary].success(
            DaySummary(
                date=day,
                total_income=total_income,
                total_expense=total_expense,
                balance=total_income - total_expense,
                transactions_count=len(transactions),
            )
        )
