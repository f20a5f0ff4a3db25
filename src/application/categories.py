from __future__ import annotations

import logging
from datetime import date

from domain.models import CategoryType, to_money
from domain.schemas import CategoryBudgetView, CategoryWithBudget, ServiceResult
from infrastructure.stores.store import DataStore, StoreError

logger = logging.getLogger(__name__)


class CategoryBudgetService:
    def __init__(self, store: DataStore):
        self._store = store

    def categories_with_budget(
        self, today: date, txn_type: CategoryType | None = None
    ) -> ServiceResult[list[CategoryWithBudget]]:
        """Active categories annotated with the budget row of `today`'s month."""
        try:
            user_id = self._store.current_user_id()
            if user_id is None:
                return ServiceResult[list[CategoryWithBudget]].failure("User not authenticated")

            result: list[CategoryWithBudget] = []
            for category in self._store.fetch_categories(user_id, txn_type):
                budget = self._store.fetch_budget(category.id, today.year, today.month)
                item = CategoryWithBudget(
                    id=category.id,
                    name=category.name,
                    type=category.type.value,
                    icon=category.icon,
                    color=category.color,
                    monthly_budget=category.monthly_budget,
                )
                if budget is not None:
                    budget_amount = to_money(budget.budget_amount)
                    spent = to_money(budget.spent_amount)
                    item.current_budget = CategoryBudgetView(
                        year=budget.year,
                        month=budget.month,
                        budget_amount=budget.budget_amount,
                        spent_amount=budget.spent_amount,
                    )
                    item.spent_amount = spent
                    item.remaining_amount = budget_amount - spent
                    item.budget_percentage = float(spent / budget_amount * 100) if budget_amount > 0 else 0.0
                result.append(item)
        except StoreError:
            logger.exception("Categories with budget fetch failed")
            return ServiceResult[list[CategoryWithBudget]].failure("Could not retrieve categories")

        logger.info("Categories with budget count=%d period=%d-%02d", len(result), today.year, today.month)
        return ServiceResult[list[CategoryWithBudget]].success(result)
