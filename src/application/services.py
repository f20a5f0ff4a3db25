from __future__ import annotations

from dataclasses import dataclass

from application.analytics import MonthlyAnalyticsService
from application.budget_validator import BudgetValidator
from application.categories import CategoryBudgetService
from application.goals import GoalService
from application.transactions import TransactionService
from infrastructure.settings import Settings
from infrastructure.stores.store import DataStore


@dataclass
class AppServices:
    """Service objects built once at startup around a single store instance."""

    store: DataStore
    settings: Settings
    validator: BudgetValidator
    analytics: MonthlyAnalyticsService
    transactions: TransactionService
    categories: CategoryBudgetService
    goals: GoalService

    @classmethod
    def build(cls, store: DataStore, settings: Settings | None = None) -> "AppServices":
        settings = settings or Settings()
        validator = BudgetValidator(store, currency_symbol=settings.currency_symbol)
        return cls(
            store=store,
            settings=settings,
            validator=validator,
            analytics=MonthlyAnalyticsService(store, locale=settings.locale),
            transactions=TransactionService(store, validator),
            categories=CategoryBudgetService(store),
            goals=GoalService(store),
        )
