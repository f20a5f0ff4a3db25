from __future__ import annotations

import logging
from calendar import monthrange
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Iterable

from domain.models import CategoryType, TransactionRow, to_money
from domain.schemas import (
    CategoryOverview,
    DailyFlow,
    DateRange,
    DayTransaction,
    MonthlyAnalytics,
    ServiceResult,
    TransactionsByDay,
)
from infrastructure.stores.store import DataStore, StoreError

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "User not authenticated"
ANALYTICS_FETCH_FAILED = "Could not retrieve analytics"
TRANSACTIONS_FETCH_FAILED = "Could not retrieve transactions"

# Monday-first, matching date.weekday().
DAY_NAMES: dict[str, tuple[str, ...]] = {
    "pt-BR": ("Segunda", "Terça", "Quarta", "Quinta", "Sexta", "Sábado", "Domingo"),
    "en-US": ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"),
    "es-ES": ("Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo"),
}
DEFAULT_LOCALE = "pt-BR"


def day_name(day: date, locale: str | None = None) -> str:
    names = DAY_NAMES.get(locale or DEFAULT_LOCALE)
    if names is None:
        # "pt" -> "pt-BR", unknown languages fall back to the default locale.
        language = (locale or "").split("-")[0].lower()
        names = next(
            (v for k, v in DAY_NAMES.items() if k.split("-")[0] == language),
            DAY_NAMES[DEFAULT_LOCALE],
        )
    return names[day.weekday()]


def month_date_range(year: int, month: int) -> DateRange:
    return DateRange(start=date(year, month, 1), end=date(year, month, monthrange(year, month)[1]))


def _day_key(value: Any) -> date:
    return value if isinstance(value, date) else date.fromisoformat(str(value))


def daily_flow(transactions: Iterable[Any], year: int, month: int) -> list[DailyFlow]:
    """One entry per calendar day of the month, zero-filled, with a running total."""
    by_day: dict[date, Decimal] = defaultdict(Decimal)
    for txn in transactions:
        by_day[_day_key(txn.date)] += to_money(txn.amount)

    last_day = monthrange(year, month)[1]
    accumulated = Decimal("0.00")
    series: list[DailyFlow] = []
    for day_number in range(1, last_day + 1):
        day = date(year, month, day_number)
        amount = by_day.get(day, Decimal("0.00"))
        accumulated += amount
        series.append(DailyFlow(date=day, amount=amount, accumulated=accumulated))
    return series


def category_overview(transactions: Iterable[TransactionRow]) -> list[CategoryOverview]:
    groups: dict[str, dict[str, Any]] = {}
    for txn in transactions:
        entry = groups.get(txn.category_id)
        if entry is None:
            entry = groups[txn.category_id] = {
                "category_id": txn.category_id,
                "category_name": txn.category_name,
                "category_color": txn.category_color,
                "category_icon": txn.category_icon,
                "total_amount": Decimal("0.00"),
                "transaction_count": 0,
            }
        entry["total_amount"] += to_money(txn.amount)
        entry["transaction_count"] += 1

    grand_total = sum((g["total_amount"] for g in groups.values()), Decimal("0.00"))
    overview = [
        CategoryOverview(
            percentage=float(g["total_amount"] / grand_total * 100) if grand_total > 0 else 0.0,
            **g,
        )
        for g in groups.values()
    ]
    # sorted() is stable: equal totals keep first-seen order.
    return sorted(overview, key=lambda c: c.total_amount, reverse=True)


def transactions_by_day(transactions: Iterable[TransactionRow], locale: str | None = None) -> list[TransactionsByDay]:
    """Groups only days that have transactions, most recent day first."""
    grouped: dict[date, list[DayTransaction]] = defaultdict(list)
    for txn in transactions:
        grouped[_day_key(txn.date)].append(
            DayTransaction(
                id=txn.id,
                name=txn.name,
                amount=to_money(txn.amount),
                category_name=txn.category_name,
                category_color=txn.category_color,
                category_icon=txn.category_icon,
            )
        )

    days = [
        TransactionsByDay(
            date=day,
            day_name=day_name(day, locale),
            total=sum((t.amount for t in items), Decimal("0.00")),
            transactions=items,
        )
        for day, items in grouped.items()
    ]
    return sorted(days, key=lambda d: d.date, reverse=True)


class MonthlyAnalyticsService:
    """Fetches one month of transactions of a type and aggregates them for charts and lists."""

    def __init__(self, store: DataStore, locale: str | None = None):
        self._store = store
        self._locale = locale

    def _fetch_month(self, year: int, month: int, txn_type: CategoryType) -> ServiceResult[list[TransactionRow]]:
        if not 1 <= month <= 12:
            return ServiceResult.failure("month must be an integer from 1 to 12")
        user_id = self._store.current_user_id()
        if user_id is None:
            return ServiceResult.failure(NOT_AUTHENTICATED)
        return ServiceResult.success(self._store.fetch_transactions(user_id, txn_type, month_date_range(year, month)))

    def monthly_analytics(self, year: int, month: int, txn_type: CategoryType) -> ServiceResult[MonthlyAnalytics]:
        try:
            fetched = self._fetch_month(year, month, txn_type)
        except StoreError:
            logger.exception("Monthly analytics fetch failed year=%d month=%d type=%s", year, month, txn_type.value)
            return ServiceResult[MonthlyAnalytics].failure(ANALYTICS_FETCH_FAILED)
        if not fetched.ok:
            return ServiceResult[MonthlyAnalytics].failure(fetched.error)

        rows = fetched.data
        analytics = MonthlyAnalytics(
            year=year,
            month=month,
            type=txn_type.value,
            total_amount=sum((to_money(r.amount) for r in rows), Decimal("0.00")),
            daily_flow=daily_flow(rows, year, month),
            category_overview=category_overview(rows),
        )
        logger.info(
            "Monthly analytics year=%d month=%d type=%s transactions=%d categories=%d",
            year,
            month,
            txn_type.value,
            len(rows),
            len(analytics.category_overview),
        )
        return ServiceResult[MonthlyAnalytics].success(analytics)

    def transactions_by_day(
        self, year: int, month: int, txn_type: CategoryType, locale: str | None = None
    ) -> ServiceResult[list[TransactionsByDay]]:
        try:
            fetched = self._fetch_month(year, month, txn_type)
        except StoreError:
            logger.exception("Transactions by day fetch failed year=%d month=%d type=%s", year, month, txn_type.value)
            return ServiceResult[list[TransactionsByDay]].failure(TRANSACTIONS_FETCH_FAILED)
        if not fetched.ok:
            return ServiceResult[list[TransactionsByDay]].failure(fetched.error)
        return ServiceResult[list[TransactionsByDay]].success(transactions_by_day(fetched.data, locale or self._locale))
