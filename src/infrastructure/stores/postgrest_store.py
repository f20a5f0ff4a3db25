from __future__ import annotations

import json
import logging
import socket
import time
import urllib.error
import urllib.parse
import urllib.request
from datetime import date
from decimal import Decimal
from typing import Any

from domain.models import (
    Category,
    CategoryBudget,
    CategoryType,
    Goal,
    Transaction,
    TransactionRow,
    optional_money,
    to_money,
)
from domain.schemas import CreateTransactionRequest, DateRange
from infrastructure.settings import Settings
from infrastructure.stores.store import DataStore, StoreError

logger = logging.getLogger(__name__)

_TRANSACTION_JOIN = "id,name,amount,date,category:categories!transactions_category_id_fkey(id,name,icon,color)"


class PostgrestStore(DataStore):
    """Adapter for a hosted PostgREST + GoTrue backend (Supabase-style)."""

    name = "postgrest"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: str | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        if not base_url:
            raise StoreError("PostgrestStore requires a base URL (SUPABASE_URL)")
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._access_token = access_token or None
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "PostgrestStore":
        return cls(
            base_url=settings.supabase_url,
            api_key=settings.supabase_anon_key,
            access_token=settings.supabase_access_token,
            timeout_seconds=settings.supabase_timeout_seconds,
        )

    # ---- DataStore ----
    def current_user_id(self) -> str | None:
        if not self._access_token:
            return None
        try:
            body = self._request("GET", "/auth/v1/user")
        except urllib.error.HTTPError as exc:
            if exc.code in (401, 403):
                logger.info("PostgrestStore session rejected status=%d", exc.code)
                return None
            raise StoreError(f"Auth lookup failed with HTTP {exc.code}") from exc
        user_id = body.get("id") if isinstance(body, dict) else None
        return str(user_id) if user_id else None

    def fetch_budget(self, category_id: str, year: int, month: int) -> CategoryBudget | None:
        rows = self._select(
            "category_budgets",
            [
                ("select", "id,category_id,user_id,year,month,budget_amount,spent_amount"),
                ("category_id", f"eq.{category_id}"),
                ("year", f"eq.{year}"),
                ("month", f"eq.{month}"),
                ("limit", "1"),
            ],
        )
        if not rows:
            return None
        return self._normalize_budget_row(rows[0])

    def fetch_transactions(
        self, user_id: str, txn_type: CategoryType, date_range: DateRange
    ) -> list[TransactionRow]:
        rows = self._select(
            "transactions",
            [
                ("select", _TRANSACTION_JOIN),
                ("user_id", f"eq.{user_id}"),
                ("type", f"eq.{txn_type.value}"),
                ("date", f"gte.{date_range.start.isoformat()}"),
                ("date", f"lte.{date_range.end.isoformat()}"),
                ("order", "date.asc"),
            ],
        )
        transactions = [self._normalize_joined_row(row) for row in rows]
        logger.info("PostgrestStore normalized transactions count=%d", len(transactions))
        return transactions

    def fetch_day_transactions(self, user_id: str, day: date) -> list[Transaction]:
        rows = self._select(
            "transactions",
            [("select", "*"), ("user_id", f"eq.{user_id}"), ("date", f"eq.{day.isoformat()}")],
        )
        return [self._normalize_transaction_row(row) for row in rows]

    def fetch_categories(self, user_id: str, txn_type: CategoryType | None = None) -> list[Category]:
        params = [
            ("select", "*"),
            ("user_id", f"eq.{user_id}"),
            ("is_active", "eq.true"),
            ("order", "created_at.desc"),
        ]
        if txn_type is not None:
            params.append(("type", f"eq.{txn_type.value}"))
        return [self._normalize_category_row(row) for row in self._select("categories", params)]

    def fetch_category(self, category_id: str) -> Category | None:
        rows = self._select("categories", [("select", "*"), ("id", f"eq.{category_id}"), ("limit", "1")])
        return self._normalize_category_row(rows[0]) if rows else None

    def insert_transaction(self, user_id: str, payload: CreateTransactionRequest) -> Transaction:
        body = {
            "user_id": user_id,
            "name": payload.name,
            "type": payload.type,
            "amount": float(payload.amount),
            "date": payload.date.isoformat(),
            "category_id": payload.category_id,
            "income_category_id": payload.income_category_id or None,
            "observation": payload.observation or None,
        }
        rows = self._write("POST", "transactions", body=body)
        return self._normalize_transaction_row(rows[0])

    def fetch_transaction(self, transaction_id: str) -> Transaction | None:
        rows = self._select("transactions", [("select", "*"), ("id", f"eq.{transaction_id}"), ("limit", "1")])
        return self._normalize_transaction_row(rows[0]) if rows else None

    def update_transaction(self, transaction_id: str, changes: dict[str, Any]) -> Transaction:
        body = {key: self._json_value(value) for key, value in changes.items()}
        rows = self._write("PATCH", "transactions", params=[("id", f"eq.{transaction_id}")], body=body)
        return self._normalize_transaction_row(rows[0])

    def delete_transaction(self, transaction_id: str) -> None:
        self._write("DELETE", "transactions", params=[("id", f"eq.{transaction_id}")])

    def fetch_goals(self, user_id: str) -> list[Goal]:
        rows = self._select(
            "goals",
            [("select", "*"), ("user_id", f"eq.{user_id}"), ("order", "is_completed.asc,created_at.desc")],
        )
        return [self._normalize_goal_row(row) for row in rows]

    def fetch_goal(self, goal_id: str) -> Goal | None:
        rows = self._select("goals", [("select", "*"), ("id", f"eq.{goal_id}"), ("limit", "1")])
        return self._normalize_goal_row(rows[0]) if rows else None

    def update_goal_amount(self, goal_id: str, current_amount: Decimal) -> Goal:
        rows = self._write(
            "PATCH",
            "goals",
            params=[("id", f"eq.{goal_id}")],
            body={"current_amount": float(current_amount)},
        )
        return self._normalize_goal_row(rows[0])

    # ---- HTTP ----
    def _select(self, table: str, params: list[tuple[str, str]]) -> list[dict[str, Any]]:
        path = f"/rest/v1/{table}?{urllib.parse.urlencode(params, safe=',.:()!*')}"
        try:
            rows = self._request("GET", path)
        except urllib.error.HTTPError as exc:
            raise StoreError(f"Query on {table} failed with HTTP {exc.code}: {self._error_text(exc)}") from exc
        if not isinstance(rows, list):
            raise StoreError(f"Expected row list from {table}, got {type(rows).__name__}")
        return [row for row in rows if isinstance(row, dict)]

    def _write(
        self,
        method: str,
        table: str,
        params: list[tuple[str, str]] | None = None,
        body: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """POST/PATCH/DELETE on a table; writes other than DELETE must return the affected row."""
        path = f"/rest/v1/{table}"
        if params:
            path = f"{path}?{urllib.parse.urlencode(params, safe=',.:()!*')}"
        try:
            rows = self._request(method, path, body=body, extra_headers={"Prefer": "return=representation"})
        except urllib.error.HTTPError as exc:
            raise StoreError(f"{method} on {table} failed with HTTP {exc.code}: {self._error_text(exc)}") from exc
        rows = [row for row in rows if isinstance(row, dict)] if isinstance(rows, list) else []
        if method != "DELETE" and not rows:
            raise StoreError(f"{method} on {table} matched no row")
        return rows

    def _request(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
        extra_headers: dict[str, str] | None = None,
    ) -> Any:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._access_token or self._api_key}",
            "Accept": "application/json",
        }
        data = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"
        headers.update(extra_headers or {})

        req = urllib.request.Request(url=f"{self.base_url}{path}", data=data, headers=headers, method=method)
        started = time.perf_counter()
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
                raw = resp.read().decode("utf-8")
        except urllib.error.HTTPError:
            raise
        except (socket.timeout, urllib.error.URLError, TimeoutError) as exc:
            logger.warning("PostgrestStore %s %s failed after %.2fs: %s", method, path, time.perf_counter() - started, exc)
            raise StoreError(f"{method} {path} failed: {exc}") from exc

        logger.debug("PostgrestStore %s %s complete in %.2fs", method, path, time.perf_counter() - started)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StoreError(f"{method} {path} returned invalid JSON") from exc

    def _json_value(self, value: Any) -> Any:
        if isinstance(value, Decimal):
            return float(value)
        if isinstance(value, date):
            return value.isoformat()
        return value

    def _error_text(self, exc: urllib.error.HTTPError) -> str:
        try:
            return exc.read().decode("utf-8", errors="replace")[:300]
        except Exception:
            return exc.reason if isinstance(exc.reason, str) else ""

    # ---- normalization ----
    def _normalize_budget_row(self, row: dict[str, Any]) -> CategoryBudget:
        return CategoryBudget(
            id=str(row["id"]) if row.get("id") is not None else None,
            category_id=str(row.get("category_id") or ""),
            user_id=str(row["user_id"]) if row.get("user_id") is not None else None,
            year=int(row.get("year") or 0),
            month=int(row.get("month") or 0),
            budget_amount=optional_money(row.get("budget_amount")),
            spent_amount=optional_money(row.get("spent_amount")),
        )

    def _normalize_joined_row(self, row: dict[str, Any]) -> TransactionRow:
        category = row.get("category") if isinstance(row.get("category"), dict) else {}
        return TransactionRow(
            id=str(row.get("id")),
            name=str(row.get("name") or ""),
            amount=to_money(row.get("amount")),
            date=self._parse_date(row.get("date")),
            category_id=str(category.get("id") or "uncategorized"),
            category_name=str(category.get("name") or ""),
            category_color=str(category.get("color") or ""),
            category_icon=str(category.get("icon") or ""),
        )

    def _normalize_transaction_row(self, row: dict[str, Any]) -> Transaction:
        return Transaction(
            id=str(row.get("id")),
            user_id=str(row.get("user_id") or ""),
            name=str(row.get("name") or ""),
            type=CategoryType(str(row.get("type") or "expense")),
            amount=to_money(row.get("amount")),
            date=self._parse_date(row.get("date")),
            category_id=str(row.get("category_id") or ""),
            income_category_id=row.get("income_category_id") or None,
            observation=row.get("observation") or None,
        )

    def _normalize_category_row(self, row: dict[str, Any]) -> Category:
        return Category(
            id=str(row.get("id")),
            user_id=str(row.get("user_id") or ""),
            name=str(row.get("name") or ""),
            type=CategoryType(str(row.get("type") or "expense")),
            icon=str(row.get("icon") or ""),
            color=str(row.get("color") or ""),
            monthly_budget=optional_money(row.get("monthly_budget")),
            is_active=bool(row.get("is_active", True)),
        )

    def _normalize_goal_row(self, row: dict[str, Any]) -> Goal:
        deadline = row.get("deadline")
        return Goal(
            id=str(row.get("id")),
            user_id=str(row.get("user_id") or ""),
            name=str(row.get("name") or ""),
            current_amount=to_money(row.get("current_amount")),
            color=str(row.get("color") or ""),
            icon=str(row.get("icon") or ""),
            target_amount=optional_money(row.get("target_amount")),
            deadline=self._parse_date(deadline) if deadline else None,
            is_completed=bool(row.get("is_completed", False)),
        )

    def _parse_date(self, raw_date: Any) -> date:
        value = str(raw_date or "").strip()
        if not value:
            raise StoreError("Row missing date")
        try:
            return date.fromisoformat(value[:10])
        except ValueError as exc:
            raise StoreError(f"Unsupported date format: {value!r}") from exc
