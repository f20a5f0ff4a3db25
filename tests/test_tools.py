from __future__ import annotations

import unittest
from datetime import date
from decimal import Decimal

from application.services import AppServices
from application.tool_executor import ToolExecutor
from domain.models import Category, CategoryBudget, CategoryType, Goal, Transaction
from domain.schemas import ToolContext, ToolRequest
from infrastructure.settings import Settings
from infrastructure.stores.memory_store import MemoryStore
from tools.base import Tool
from tools.registry import build_registry


def _request(tool_name: str, args: dict | None = None, **context) -> ToolRequest:
    return ToolRequest(
        request_id=f"req:{tool_name}",
        tool=tool_name,
        args=args or {},
        context=ToolContext(timezone="America/Sao_Paulo", **context),
    )


class _ExplodingTool(Tool):
    name = "debug.explode"

    def run(self, request):
        raise RuntimeError("kaboom")


class ToolsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = MemoryStore(
            user_id="u_1",
            categories=[
                Category(id="food", user_id="u_1", name="Food", type=CategoryType.EXPENSE, icon="cart", color="#0f0"),
                Category(id="rent", user_id="u_1", name="Rent", type=CategoryType.EXPENSE),
                Category(id="salary", user_id="u_1", name="Salary", type=CategoryType.INCOME),
            ],
            budgets=[
                CategoryBudget(category_id="food", year=2026, month=3, budget_amount=Decimal("100.00"), spent_amount=Decimal("80.00")),
            ],
            transactions=[
                Transaction(id="t1", user_id="u_1", name="Market", type=CategoryType.EXPENSE, amount=Decimal("80.00"),
                            date=date(2026, 3, 2), category_id="food", income_category_id="salary"),
                Transaction(id="t2", user_id="u_1", name="Rent", type=CategoryType.EXPENSE, amount=Decimal("920.00"),
                            date=date(2026, 3, 5), category_id="rent", income_category_id="salary"),
            ],
            goals=[Goal(id="g1", user_id="u_1", name="Trip", current_amount=Decimal("50.00"), target_amount=Decimal("200.00"))],
        )
        self.services = AppServices.build(self.store, Settings(locale="en-US", currency_symbol="R$"))
        self.registry = build_registry(self.services)
        self.executor = ToolExecutor(self.registry)

    def test_all_tools_are_registered(self) -> None:
        names = {spec.name for spec in self.registry.list_specs()}
        self.assertEqual(
            names,
            {
                "budget.validate",
                "analytics.monthly",
                "analytics.transactions_by_day",
                "transactions.create",
                "transactions.update",
                "transactions.delete",
                "transactions.day_summary",
                "categories.with_budget",
                "goals.progress",
                "goals.add_balance",
            },
        )
        spec = self.registry.get_tool("budget.validate").spec()
        self.assertIn("category_id", spec.args_schema["properties"])

    def test_budget_validate_scenarios(self) -> None:
        ok = self.executor.run(_request("budget.validate", {"category_id": "food", "amount": 20, "date": "2026-03-20"}))
        over = self.executor.run(_request("budget.validate", {"category_id": "food", "amount": "30.00", "date": "2026-03-20"}))

        self.assertTrue(ok.ok)
        self.assertEqual(ok.result["is_valid"], True)
        self.assertEqual(ok.result["would_exceed"], False)
        self.assertEqual(ok.result["remaining_amount"], 20.0)

        self.assertTrue(over.ok)
        self.assertFalse(over.result["is_valid"])
        self.assertTrue(over.result["would_exceed"])
        self.assertIn("R$ 80.00", over.result["error_message"])

    def test_budget_validate_rejects_bad_args(self) -> None:
        res = self.executor.run(_request("budget.validate", {"category_id": "food", "amount": -1, "date": "2026-03-20"}))
        self.assertFalse(res.ok)
        self.assertTrue(any(e.startswith("amount") for e in res.errors))

    def test_monthly_analytics(self) -> None:
        res = self.executor.run(_request("analytics.monthly", {"year": 2026, "month": 3, "type": "expense"}))

        self.assertTrue(res.ok)
        self.assertEqual(len(res.result["daily_flow"]), 31)
        self.assertEqual(res.result["daily_flow"][0]["date"], "2026-03-01")
        self.assertEqual(res.result["total_amount"], 1000.0)
        overview = res.result["category_overview"]
        self.assertEqual([c["category_id"] for c in overview], ["rent", "food"])
        self.assertAlmostEqual(overview[0]["percentage"], 92.0)

    def test_monthly_analytics_month_out_of_range(self) -> None:
        res = self.executor.run(_request("analytics.monthly", {"year": 2026, "month": 0}))
        self.assertFalse(res.ok)

    def test_transactions_by_day_uses_request_locale(self) -> None:
        res = self.executor.run(_request("analytics.transactions_by_day", {"year": 2026, "month": 3}, locale="pt-BR"))

        self.assertTrue(res.ok)
        self.assertEqual(res.result["day_count"], 2)
        self.assertEqual(res.result["days"][0]["date"], "2026-03-05")
        self.assertEqual(res.result["days"][0]["day_name"], "Quinta")

    def test_create_transaction_blocked_over_budget(self) -> None:
        args = {
            "name": "Dinner",
            "type": "expense",
            "amount": 30,
            "date": "2026-03-21",
            "category_id": "food",
            "income_category_id": "salary",
        }
        res = self.executor.run(_request("transactions.create", args))

        self.assertFalse(res.ok)
        self.assertIn("would exceed the budget", res.errors[0])

        args["amount"] = 20
        res = self.executor.run(_request("transactions.create", args))
        self.assertTrue(res.ok)
        self.assertEqual(res.result["transaction"]["amount"], 20.0)

    def test_sub_cent_amount_is_rejected(self) -> None:
        for amount in ("0.001", "0.004"):
            res = self.executor.run(_request("budget.validate", {"category_id": "food", "amount": amount, "date": "2026-03-20"}))
            self.assertFalse(res.ok)
            self.assertTrue(res.errors[0].startswith("amount"))

    def test_delete_frees_budget_then_update_is_revalidated(self) -> None:
        self.store.put_budget(
            CategoryBudget(category_id="rent", year=2026, month=3, budget_amount=Decimal("1000.00"), spent_amount=Decimal("920.00"))
        )

        deleted = self.executor.run(_request("transactions.delete", {"id": "t1"}))
        self.assertTrue(deleted.ok)
        self.assertEqual(deleted.result["transaction"]["id"], "t1")
        self.assertEqual(self.store.fetch_budget("food", 2026, 3).spent_amount, Decimal("0.00"))

        over = self.executor.run(_request("transactions.update", {"id": "t2", "changes": {"amount": "1000.01"}}))
        fits = self.executor.run(_request("transactions.update", {"id": "t2", "changes": {"amount": 1000}}))

        self.assertFalse(over.ok)
        self.assertTrue(fits.ok)
        self.assertEqual(fits.result["transaction"]["amount"], 1000.0)
        self.assertEqual(self.store.fetch_budget("rent", 2026, 3).spent_amount, Decimal("1000.00"))

        missing = self.executor.run(_request("transactions.delete", {"id": "t1"}))
        self.assertEqual(missing.errors, ["Transaction not found"])

    def test_goal_add_balance(self) -> None:
        res = self.executor.run(_request("goals.add_balance", {"goal_id": "g1", "amount": "25.50"}))

        self.assertTrue(res.ok)
        self.assertEqual(res.result["goal"]["current_amount"], 75.5)
        self.assertFalse(self.executor.run(_request("goals.add_balance", {"goal_id": "g1", "amount": 0})).ok)

    def test_day_summary_and_goals_and_categories(self) -> None:
        summary = self.executor.run(_request("transactions.day_summary", {"date": "2026-03-05"}))
        goals = self.executor.run(_request("goals.progress"))
        categories = self.executor.run(_request("categories.with_budget", {"type": "income"}))

        self.assertEqual(summary.result["total_expense"], 920.0)
        self.assertEqual(summary.result["balance"], -920.0)
        self.assertAlmostEqual(goals.result["goals"][0]["progress_percentage"], 25.0)
        self.assertEqual([c["id"] for c in categories.result["categories"]], ["salary"])

    def test_not_authenticated_is_structured(self) -> None:
        self.store.sign_in(None)
        res = self.executor.run(_request("analytics.monthly", {"year": 2026, "month": 3}))
        self.assertFalse(res.ok)
        self.assertEqual(res.errors, ["User not authenticated"])

    def test_executor_converts_unknown_tool_and_exceptions(self) -> None:
        missing = self.executor.run(_request("nope.missing"))
        self.assertFalse(missing.ok)
        self.assertIn("Tool not registered", missing.errors[0])

        self.registry.register(_ExplodingTool(self.services))
        with self.assertLogs("application.tool_executor", level="ERROR"):
            exploded = self.executor.run(_request("debug.explode"))
        self.assertFalse(exploded.ok)
        self.assertEqual(exploded.errors, ["kaboom"])


if __name__ == "__main__":
    unittest.main()
