from __future__ import annotations

import unittest
from datetime import date
from decimal import Decimal

from application.categories import CategoryBudgetService
from application.goals import GoalService, goal_progress
from domain.models import Category, CategoryBudget, CategoryType, Goal
from infrastructure.stores.memory_store import MemoryStore


class CategoryBudgetServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = MemoryStore(
            user_id="u_1",
            categories=[
                Category(id="food", user_id="u_1", name="Food", type=CategoryType.EXPENSE, monthly_budget=Decimal("200.00")),
                Category(id="fun", user_id="u_1", name="Fun", type=CategoryType.EXPENSE),
                Category(id="salary", user_id="u_1", name="Salary", type=CategoryType.INCOME),
                Category(id="gone", user_id="u_1", name="Gone", type=CategoryType.EXPENSE, is_active=False),
            ],
            budgets=[
                CategoryBudget(category_id="food", year=2026, month=3, budget_amount=Decimal("200.00"), spent_amount=Decimal("50.00")),
                CategoryBudget(category_id="food", year=2026, month=2, budget_amount=Decimal("200.00"), spent_amount=Decimal("199.00")),
            ],
        )
        self.service = CategoryBudgetService(self.store)

    def test_annotates_current_month_budget(self) -> None:
        result = self.service.categories_with_budget(date(2026, 3, 17), CategoryType.EXPENSE)

        self.assertTrue(result.ok)
        by_id = {c.id: c for c in result.data}
        self.assertEqual(set(by_id), {"food", "fun"})
        food = by_id["food"]
        self.assertEqual(food.current_budget.month, 3)
        self.assertEqual(food.spent_amount, Decimal("50.00"))
        self.assertEqual(food.remaining_amount, Decimal("150.00"))
        self.assertAlmostEqual(food.budget_percentage, 25.0)
        self.assertIsNone(by_id["fun"].current_budget)
        self.assertIsNone(by_id["fun"].budget_percentage)

    def test_zero_budget_percentage_is_zero(self) -> None:
        self.store.put_budget(CategoryBudget(category_id="fun", year=2026, month=3, budget_amount=Decimal("0"), spent_amount=Decimal("10")))
        result = self.service.categories_with_budget(date(2026, 3, 1))
        fun = next(c for c in result.data if c.id == "fun")
        self.assertEqual(fun.budget_percentage, 0.0)

    def test_not_authenticated(self) -> None:
        self.store.sign_in(None)
        self.assertFalse(self.service.categories_with_budget(date(2026, 3, 1)).ok)


class GoalProgressTests(unittest.TestCase):
    def _goal(self, **kwargs) -> Goal:
        base = dict(id="g1", user_id="u_1", name="Trip", current_amount=Decimal("0.00"))
        base.update(kwargs)
        return Goal(**base)

    def test_progress_and_remaining(self) -> None:
        view = goal_progress(self._goal(current_amount=Decimal("250.00"), target_amount=Decimal("1000.00")), date(2026, 3, 1))
        self.assertAlmostEqual(view.progress_percentage, 25.0)
        self.assertEqual(view.remaining_amount, Decimal("750.00"))

    def test_progress_caps_at_100_and_remaining_floors_at_zero(self) -> None:
        view = goal_progress(self._goal(current_amount=Decimal("1500.00"), target_amount=Decimal("1000.00")), date(2026, 3, 1))
        self.assertEqual(view.progress_percentage, 100.0)
        self.assertEqual(view.remaining_amount, Decimal("0.00"))

    def test_no_target_means_no_progress(self) -> None:
        view = goal_progress(self._goal(current_amount=Decimal("10.00")), date(2026, 3, 1))
        self.assertIsNone(view.progress_percentage)
        self.assertIsNone(view.remaining_amount)

    def test_deadline_and_overdue(self) -> None:
        today = date(2026, 3, 10)
        upcoming = goal_progress(self._goal(deadline=date(2026, 3, 20)), today)
        overdue = goal_progress(self._goal(deadline=date(2026, 3, 1)), today)
        done = goal_progress(self._goal(deadline=date(2026, 3, 1), is_completed=True), today)

        self.assertEqual(upcoming.days_remaining, 10)
        self.assertFalse(upcoming.is_overdue)
        self.assertEqual(overdue.days_remaining, -9)
        self.assertTrue(overdue.is_overdue)
        self.assertFalse(done.is_overdue)

    def test_service_lists_open_goals_first(self) -> None:
        store = MemoryStore(
            user_id="u_1",
            goals=[
                self._goal(id="done", is_completed=True),
                self._goal(id="open"),
                self._goal(id="other", user_id="u_2"),
            ],
        )
        result = GoalService(store).goals_with_progress(date(2026, 3, 1))
        self.assertEqual([g.id for g in result.data], ["open", "done"])

    def test_add_balance_updates_progress(self) -> None:
        store = MemoryStore(user_id="u_1", goals=[self._goal(current_amount=Decimal("150.00"), target_amount=Decimal("400.00"))])
        service = GoalService(store)

        result = service.add_balance("g1", Decimal("50.00"), date(2026, 3, 1))

        self.assertTrue(result.ok)
        self.assertEqual(result.data.current_amount, Decimal("200.00"))
        self.assertAlmostEqual(result.data.progress_percentage, 50.0)
        self.assertEqual(store.fetch_goal("g1").current_amount, Decimal("200.00"))

    def test_add_balance_unknown_or_foreign_goal(self) -> None:
        store = MemoryStore(user_id="u_1", goals=[self._goal(id="theirs", user_id="u_2")])
        result = GoalService(store).add_balance("theirs", Decimal("10.00"), date(2026, 3, 1))
        self.assertFalse(result.ok)
        self.assertEqual(result.error, "Goal not found")


if __name__ == "__main__":
    unittest.main()
