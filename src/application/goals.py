from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from domain.models import Goal, to_money
from domain.schemas import GoalWithProgress, ServiceResult
from infrastructure.stores.store import DataStore, StoreError

logger = logging.getLogger(__name__)


def goal_progress(goal: Goal, today: date) -> GoalWithProgress:
    view = GoalWithProgress(
        id=goal.id,
        name=goal.name,
        current_amount=goal.current_amount,
        target_amount=goal.target_amount,
        color=goal.color,
        icon=goal.icon,
        deadline=goal.deadline,
        is_completed=goal.is_completed,
    )
    if goal.target_amount is not None and goal.target_amount > 0:
        view.progress_percentage = min(float(goal.current_amount / goal.target_amount * 100), 100.0)
        view.remaining_amount = max(goal.target_amount - goal.current_amount, Decimal("0.00"))
    if goal.deadline is not None:
        view.days_remaining = (goal.deadline - today).days
        view.is_overdue = view.days_remaining < 0 and not goal.is_completed
    return view


class GoalService:
    def __init__(self, store: DataStore):
        self._store = store

    def goals_with_progress(self, today: date) -> ServiceResult[list[GoalWithProgress]]:
        try:
            user_id = self._store.current_user_id()
            if user_id is None:
                return ServiceResult[list[GoalWithProgress]].failure("User not authenticated")
            goals = self._store.fetch_goals(user_id)
        except StoreError:
            logger.exception("Goals fetch failed")
            return ServiceResult[list[GoalWithProgress]].failure("Could not retrieve goals")

        # Open goals first; sorted() keeps the store's order within each group.
        views = sorted((goal_progress(g, today) for g in goals), key=lambda g: g.is_completed)
        return ServiceResult[list[GoalWithProgress]].success(views)

    def add_balance(self, goal_id: str, amount: Decimal, today: date) -> ServiceResult[GoalWithProgress]:
        """Add a deposit to a goal's current_amount."""
        try:
            if self._store.current_user_id() is None:
                return ServiceResult[GoalWithProgress].failure("User not authenticated")
            goal = self._store.fetch_goal(goal_id)
            if goal is None:
                return ServiceResult[GoalWithProgress].failure("Goal not found")
            goal = self._store.update_goal_amount(goal_id, to_money(goal.current_amount) + to_money(amount))
        except StoreError:
            logger.exception("Add balance failed goal_id=%s", goal_id)
            return ServiceResult[GoalWithProgress].failure("Could not add balance")

        logger.info("Goal balance added goal_id=%s amount=%s current=%s", goal_id, amount, goal.current_amount)
        return ServiceResult[GoalWithProgress].success(goal_progress(goal, today))
