from __future__ import annotations

from domain.schemas import BudgetValidationRequest, ToolRequest, ToolResponse
from tools.base import Tool
from tools.registry import register_tool


@register_tool
class ValidateBudgetTool(Tool):
    name = "budget.validate"
    description = (
        "Check whether a candidate expense fits the remaining monthly budget of its category. "
        "Takes `category_id`, `amount` and `date` (YYYY-MM-DD); the budget period is the date's month."
    )
    args_model = BudgetValidationRequest

    def run(self, request: ToolRequest) -> ToolResponse:
        args = self.parse_args(request, BudgetValidationRequest)
        if isinstance(args, ToolResponse):
            return args
        outcome = self.services.validator.validate(args.category_id, args.amount, args.date)
        return self.respond(request, outcome)
