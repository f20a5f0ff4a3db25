from __future__ import annotations

from domain.schemas import AddBalanceRequest, ToolRequest, ToolResponse
from tools.base import Tool
from tools.registry import register_tool


@register_tool
class AddGoalBalanceTool(Tool):
    name = "goals.add_balance"
    description = "Deposit an amount into a savings goal and return its updated progress."
    args_model = AddBalanceRequest

    def run(self, request: ToolRequest) -> ToolResponse:
        args = self.parse_args(request, AddBalanceRequest)
        if isinstance(args, ToolResponse):
            return args
        outcome = self.services.goals.add_balance(args.goal_id, args.amount, self.today(request))
        return self.respond(request, outcome, key="goal")
