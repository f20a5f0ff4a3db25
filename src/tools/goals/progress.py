from __future__ import annotations

from domain.schemas import ToolRequest, ToolResponse
from tools.base import Tool
from tools.registry import register_tool


@register_tool
class GoalProgressTool(Tool):
    name = "goals.progress"
    description = "Savings goals with progress percentage, remaining amount and days to deadline."

    def run(self, request: ToolRequest) -> ToolResponse:
        outcome = self.services.goals.goals_with_progress(self.today(request))
        return self.respond(request, outcome, key="goals")
