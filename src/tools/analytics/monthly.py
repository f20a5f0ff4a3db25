from __future__ import annotations

from domain.models import CategoryType
from domain.schemas import AnalyticsQuery, ToolRequest, ToolResponse
from tools.base import Tool
from tools.registry import register_tool


@register_tool
class MonthlyAnalyticsTool(Tool):
    name = "analytics.monthly"
    description = (
        "Aggregate one month of income or expense transactions into a zero-filled daily flow "
        "with running totals and a per-category overview sorted by amount."
    )
    args_model = AnalyticsQuery

    def run(self, request: ToolRequest) -> ToolResponse:
        args = self.parse_args(request, AnalyticsQuery)
        if isinstance(args, ToolResponse):
            return args
        outcome = self.services.analytics.monthly_analytics(args.year, args.month, CategoryType(args.type))
        return self.respond(request, outcome)
