from __future__ import annotations

from domain.models import CategoryType
from domain.schemas import AnalyticsQuery, ToolRequest, ToolResponse
from tools.base import Tool
from tools.registry import register_tool


@register_tool
class TransactionsByDayTool(Tool):
    name = "analytics.transactions_by_day"
    description = "List a month's transactions grouped by day (days with activity only), most recent first."
    args_model = AnalyticsQuery

    def run(self, request: ToolRequest) -> ToolResponse:
        args = self.parse_args(request, AnalyticsQuery)
        if isinstance(args, ToolResponse):
            return args
        outcome = self.services.analytics.transactions_by_day(
            args.year,
            args.month,
            CategoryType(args.type),
            locale=request.context.locale,
        )
        response = self.respond(request, outcome, key="days")
        if response.ok:
            response.result["day_count"] = len(response.result["days"])
        return response
