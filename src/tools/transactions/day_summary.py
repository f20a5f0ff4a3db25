from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from domain.schemas import CalendarDate, ToolRequest, ToolResponse
from tools.base import Tool
from tools.registry import register_tool


class DaySummaryArgs(BaseModel):
    date: Optional[CalendarDate] = None


@register_tool
class DaySummaryTool(Tool):
    name = "transactions.day_summary"
    description = "Total income, total expense and balance for one day (defaults to today in the request timezone)."
    args_model = DaySummaryArgs

    def run(self, request: ToolRequest) -> ToolResponse:
        args = self.parse_args(request, DaySummaryArgs)
        if isinstance(args, ToolResponse):
            return args
        day = args.date or self.today(request)
        return self.respond(request, self.services.transactions.day_summary(day))
