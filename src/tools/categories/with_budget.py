from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from domain.models import CategoryType
from domain.schemas import CategoryKind, ToolRequest, ToolResponse
from tools.base import Tool
from tools.registry import register_tool


class CategoriesArgs(BaseModel):
    type: Optional[CategoryKind] = None


@register_tool
class CategoriesWithBudgetTool(Tool):
    name = "categories.with_budget"
    description = "Active categories with the current month's budget, spent, remaining and percentage used."
    args_model = CategoriesArgs

    def run(self, request: ToolRequest) -> ToolResponse:
        args = self.parse_args(request, CategoriesArgs)
        if isinstance(args, ToolResponse):
            return args
        txn_type = CategoryType(args.type) if args.type else None
        outcome = self.services.categories.categories_with_budget(self.today(request), txn_type)
        return self.respond(request, outcome, key="categories")
