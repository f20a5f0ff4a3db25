from __future__ import annotations

from pydantic import BaseModel, Field

from domain.schemas import ToolRequest, ToolResponse, UpdateTransactionRequest
from tools.base import Tool
from tools.registry import register_tool


class UpdateTransactionArgs(BaseModel):
    id: str = Field(min_length=1)
    changes: UpdateTransactionRequest


@register_tool
class UpdateTransactionTool(Tool):
    name = "transactions.update"
    description = (
        "Edit a transaction's name, amount, date, category, funding category or observation. "
        "Expense edits that add spending to a budget period are re-validated against that budget."
    )
    args_model = UpdateTransactionArgs

    def run(self, request: ToolRequest) -> ToolResponse:
        args = self.parse_args(request, UpdateTransactionArgs)
        if isinstance(args, ToolResponse):
            return args
        outcome = self.services.transactions.update_transaction(args.id, args.changes)
        return self.respond(request, outcome, key="transaction")
