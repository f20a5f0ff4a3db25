from __future__ import annotations

from pydantic import BaseModel, Field

from domain.schemas import ToolRequest, ToolResponse
from tools.base import Tool
from tools.registry import register_tool


class DeleteTransactionArgs(BaseModel):
    id: str = Field(min_length=1)


@register_tool
class DeleteTransactionTool(Tool):
    name = "transactions.delete"
    description = "Delete a transaction; a deleted expense frees its amount in the category budget."
    args_model = DeleteTransactionArgs

    def run(self, request: ToolRequest) -> ToolResponse:
        args = self.parse_args(request, DeleteTransactionArgs)
        if isinstance(args, ToolResponse):
            return args
        return self.respond(request, self.services.transactions.delete_transaction(args.id), key="transaction")
