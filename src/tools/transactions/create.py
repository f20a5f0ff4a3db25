from __future__ import annotations

from domain.schemas import CreateTransactionRequest, ToolRequest, ToolResponse
from tools.base import Tool
from tools.registry import register_tool


@register_tool
class CreateTransactionTool(Tool):
    name = "transactions.create"
    description = "Create an income or expense transaction; expenses are rejected when they would exceed the category budget."
    args_model = CreateTransactionRequest

    def run(self, request: ToolRequest) -> ToolResponse:
        args = self.parse_args(request, CreateTransactionRequest)
        if isinstance(args, ToolResponse):
            return args
        return self.respond(request, self.services.transactions.create_transaction(args), key="transaction")
