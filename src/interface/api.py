from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI
from pydantic import BaseModel, Field

from application.tool_executor import ToolExecutor
from domain.schemas import ToolContext, ToolRequest
from interface.cli import build_executor
from tools.registry import ToolRegistry


class ToolCall(BaseModel):
    request_id: Optional[str] = None
    args: Dict[str, Any] = Field(default_factory=dict)
    context: ToolContext = Field(default_factory=ToolContext)


def create_app(executor: ToolExecutor | None = None, registry: ToolRegistry | None = None) -> FastAPI:
    if executor is None or registry is None:
        executor, registry = build_executor()

    app = FastAPI(title="finflow API")

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/tools")
    def list_tools() -> list[dict[str, Any]]:
        return [
            {"name": spec.name, "description": spec.description, "args_schema": spec.args_schema}
            for spec in registry.list_specs()
        ]

    @app.post("/tools/{tool_name}")
    def call_tool(tool_name: str, call: ToolCall) -> dict[str, Any]:
        request = ToolRequest(
            request_id=call.request_id or f"req_api_{uuid.uuid4().hex[:12]}",
            tool=tool_name,
            args=call.args,
            context=call.context,
        )
        return executor.run(request).model_dump(mode="json")

    return app


app = create_app()
