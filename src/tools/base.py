from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, TypeVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ValidationError

from application.services import AppServices
from domain.schemas import ServiceResult, ToolRequest, ToolResponse

ArgsModel = TypeVar("ArgsModel", bound=BaseModel)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    args_schema: dict[str, Any]


class Tool(ABC):
    name: str
    description: str = ""
    args_model: type[BaseModel] | None = None

    def __init__(self, services: AppServices):
        self.services = services

    @abstractmethod
    def run(self, request: ToolRequest) -> ToolResponse:
        raise NotImplementedError

    def spec(self) -> ToolSpec:
        schema = self.args_model.model_json_schema() if self.args_model is not None else {}
        return ToolSpec(name=self.name, description=self.description, args_schema=schema)

    # ---- helpers shared by concrete tools ----
    def parse_args(self, request: ToolRequest, model: type[ArgsModel]) -> ArgsModel | ToolResponse:
        try:
            return model.model_validate(request.args if isinstance(request.args, dict) else {})
        except ValidationError as exc:
            errors = [f"{'.'.join(str(p) for p in e['loc']) or 'args'}: {e['msg']}" for e in exc.errors()]
            return self.failure(request, errors)

    def respond(self, request: ToolRequest, outcome: ServiceResult, key: str | None = None) -> ToolResponse:
        if not outcome.ok:
            return self.failure(request, [outcome.error or "Request failed"])
        data = outcome.model_dump(mode="json")["data"]
        result = {key: data} if key else (data or {})
        return ToolResponse(request_id=request.request_id, tool=self.name, result=result, context=request.context)

    def failure(self, request: ToolRequest, errors: list[str]) -> ToolResponse:
        return ToolResponse(
            request_id=request.request_id,
            tool=self.name,
            ok=False,
            errors=errors,
            context=request.context,
        )

    def today(self, request: ToolRequest) -> date:
        try:
            return datetime.now(ZoneInfo(request.context.timezone)).date()
        except (ZoneInfoNotFoundError, ValueError):
            return date.today()
