from __future__ import annotations

import unittest

from application.services import AppServices
from domain.schemas import ToolRequest, ToolResponse
from infrastructure.stores.memory_store import MemoryStore
from tools.registry import ToolRegistry, build_registry


class _FakeTool:
    name = "fake_tool"

    def run(self, request: ToolRequest) -> ToolResponse:
        return ToolResponse(
            request_id=request.request_id,
            tool=self.name,
            result={"echo": request.args},
            context=request.context,
        )


class ToolRegistryTests(unittest.TestCase):
    def test_tool_request_schema_shape(self) -> None:
        payload = {
            "request_id": "req_01HZYQ3",
            "tool": "analytics.monthly",
            "args": {"year": 2026, "month": 3, "type": "expense"},
            "context": {"timezone": "America/Sao_Paulo", "locale": "pt-BR"},
        }
        request = ToolRequest.model_validate(payload)
        self.assertEqual(request.tool, "analytics.monthly")
        self.assertEqual(request.args["month"], 3)
        self.assertEqual(request.context.locale, "pt-BR")

    def test_context_defaults(self) -> None:
        request = ToolRequest(request_id="r1", tool="goals.progress")
        self.assertEqual(request.args, {})
        self.assertEqual(request.context.timezone, "UTC")
        self.assertIsNone(request.context.locale)

    def test_register_and_get_tool(self) -> None:
        registry = ToolRegistry()
        tool = _FakeTool()
        registry.register(tool)

        result = registry.get_tool("fake_tool")
        self.assertIs(result, tool)

    def test_get_missing_tool_raises_key_error(self) -> None:
        registry = ToolRegistry()

        with self.assertRaises(KeyError):
            registry.get_tool("missing")

    def test_build_registry_binds_tools_to_services(self) -> None:
        services = AppServices.build(MemoryStore(user_id="u_1"))
        first = build_registry(services)
        second = build_registry(AppServices.build(MemoryStore(user_id="u_2")))

        names = {spec.name for spec in first.list_specs()}
        self.assertIn("budget.validate", names)
        self.assertIn("analytics.monthly", names)
        self.assertIn("analytics.transactions_by_day", names)
        self.assertIs(first.get_tool("budget.validate").services, services)
        self.assertIsNot(first.get_tool("budget.validate"), second.get_tool("budget.validate"))


if __name__ == "__main__":
    unittest.main()
