from __future__ import annotations

from application.services import AppServices
from tools.base import Tool, ToolSpec

# Tool classes collected by @register_tool; instantiated per AppServices.
_TOOL_CLASSES: dict[str, type[Tool]] = {}


class ToolRegistry:
    def __init__(self):
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def get_tool(self, name: str) -> Tool:
        if name not in self._tools:
            raise KeyError(f"Tool not registered: {name}")
        return self._tools[name]

    def list_specs(self) -> list[ToolSpec]:
        return [tool.spec() for tool in self._tools.values()]


def register_tool(tool_cls: type[Tool]) -> type[Tool]:
    _TOOL_CLASSES[tool_cls.name] = tool_cls
    return tool_cls


def build_registry(services: AppServices) -> ToolRegistry:
    import tools  # noqa: F401

    registry = ToolRegistry()
    for tool_cls in _TOOL_CLASSES.values():
        registry.register(tool_cls(services))
    return registry
