from __future__ import annotations

import json
import sys
from datetime import datetime

from application.services import AppServices
from application.tool_executor import ToolExecutor
from domain.schemas import ToolContext, ToolRequest
from infrastructure.settings import Settings
from infrastructure.stores import DataStore, build_store
from tools.registry import ToolRegistry, build_registry


def build_executor(settings: Settings | None = None, store: DataStore | None = None) -> tuple[ToolExecutor, ToolRegistry]:
    settings = settings or Settings.from_env()
    services = AppServices.build(store or build_store(settings), settings)
    registry = build_registry(services)
    return ToolExecutor(registry), registry


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    settings = Settings.from_env()
    executor, registry = build_executor(settings)

    if not argv or argv[0] in ("-h", "--help", "list"):
        print("usage: finflow <tool> ['<json args>']\n\ntools:")
        for spec in registry.list_specs():
            print(f"  {spec.name:32} {spec.description}")
        return 0

    tool_name = argv[0]
    try:
        args = json.loads(argv[1]) if len(argv) > 1 else {}
    except json.JSONDecodeError as exc:
        print(f"[finflow] invalid JSON args: {exc}", file=sys.stderr)
        return 2

    request = ToolRequest(
        request_id=f"req_cli_{datetime.now().strftime('%Y%m%d%H%M%S')}",
        tool=tool_name,
        args=args if isinstance(args, dict) else {},
        context=ToolContext(locale=settings.locale),
    )
    response = executor.run(request)
    print(response.model_dump_json(indent=2))
    return 0 if response.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
