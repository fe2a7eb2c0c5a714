from __future__ import annotations
import importlib
import pkgutil
from typing import List
from loguru import logger
from .tool_base import ToolBase

TOOLS_PKG = "toolbox_app.tools"


class ToolNotFoundError(RuntimeError):
    pass


def discover_tools() -> List[ToolBase]:
    """
    Tools are packages under toolbox_app.tools that expose `TOOL` at module level,
    e.g. toolbox_app/tools/my_tool/__init__.py resolving TOOL = MyTool().
    A tool that fails to import is logged and skipped.
    """
    tools: List[ToolBase] = []
    pkg = importlib.import_module(TOOLS_PKG)
    for m in pkgutil.iter_modules(pkg.__path__):
        mod_name = f"{TOOLS_PKG}.{m.name}"
        try:
            mod = importlib.import_module(mod_name)
            tool = getattr(mod, "TOOL", None)
        except Exception as e:
            logger.exception(f"Failed loading tool {mod_name}: {e}")
            continue
        if tool is None:
            logger.warning(f"Module {mod_name} has no TOOL export; skipping.")
            continue
        tools.append(tool)
    tools.sort(key=lambda t: (t.meta.category.lower(), t.meta.name.lower()))
    return tools


def get_tool(tool_id: str) -> ToolBase:
    for t in discover_tools():
        if t.meta.id == tool_id:
            return t
    raise ToolNotFoundError(f"No tool with id '{tool_id}'.")
