"""
Headless entry point.

  python -m toolbox_app.run --list
  python -m toolbox_app.run masonry_support_optimizer --inputs design.json
  python -m toolbox_app.run masonry_support_optimizer --set top_alternatives=5 --save-settings
"""
from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from toolbox_app.core.loader import ToolNotFoundError, discover_tools, get_tool
from toolbox_app.core.logging import configure_logging
from toolbox_app.core.settings import update_tool_settings


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="toolbox", description="Run a toolbox tool in batch mode.")
    p.add_argument("tool_id", nargs="?", help="Tool id, see --list.")
    p.add_argument("--inputs", type=Path, help="JSON file of inputs; missing keys take tool defaults.")
    p.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a tool setting for this run (repeatable). VALUE is parsed as JSON when possible.",
    )
    p.add_argument("--save-settings", action="store_true", help="Also store the --set values in settings.json.")
    p.add_argument("--list", action="store_true", help="List available tools and exit.")
    return p


def _parse_overrides(pairs: List[str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected KEY=VALUE, got {pair!r}")
        try:
            out[key.strip()] = json.loads(raw)
        except json.JSONDecodeError:
            out[key.strip()] = raw
    return out


def main(argv: Optional[List[str]] = None) -> int:
    args = _parser().parse_args(argv)
    configure_logging()

    if args.list or not args.tool_id:
        for t in discover_tools():
            print(f"{t.meta.id:32s} {t.meta.name} v{t.meta.version}")
        return 0

    try:
        tool = get_tool(args.tool_id)
        overrides = _parse_overrides(args.overrides)
    except (ToolNotFoundError, ValueError) as e:
        logger.error(str(e))
        return 2

    if args.save_settings and overrides:
        update_tool_settings(tool.meta.id, overrides)
        logger.info(f"Saved settings for {tool.meta.id}: {overrides}")

    inputs = tool.default_inputs()
    if args.inputs:
        inputs.update(json.loads(args.inputs.read_text(encoding="utf-8")))

    out = tool.run(inputs, overrides or None)
    print(json.dumps(out, indent=2, default=str))
    return 0 if out.get("ok") else 1


if __name__ == "__main__":
    raise SystemExit(main())
