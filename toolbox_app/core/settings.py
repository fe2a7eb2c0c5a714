from __future__ import annotations

import json
from typing import Any, Dict

from loguru import logger

from toolbox_app.core.paths import settings_path


def load_settings() -> Dict[str, Any]:
    """Whole settings.json as a dict; empty when missing or unreadable."""
    p = settings_path()
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read {p}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring {p}: top level is not an object")
        return {}
    return data


def save_settings(data: Dict[str, Any]) -> None:
    p = settings_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, indent=2), encoding="utf-8")


def update_tool_settings(tool_id: str, section: Dict[str, Any]) -> None:
    data = load_settings()
    data[tool_id] = {**(data.get(tool_id) or {}), **section}
    save_settings(data)
