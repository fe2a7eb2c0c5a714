from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Tuple

from loguru import logger

RUN_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {extra[tool_id]} | {message}"


def get_run_logger(run_dir: Path, tool_id: str, input_hash: Optional[str] = None) -> Tuple[Any, int]:
    """Bound logger plus a run.log sink that only receives records bound to this run.

    The app-level sinks from toolbox_app.core.logging keep receiving everything.
    Pair every call with remove_run_logger_sink.
    """
    run_dir.mkdir(parents=True, exist_ok=True)
    key = str(run_dir)
    bound = logger.bind(tool_id=tool_id, run_dir=key, input_hash=input_hash or "")
    sink_id = logger.add(
        str(run_dir / "run.log"),
        level="DEBUG",
        enqueue=False,
        backtrace=True,
        diagnose=False,
        format=RUN_LOG_FORMAT,
        filter=lambda r: r["extra"].get("tool_id") == tool_id and r["extra"].get("run_dir") == key,
    )
    return bound, sink_id


def remove_run_logger_sink(sink_id: Optional[int]) -> None:
    if sink_id is None:
        return
    try:
        logger.remove(sink_id)
    except ValueError:
        # already removed, e.g. by a global logger.remove() in the host
        pass
