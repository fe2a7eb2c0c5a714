from __future__ import annotations

import hashlib
import json
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from toolbox_app.core.paths import user_data_dir

from .constants import TOOL_ID


def runs_root(tool_id: str = TOOL_ID) -> Path:
    root = user_data_dir() / tool_id / "runs"
    root.mkdir(parents=True, exist_ok=True)
    return root


def create_run_dir(tool_id: str = TOOL_ID, input_hash: Optional[str] = None) -> Path:
    """New run folder: <user data>/<tool_id>/runs/YYYYMMDD_HHMMSS_<short>.

    The suffix mixes the input hash with a per-call token so that two runs in the same
    second never share a folder.
    """
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    token = hashlib.sha256(f"{ts}:{os.getpid()}:{time.time_ns()}".encode("utf-8")).hexdigest()[:8]
    short = f"{str(input_hash)[:6]}{token[:2]}" if input_hash else token

    run_dir = runs_root(tool_id) / f"{ts}_{short}"
    run_dir.mkdir(parents=True, exist_ok=False)
    return run_dir


def _normalise(v: Any) -> Any:
    if isinstance(v, float):
        return float(f"{v:.12g}")
    if isinstance(v, (list, tuple)):
        return [_normalise(x) for x in v]
    return v


def compute_input_hash(inputs: Dict[str, Any]) -> str:
    """12-hex-digit hash of the JSON-normalised inputs; floats compared at 12 significant figures."""
    norm = {k: _normalise(inputs[k]) for k in sorted(inputs)}
    payload = json.dumps(norm, sort_keys=True, separators=(",", ":"), ensure_ascii=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:12]
