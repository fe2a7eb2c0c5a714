from __future__ import annotations

from typing import Any, Dict, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from toolbox_app.core.schema_utils import validate_inputs
from toolbox_app.core.settings import load_settings

from .constants import TOOL_ID


class SearchSettings(BaseModel):
    """Search and alert tuning, read from the tool's section of settings.json."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    max_generations: Optional[int] = Field(None, gt=0, description="Cap on candidates evaluated. Empty for no cap.")
    top_alternatives: int = Field(10, ge=0, description="Alternatives listed in reports and spreadsheets.")
    high_load_threshold_kn_m: float = Field(5.0, ge=0.0, description="Load above which R-HPTIII alternatives are flagged.")
    margin_warning_pct: float = Field(90.0, gt=0.0, description="Governing utilisation that triggers a margin warning.")
    progress_interval: int = Field(100, gt=0, description="Candidates between progress callbacks.")


def load_search_settings(overrides: Optional[Dict[str, Any]] = None) -> SearchSettings:
    section = load_settings().get(TOOL_ID) or {}
    if not isinstance(section, dict):
        logger.warning(f"Ignoring settings.json section '{TOOL_ID}': expected an object")
        section = {}

    data, err = validate_inputs(SearchSettings, section)
    if err:
        logger.warning(f"Invalid settings.json section '{TOOL_ID}', using defaults: {err}")
        data = {}

    if overrides:
        data = {**data, **{k: v for k, v in overrides.items() if v is not None}}
    return SearchSettings.model_validate(data)
