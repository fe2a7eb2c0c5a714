from __future__ import annotations

import traceback
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from loguru import logger

from toolbox_app.core.schema_utils import validate_inputs
from toolbox_app.core.tool_base import ToolMeta

from .calc_trace import Assumption, CalcTrace
from .config import SearchSettings, load_search_settings
from .constants import PACKER_THICKNESS, TOOL_ID
from .evaluation import CHECK_LABELS, evaluate_with_trace
from .exports import export_all
from .logging_utils import get_run_logger, remove_run_logger_sink
from .models import DesignInputs
from .paths import compute_input_hash, create_run_dir
from .solver import Alternative, OptimisationResult, run_search


def _alternative_row(rank: int, alt: Alternative) -> Dict[str, Any]:
    g = alt.candidate.genetic
    gov_name, gov_util = alt.candidate.verification.governing
    return {
        "rank": rank,
        "channel_type": g.channel_type,
        "steel_fixing": f"{g.steel_fixing_method} {g.steel_bolt_size}" if g.steel_bolt_size else None,
        "bracket_type": g.bracket_type,
        "angle_orientation": g.angle_orientation,
        "bracket_centres": g.bracket_centres,
        "bracket_thickness": g.bracket_thickness,
        "angle_thickness": g.angle_thickness,
        "vertical_leg": g.vertical_leg,
        "bolt_diameter": g.bolt_diameter,
        "fixing_position": g.fixing_position,
        "bracket_height": alt.candidate.geometry.bracket_height,
        "weight_kg_m": alt.weight,
        "weight_difference_pct": alt.weight_difference_pct,
        "governing_check": gov_name,
        "governing_utilization_pct": gov_util,
        "key_differences": list(alt.key_differences),
    }


def _design_summary(result: OptimisationResult) -> Dict[str, Any]:
    calc = result.calculated
    out: Dict[str, Any] = {
        "all_checks_pass": calc.all_checks_pass,
        "optimal_weight_kg_m": calc.optimal_weight,
        "candidates_evaluated": f"{calc.candidates_evaluated} of {calc.total_combinations}",
        "candidates_passing": calc.candidates_passing,
        "search_complete": calc.complete,
    }
    if result.genetic is not None:
        g = result.genetic
        out.update(
            {
                "channel_type": g.channel_type or f"{g.steel_fixing_method} {g.steel_bolt_size} (steel)",
                "bracket_type": g.bracket_type,
                "angle_orientation": g.angle_orientation,
                "bracket_centres_mm": g.bracket_centres,
                "bracket_thickness_mm": g.bracket_thickness,
                "angle_thickness_mm": g.angle_thickness,
                "vertical_leg_mm": g.vertical_leg,
                "bolt": f"M{g.bolt_diameter}",
                "fixing_position_mm": g.fixing_position,
                "bracket_height_mm": calc.bracket_height,
                "bracket_projection_mm": calc.bracket_projection,
                "rise_to_bolts_mm": calc.rise_to_bolts,
                "drop_below_slab_mm": calc.drop_below_slab,
                "governing_check": CHECK_LABELS.get(calc.governing_check or "", calc.governing_check),
                "governing_utilization_pct": calc.governing_utilization_pct,
            }
        )
    if calc.failed_checks:
        out["failed_checks"] = ", ".join(CHECK_LABELS.get(c, c) for c in calc.failed_checks)
    return out


class MasonrySupportOptimizerTool:
    """Masonry support bracket search.

    Batch only: run() and run_batch() both search the design space and write the calc package.
    """

    meta = ToolMeta(
        id=TOOL_ID,
        name="Masonry Support Optimizer",
        category="Facade Support",
        version="1.0.0",
        description="Lightest compliant bracket-and-angle masonry support, with calc package exports.",
    )

    InputModel = DesignInputs

    def default_inputs(self) -> dict:
        return self.InputModel().model_dump(mode="json")

    def search(self, inputs: Dict[str, Any], settings: Optional[SearchSettings] = None, **kwargs: Any) -> OptimisationResult:
        """Validated search with alerts attached, no files written."""
        model = self.InputModel.model_validate(inputs)
        return run_search(model, settings=settings or load_search_settings(), **kwargs)

    # ------------------------------
    # Batch calculation API (headless)
    # ------------------------------
    def run_batch(
        self,
        inputs: Dict[str, Any],
        settings: Optional[SearchSettings] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Search, trace the chosen design and export the calc package. Never raises.

        overrides are applied over the settings.json section when no settings are given.
        """
        inputs_norm, err = validate_inputs(self.InputModel, inputs)
        if err:
            logger.warning(f"{self.meta.id}: invalid inputs: {err}")
            return {"ok": False, "run_dir": None, "input_hash": None, "error": err, "traceback": ""}
        model = self.InputModel.model_validate(inputs_norm)
        input_hash = compute_input_hash(inputs_norm)
        run_dir = create_run_dir(self.meta.id, input_hash)
        log, sink_id = get_run_logger(run_dir, self.meta.id, input_hash)

        try:
            log.info("Starting masonry support search")
            log.info(f"Inputs (validated): {inputs_norm}")
            settings = settings or load_search_settings(overrides)
            log.debug(f"Search settings: {settings.model_dump()}")

            result = self.search(inputs_norm, settings)
            calc = result.calculated
            log.info(
                f"Evaluated {calc.candidates_evaluated}/{calc.total_combinations} candidates, "
                f"{calc.candidates_passing} compliant"
            )

            trace = CalcTrace.new(
                tool_id=self.meta.id,
                tool_version=self.meta.version,
                code_basis="EN 1993-1-1 / EN 1992-4 design checks, manufacturer channel resistances",
                inputs=inputs_norm,
                input_hash=input_hash,
                defaults=self.default_inputs(),
            )
            trace.assumptions.extend(
                [
                    Assumption(id="A1", text="Masonry self-weight is factored by 1.35; no imposed load acts on the support."),
                    Assumption(
                        id="A2",
                        text="Load acts at the stated fraction of the masonry thickness beyond a design cavity of cavity + 20 mm.",
                    ),
                    Assumption(
                        id="A3",
                        text="Rise to bolts is taken at the worst-case slot position (15 mm below nominal).",
                    ),
                    Assumption(
                        id="A4",
                        text="R-HPTIII resistances are used on a 100% interaction basis; the 200% manufacturer basis is flagged for review.",
                    ),
                    Assumption(
                        id="A5",
                        text="Deflection is checked at characteristic load with a stainless secant modulus; limits 1.5 mm (angle) and 2 mm (system).",
                    ),
                    Assumption(
                        id="A6",
                        text=f"Angle to bracket bolts pass through {PACKER_THICKNESS:g} mm of packing; bolt shear resistance is reduced accordingly.",
                    ),
                ]
            )

            if result.chosen is not None:
                evaluate_with_trace(trace, model, result.chosen)
            else:
                log.warning("No candidates generated; calc package contains inputs only")

            top = settings.top_alternatives
            alt_rows: List[Dict[str, Any]] = [
                _alternative_row(i, a) for i, a in enumerate(result.alternatives[:top], start=1)
            ]
            trace.tables["alternatives"] = alt_rows
            trace.summary = _design_summary(result)
            trace.summary["alerts"] = list(result.alerts)

            for a in result.alerts:
                log.info(f"Alert: {a}")

            results: Dict[str, Any] = {
                "ok": True,
                "run_dir": str(run_dir),
                "input_hash": input_hash,
                "all_checks_pass": calc.all_checks_pass,
                "optimal_weight": calc.optimal_weight,
                "genetic": None if result.genetic is None else result.genetic.as_dict(),
                "calculated": asdict(calc),
                "alternatives_count": len(result.alternatives),
                "alternatives": alt_rows,
                "alerts": list(result.alerts),
            }

            out_paths = export_all(trace, run_dir, results)
            results["outputs"] = {k: str(v) for k, v in out_paths.items()}

            log.info("Batch run complete")
            return results

        except Exception as e:
            log.exception("Batch run failed")
            return {
                "ok": False,
                "run_dir": str(run_dir),
                "input_hash": input_hash,
                "error": str(e),
                "traceback": traceback.format_exc(),
            }

        finally:
            remove_run_logger_sink(sink_id)

    def run(self, inputs: Dict[str, Any], overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.run_batch(inputs, overrides=overrides)


TOOL = MasonrySupportOptimizerTool()
