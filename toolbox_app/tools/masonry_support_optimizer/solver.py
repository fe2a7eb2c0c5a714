from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from loguru import logger

from .alerts import attach_alerts
from .combinations import GeneticParameters, count_combinations, generate_combinations
from .config import SearchSettings
from .evaluation import Candidate, evaluate_candidate
from .models import DesignInputs
from .precision import round12

ProgressCallback = Callable[[int, int], None]
CancelCallback = Callable[[], bool]


@dataclass(frozen=True)
class CalculatedSummary:
    all_checks_pass: bool
    optimal_weight: float  # kg/m, nan when nothing was generated
    total_combinations: int
    candidates_evaluated: int
    candidates_passing: int
    complete: bool
    cancelled: bool
    governing_check: Optional[str] = None
    governing_utilization_pct: Optional[float] = None
    failed_checks: Tuple[str, ...] = ()
    bracket_height: Optional[float] = None
    bracket_projection: Optional[float] = None
    rise_to_bolts: Optional[float] = None
    drop_below_slab: Optional[float] = None
    characteristic_udl: Optional[float] = None
    shear_kn: Optional[float] = None


@dataclass(frozen=True)
class Alternative:
    candidate: Candidate
    weight: float
    weight_difference_pct: float
    key_differences: Tuple[str, ...]


@dataclass(frozen=True)
class OptimisationResult:
    calculated: CalculatedSummary
    genetic: Optional[GeneticParameters]
    chosen: Optional[Candidate]
    alternatives: Tuple[Alternative, ...] = ()
    alerts: Tuple[str, ...] = ()


def key_differences(alt: GeneticParameters, chosen: GeneticParameters) -> Tuple[str, ...]:
    diffs: List[str] = []
    if alt.bracket_type != chosen.bracket_type:
        diffs.append(f"{alt.bracket_type} bracket (vs {chosen.bracket_type})")
    if alt.angle_orientation != chosen.angle_orientation:
        diffs.append(f"{alt.angle_orientation} angle (vs {chosen.angle_orientation})")
    if alt.bracket_centres != chosen.bracket_centres:
        diffs.append(f"{alt.bracket_centres}mm centres (vs {chosen.bracket_centres}mm)")
    if alt.bracket_thickness != chosen.bracket_thickness:
        diffs.append(f"{alt.bracket_thickness}mm bracket (vs {chosen.bracket_thickness}mm)")
    if alt.angle_thickness != chosen.angle_thickness:
        diffs.append(f"{alt.angle_thickness}mm angle (vs {chosen.angle_thickness}mm)")
    if alt.vertical_leg != chosen.vertical_leg:
        diffs.append(f"{alt.vertical_leg:g}mm vertical leg (vs {chosen.vertical_leg:g}mm)")
    if alt.bolt_diameter != chosen.bolt_diameter:
        diffs.append(f"M{alt.bolt_diameter} bolts (vs M{chosen.bolt_diameter})")
    if alt.fixing_position != chosen.fixing_position:
        diffs.append(f"{alt.fixing_position:g}mm fixing position (vs {chosen.fixing_position:g}mm)")
    if alt.channel_type != chosen.channel_type:
        diffs.append(f"{alt.channel_type} channel (vs {chosen.channel_type})")
    if alt.steel_bolt_size != chosen.steel_bolt_size:
        diffs.append(f"{alt.steel_bolt_size} steel fixing (vs {chosen.steel_bolt_size})")
    if alt.steel_fixing_method != chosen.steel_fixing_method:
        diffs.append(f"{alt.steel_fixing_method} (vs {chosen.steel_fixing_method})")
    return tuple(diffs)


def _weight_difference_pct(weight: float, optimum: float) -> float:
    if optimum <= 0.0:
        return 0.0
    return round12((weight - optimum) / optimum * 100.0)


def _summary(
    chosen: Optional[Candidate],
    *,
    total: int,
    evaluated: int,
    passing: int,
    cancelled: bool,
    complete: bool,
) -> CalculatedSummary:
    if chosen is None:
        return CalculatedSummary(
            all_checks_pass=False,
            optimal_weight=math.nan,
            total_combinations=total,
            candidates_evaluated=evaluated,
            candidates_passing=passing,
            complete=complete,
            cancelled=cancelled,
        )
    gov_name, gov_util = chosen.verification.governing
    return CalculatedSummary(
        all_checks_pass=chosen.all_checks_pass,
        optimal_weight=chosen.total_weight,
        total_combinations=total,
        candidates_evaluated=evaluated,
        candidates_passing=passing,
        complete=complete,
        cancelled=cancelled,
        governing_check=gov_name,
        governing_utilization_pct=gov_util,
        failed_checks=tuple(chosen.verification.failed_checks),
        bracket_height=chosen.geometry.bracket_height,
        bracket_projection=chosen.geometry.bracket_projection,
        rise_to_bolts=chosen.geometry.rise_to_bolts,
        drop_below_slab=chosen.geometry.drop_below_slab,
        characteristic_udl=chosen.loading.characteristic_udl,
        shear_kn=chosen.loading.shear_kn,
    )


def run_search(
    inputs: DesignInputs,
    *,
    settings: Optional[SearchSettings] = None,
    max_generations: Optional[int] = None,
    should_cancel: Optional[CancelCallback] = None,
    on_progress: Optional[ProgressCallback] = None,
    progress_interval: Optional[int] = None,
) -> OptimisationResult:
    """
    Exhaustive search over every generated design, choosing the lightest compliant one,
    with alerts for the chosen design attached.

    Ties on weight keep the earliest candidate. When no candidate passes, the design with the
    fewest failed checks (then lightest, then earliest) is returned with all_checks_pass False.
    Explicit max_generations / progress_interval win over the settings.
    """
    settings = settings or SearchSettings()
    result = _select(
        inputs,
        max_generations=settings.max_generations if max_generations is None else max_generations,
        should_cancel=should_cancel,
        on_progress=on_progress,
        progress_interval=settings.progress_interval if progress_interval is None else progress_interval,
    )
    return attach_alerts(result, inputs, settings)


def _select(
    inputs: DesignInputs,
    *,
    max_generations: Optional[int],
    should_cancel: Optional[CancelCallback],
    on_progress: Optional[ProgressCallback],
    progress_interval: int,
) -> OptimisationResult:
    space = count_combinations(inputs)
    total = space if max_generations is None else min(space, max(0, int(max_generations)))

    passing: List[Candidate] = []
    best: Optional[Candidate] = None
    fallback: Optional[Candidate] = None
    fallback_key: Optional[Tuple[int, float]] = None
    evaluated = 0
    cancelled = False
    interval = max(1, int(progress_interval))

    for skeleton in generate_combinations(inputs):
        if evaluated >= total:
            break
        if should_cancel is not None and should_cancel():
            cancelled = True
            break

        cand = evaluate_candidate(inputs, skeleton)
        evaluated += 1

        if cand.all_checks_pass:
            passing.append(cand)
            if best is None or cand.total_weight < best.total_weight:
                best = cand
        else:
            key = (len(cand.verification.failed_checks), cand.total_weight)
            if fallback_key is None or key < fallback_key:
                fallback, fallback_key = cand, key

        if on_progress is not None and evaluated % interval == 0:
            on_progress(evaluated, total)

    if on_progress is not None and evaluated % interval != 0:
        on_progress(evaluated, total)

    chosen = best if best is not None else fallback
    alternatives: Tuple[Alternative, ...] = ()
    if best is not None:
        others = sorted((c for c in passing if c is not best), key=lambda c: c.total_weight)
        alternatives = tuple(
            Alternative(
                candidate=c,
                weight=c.total_weight,
                weight_difference_pct=_weight_difference_pct(c.total_weight, best.total_weight),
                key_differences=key_differences(c.genetic, best.genetic),
            )
            for c in others
        )

    summary = _summary(
        chosen, total=total, evaluated=evaluated, passing=len(passing), cancelled=cancelled, complete=not cancelled and evaluated >= space
    )
    logger.debug(
        f"Search evaluated {evaluated}/{total} candidates, {len(passing)} compliant, "
        f"chosen weight {summary.optimal_weight} kg/m, cancelled={cancelled}"
    )
    return OptimisationResult(
        calculated=summary,
        genetic=None if chosen is None else chosen.genetic,
        chosen=chosen,
        alternatives=alternatives,
    )
