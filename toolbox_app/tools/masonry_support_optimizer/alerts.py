from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, List, Optional, Tuple

from .channel_catalog import get_product_characteristics, is_high_margin_channel, requires_engineering_review
from .combinations import design_characteristic_load
from .config import SearchSettings
from .evaluation import CHECK_LABELS
from .models import DesignInputs

if TYPE_CHECKING:
    from .solver import OptimisationResult

NOTCH_ALERT = "A notch may be required if the full bearing of the slab (max rise to bolt) is utilised."
NO_COMPLIANT_DESIGN_ALERT = (
    "No design satisfies every verification check. The closest design is shown for review only."
)


def generate_alerts(
    result: OptimisationResult, inputs: DesignInputs, settings: Optional[SearchSettings] = None
) -> Tuple[str, ...]:
    """Advisory messages for the chosen design, in a fixed order. Never changes the selection."""
    settings = settings or SearchSettings()
    alerts: List[str] = []
    genetic = result.genetic
    channel = None if genetic is None else genetic.channel_type

    if channel is not None and is_high_margin_channel(channel):
        pc = get_product_characteristics(channel)
        if pc.utilization_warning:
            alerts.append(pc.utilization_warning)
        alerts.extend(pc.notes)
        if requires_engineering_review(channel):
            alerts.append(f"Selected channel: {channel} requires engineering review")

    if channel is not None and not is_high_margin_channel(channel):
        high_margin_alts = [a for a in result.alternatives if is_high_margin_channel(a.candidate.genetic.channel_type)]
        if high_margin_alts and design_characteristic_load(inputs) > settings.high_load_threshold_kn_m:
            alerts.append(
                f"{len(high_margin_alts)} R-HPTIII alternative(s) available - consider for high-load applications"
            )

    if genetic is not None and result.calculated.drop_below_slab:
        if genetic.bracket_type == "Inverted" or genetic.angle_orientation == "Inverted":
            alerts.append(NOTCH_ALERT)

    util = result.calculated.governing_utilization_pct
    if result.calculated.all_checks_pass and util is not None and util >= settings.margin_warning_pct:
        label = CHECK_LABELS.get(result.calculated.governing_check or "", result.calculated.governing_check)
        alerts.append(f"Low capacity margin: {label} is at {util:.1f}% utilisation")

    if not result.calculated.all_checks_pass:
        if result.chosen is None:
            alerts.append("No design candidates could be generated for these inputs.")
        else:
            alerts.append(NO_COMPLIANT_DESIGN_ALERT)

    return tuple(alerts)


def attach_alerts(
    result: OptimisationResult, inputs: DesignInputs, settings: Optional[SearchSettings] = None
) -> OptimisationResult:
    return replace(result, alerts=generate_alerts(result, inputs, settings))
