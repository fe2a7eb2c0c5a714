from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .channel_catalog import resolve_allowed_channel_types
from .constants import (
    ANGLE_THICKNESSES,
    BOLT_DIAMETERS,
    BRACKET_THICKNESSES,
    FIXING_POSITION_STEP,
    HIGH_LOAD_CENTRES_THRESHOLD,
    MAX_CENTRES_HIGH_LOAD,
    MAX_CENTRES_NORMAL,
    MIN_FIXING_EDGE,
    STEEL_BRACKET_CENTRES,
    THICK_BRACKET_LOAD_THRESHOLD,
    THICK_BRACKET_SLAB_CLEARANCE,
    vertical_leg_for,
)
from .db.channel_specs import valid_bracket_centres
from .db.steel_fixings import get_available_bolt_sizes, get_steel_fixing_capacity
from .db.steel_sections import get_section_height
from .geometry import BracketGeometry, bracket_angle_combinations, bracket_geometry, characteristic_udl
from .models import AngleOrientation, BracketType, ChannelType, DesignInputs, FixingMethod, SectionType


@dataclass(frozen=True)
class GeneticParameters:
    """The discrete choices that identify one design."""

    bracket_type: BracketType
    angle_orientation: AngleOrientation
    channel_type: Optional[str]  # None when fixing to a steel section
    bracket_centres: int
    bracket_thickness: int
    angle_thickness: int
    vertical_leg: float
    bolt_diameter: int
    fixing_position: float
    steel_bolt_size: Optional[str] = None
    steel_fixing_method: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CandidateSkeleton:
    index: int
    genetic: GeneticParameters
    geometry: BracketGeometry


# ------------------------------
# Enumerations
# ------------------------------
def design_characteristic_load(inputs: DesignInputs) -> float:
    udl, _ = characteristic_udl(
        inputs.characteristic_load, inputs.masonry_density, inputs.masonry_thickness, inputs.masonry_height
    )
    return udl


def _round_up_to_step(x: float, step: float) -> float:
    return math.ceil(x / step) * step


def fixing_positions(inputs: DesignInputs) -> List[float]:
    if inputs.use_custom_fixing_position or not inputs.enable_fixing_optimization:
        return [float(inputs.fixing_position)]

    if inputs.is_steel_frame:
        half_edge = get_steel_fixing_capacity(inputs.steel_section_type, "M16").min_edge_distance_mm / 2.0
        section_height = get_section_height(inputs.steel_section_type, inputs.steel_section_size)
        start = _round_up_to_step(half_edge, FIXING_POSITION_STEP)
        stop = section_height - half_edge
    else:
        start = max(MIN_FIXING_EDGE, float(inputs.top_critical_edge))
        stop = float(inputs.slab_thickness) - MIN_FIXING_EDGE

    out: List[float] = []
    p = start
    while p <= stop + 1e-9:
        out.append(float(p))
        p += FIXING_POSITION_STEP
    return out or [float(start)]


def max_bracket_centres(characteristic_load: float) -> int:
    return MAX_CENTRES_HIGH_LOAD if characteristic_load > HIGH_LOAD_CENTRES_THRESHOLD else MAX_CENTRES_NORMAL


def bracket_centres_for(inputs: DesignInputs, channel_type: Optional[ChannelType], characteristic_load: float) -> Tuple[int, ...]:
    cap = max_bracket_centres(characteristic_load)
    if channel_type is None:
        centres = STEEL_BRACKET_CENTRES
    else:
        centres = valid_bracket_centres(channel_type, inputs.slab_thickness)
    return tuple(c for c in centres if c <= cap)


def bracket_thicknesses(inputs: DesignInputs, characteristic_load: float) -> Tuple[int, ...]:
    sl = float(inputs.support_level)
    outside_slab = sl > THICK_BRACKET_SLAB_CLEARANCE or -sl > float(inputs.slab_thickness) + THICK_BRACKET_SLAB_CLEARANCE
    if characteristic_load > THICK_BRACKET_LOAD_THRESHOLD and outside_slab:
        return (4,)
    return BRACKET_THICKNESSES


def steel_fixing_options(inputs: DesignInputs) -> Tuple[Tuple[str, str], ...]:
    """(bolt size, method) pairs for steel frame fixing."""
    sizes = get_available_bolt_sizes() if inputs.steel_bolt_size == "all" else (inputs.steel_bolt_size,)
    if inputs.steel_section_type == SectionType.I_BEAM:
        if inputs.steel_fixing_method == "both":
            methods = (FixingMethod.SET_SCREW, FixingMethod.BLIND_BOLT)
        elif inputs.steel_fixing_method is None:
            methods = (FixingMethod.SET_SCREW,)
        else:
            methods = (FixingMethod(inputs.steel_fixing_method),)
    else:
        methods = (FixingMethod.BLIND_BOLT,)
    return tuple((size, m.value) for size in sizes for m in methods)


# ------------------------------
# Generator
# ------------------------------
def generate_combinations(inputs: DesignInputs) -> Iterator[CandidateSkeleton]:
    """
    Yield every admissible design skeleton in a fixed order.

    Loop nesting (outer to inner): bracket/angle combination, channel, fixing position,
    centres, bracket thickness, angle thickness, bolt. Skeletons whose bracket would be
    taller than the manufacturing limit are skipped; the index counts yielded skeletons only.
    """
    load = design_characteristic_load(inputs)
    if inputs.is_steel_frame:
        channels: Tuple[Optional[ChannelType], ...] = (None,)
        steel_options: Tuple[Tuple[Optional[str], Optional[str]], ...] = steel_fixing_options(inputs)
    else:
        channels = resolve_allowed_channel_types(inputs.allowed_channel_types)
        steel_options = ((None, None),)

    positions = fixing_positions(inputs)
    thicknesses = bracket_thicknesses(inputs, load)

    index = 0
    for bracket_type, angle_orientation in bracket_angle_combinations(inputs.support_level):
        for channel_type in channels:
            centres_options = bracket_centres_for(inputs, channel_type, load)
            for fixing_position in positions:
                for centres in centres_options:
                    for bracket_t in thicknesses:
                        for angle_t in ANGLE_THICKNESSES:
                            leg = vertical_leg_for(angle_t)
                            geom = bracket_geometry(
                                support_level=inputs.support_level,
                                slab_thickness=inputs.slab_thickness,
                                cavity_width=inputs.cavity_width,
                                fixing_position=fixing_position,
                                bottom_critical_edge=inputs.bottom_critical_edge,
                                vertical_leg=leg,
                                bracket_type=bracket_type,
                                angle_orientation=angle_orientation,
                            )
                            if geom is None:
                                continue
                            for bolt in BOLT_DIAMETERS:
                                for steel_size, steel_method in steel_options:
                                    yield CandidateSkeleton(
                                        index=index,
                                        genetic=GeneticParameters(
                                            bracket_type=bracket_type,
                                            angle_orientation=angle_orientation,
                                            channel_type=None if channel_type is None else channel_type.value,
                                            bracket_centres=int(centres),
                                            bracket_thickness=int(bracket_t),
                                            angle_thickness=int(angle_t),
                                            vertical_leg=leg,
                                            bolt_diameter=int(bolt),
                                            fixing_position=float(fixing_position),
                                            steel_bolt_size=steel_size,
                                            steel_fixing_method=steel_method,
                                        ),
                                        geometry=geom,
                                    )
                                    index += 1


def count_combinations(inputs: DesignInputs) -> int:
    return sum(1 for _ in generate_combinations(inputs))
