from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .constants import (
    BASELINE_FIXING_POINT_FROM_SSL,
    BRACKET_HEIGHT_MAX,
    BRACKET_HEIGHT_MIN,
    BRACKET_PROJECTION_MAX,
    BRACKET_PROJECTION_MIN,
    BRACKET_SPINE_WIDTH,
    BRACKET_TOP_TO_FIXING,
    DEAD_LOAD_FACTOR,
    GRAVITY,
    HORIZONTAL_LEG,
    MIN_RISE_TO_BOLTS,
    PROJECTION_CAVITY_OFFSET,
    STEEL_DENSITY_KG_M3,
    WORST_CASE_SLOT_ADJUSTMENT,
)
from .models import AngleOrientation, BracketType
from .precision import round12


@dataclass(frozen=True)
class Loading:
    area_load: Optional[float]  # N/mm2, only when derived from masonry properties
    characteristic_udl: float  # kN/m
    design_udl: float  # kN/m
    shear_kn: float  # per bracket


@dataclass(frozen=True)
class BracketGeometry:
    bracket_height: float
    bracket_projection: float
    rise_to_bolts: float
    drop_below_slab: float


@dataclass(frozen=True)
class SystemWeight:
    bracket_weight_kg: float
    bracket_weight_per_m: float
    angle_weight_per_m: float
    total_kg_per_m: float


# ------------------------------
# Loading
# ------------------------------
def characteristic_udl(
    characteristic_load: Optional[float], masonry_density: float, masonry_thickness: float, masonry_height_m: float
) -> Tuple[float, Optional[float]]:
    """Return (UDL kN/m, area load N/mm2 or None when the load was given directly)."""
    if characteristic_load is not None:
        return float(characteristic_load), None
    density_n_mm3 = float(masonry_density) * GRAVITY * 1e-9
    area_load = round12(density_n_mm3 * float(masonry_height_m) * 1000.0)
    # N/mm == kN/m
    return round12(area_load * float(masonry_thickness)), area_load


def calculate_loading(
    characteristic_load: Optional[float],
    bracket_centres: float,
    masonry_density: float = 2000.0,
    masonry_thickness: float = 102.5,
    masonry_height_m: float = 3.0,
) -> Loading:
    udl, area = characteristic_udl(characteristic_load, masonry_density, masonry_thickness, masonry_height_m)
    design = round12(udl * DEAD_LOAD_FACTOR)
    return Loading(
        area_load=area,
        characteristic_udl=round12(udl),
        design_udl=design,
        shear_kn=round12(design * float(bracket_centres) / 1000.0),
    )


# ------------------------------
# Bracket / angle arrangement
# ------------------------------
def determine_bracket_type(support_level: float) -> BracketType:
    return "Standard" if support_level <= BASELINE_FIXING_POINT_FROM_SSL else "Inverted"


def valid_angle_orientations(support_level: float) -> Tuple[AngleOrientation, ...]:
    if -50.0 <= support_level <= -25.0:
        return ("Standard",)
    if -135.0 <= support_level <= -75.0:
        return ("Inverted",)
    return ("Standard", "Inverted")


def bracket_angle_combinations(support_level: float) -> Tuple[Tuple[BracketType, AngleOrientation], ...]:
    bt = determine_bracket_type(support_level)
    return tuple((bt, o) for o in valid_angle_orientations(support_level))


def bracket_height(
    support_level: float,
    fixing_position: float,
    vertical_leg: float,
    bracket_type: BracketType,
    angle_orientation: AngleOrientation,
) -> float:
    """
    Bracket height from support level to BRACKET_TOP_TO_FIXING above the fixing.

    A mismatched bracket/angle orientation adds the angle's vertical leg. Inverted brackets
    close to or above SSL are sized so that a minimum rise to bolts remains.
    """
    base = abs(float(support_level)) - float(fixing_position) + BRACKET_TOP_TO_FIXING

    if bracket_type == "Inverted" and support_level > BASELINE_FIXING_POINT_FROM_SSL:
        potential_rise = base - (BRACKET_TOP_TO_FIXING + WORST_CASE_SLOT_ADJUSTMENT)
        if potential_rise < MIN_RISE_TO_BOLTS:
            min_required = BRACKET_TOP_TO_FIXING + WORST_CASE_SLOT_ADJUSTMENT + MIN_RISE_TO_BOLTS
            from_support = abs(float(support_level)) + float(fixing_position) + BRACKET_TOP_TO_FIXING
            adj = float(vertical_leg) if angle_orientation == "Standard" else 0.0
            return round12(max(min_required, from_support) + adj)

    mismatched = (bracket_type == "Standard" and angle_orientation == "Inverted") or (
        bracket_type == "Inverted" and angle_orientation == "Standard"
    )
    return round12(base + (float(vertical_leg) if mismatched else 0.0))


def rise_to_bolts(
    height: float,
    support_level: float,
    slab_thickness: float,
    fixing_position: float,
    bottom_critical_edge: float,
) -> float:
    rise = float(height) - (BRACKET_TOP_TO_FIXING + WORST_CASE_SLOT_ADJUSTMENT)
    # bracket runs past the slab soffit: bolts cannot rise further than the bottom edge allows
    if abs(float(support_level)) > float(slab_thickness) - float(fixing_position):
        rise = min(rise, float(bottom_critical_edge) - WORST_CASE_SLOT_ADJUSTMENT)
    return round12(rise)


def bracket_projection(cavity_width: float) -> float:
    d = float(cavity_width) - PROJECTION_CAVITY_OFFSET
    return round12(min(max(d, BRACKET_PROJECTION_MIN), BRACKET_PROJECTION_MAX))


def bracket_geometry(
    support_level: float,
    slab_thickness: float,
    cavity_width: float,
    fixing_position: float,
    bottom_critical_edge: float,
    vertical_leg: float,
    bracket_type: BracketType,
    angle_orientation: AngleOrientation,
) -> Optional[BracketGeometry]:
    """Full bracket geometry, or None when the bracket would exceed the manufacturing range."""
    h = bracket_height(support_level, fixing_position, vertical_leg, bracket_type, angle_orientation)
    if h > BRACKET_HEIGHT_MAX:
        return None
    h = max(h, BRACKET_HEIGHT_MIN)
    rise = rise_to_bolts(h, support_level, slab_thickness, fixing_position, bottom_critical_edge)
    below_soffit = -float(support_level) - float(slab_thickness)
    return BracketGeometry(
        bracket_height=h,
        bracket_projection=bracket_projection(cavity_width),
        rise_to_bolts=rise,
        drop_below_slab=round12(max(0.0, below_soffit)),
    )


# ------------------------------
# Weight
# ------------------------------
def calculate_system_weight(
    height: float,
    projection: float,
    bracket_thickness: int,
    bracket_centres: float,
    angle_thickness: float,
    vertical_leg: float,
    horizontal_leg: float = HORIZONTAL_LEG,
) -> SystemWeight:
    """Steel weight per metre run: brackets at centres plus one metre of angle."""
    if int(bracket_thickness) not in BRACKET_SPINE_WIDTH:
        raise ValueError(f"Invalid bracket thickness: {bracket_thickness}. Must be 3 or 4.")

    kg_per_mm3 = STEEL_DENSITY_KG_M3 * 1e-9
    spine = BRACKET_SPINE_WIDTH[int(bracket_thickness)]
    bracket_volume = (float(projection) * 2.0 + spine) * float(height) * float(bracket_thickness)
    brackets_per_m = 1000.0 / float(bracket_centres)
    bracket_kg = bracket_volume * kg_per_mm3

    angle_volume = (float(vertical_leg) + float(horizontal_leg) - float(angle_thickness)) * 1000.0 * float(angle_thickness)
    angle_kg = angle_volume * kg_per_mm3

    return SystemWeight(
        bracket_weight_kg=round12(bracket_kg),
        bracket_weight_per_m=round12(bracket_kg * brackets_per_m),
        angle_weight_per_m=round12(angle_kg),
        total_kg_per_m=round12(angle_kg + bracket_kg * brackets_per_m),
    )
