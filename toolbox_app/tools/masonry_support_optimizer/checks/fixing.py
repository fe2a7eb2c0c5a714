from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..constants import (
    ALPHA_CC,
    BASE_PLATE_WIDTH,
    CHANNEL_INTERACTION_EXPONENT,
    CHANNEL_INTERACTION_LINEAR_LIMIT,
    CONCRETE_GRADE,
    EQUILIBRIUM_TOLERANCE,
    GAMMA_C,
    STEEL_FIXING_TENSION_FACTOR,
)
from ..db.channel_specs import ChannelSpec
from ..db.steel_fixings import SteelFixingCapacity
from ..precision import round12


@dataclass(frozen=True)
class TensileLoadResult:
    tensile_load_kn: float
    compression_zone_mm: float
    moment_residual: float
    shear_residual: float
    moment_equilibrium_passes: bool
    shear_equilibrium_passes: bool
    depth_check_passes: bool

    @property
    def passes(self) -> bool:
        return self.moment_equilibrium_passes and self.shear_equilibrium_passes and self.depth_check_passes


@dataclass(frozen=True)
class ChannelCheck:
    tension_capacity_kn: float
    shear_capacity_kn: float
    tension_ratio: float
    shear_ratio: float
    interaction: float
    passes: bool


@dataclass(frozen=True)
class FixingResult:
    applied_shear_kn: float
    lever_arm_mm: float
    applied_moment_knm: float
    f_cd: float
    tensile_force_kn: float
    tensile: TensileLoadResult
    channel: Optional[ChannelCheck]
    passes: bool


@dataclass(frozen=True)
class SteelFixingResult:
    shear_kn: float
    tension_kn: float
    shear_ratio: float
    tension_ratio: float
    combined: float
    passes: bool


def _degenerate() -> TensileLoadResult:
    return TensileLoadResult(
        tensile_load_kn=0.0,
        compression_zone_mm=0.0,
        moment_residual=0.0,
        shear_residual=0.0,
        moment_equilibrium_passes=False,
        shear_equilibrium_passes=False,
        depth_check_passes=False,
    )


def calculate_tensile_load(m_ed: float, w: float, x: float, f_cd: float) -> TensileLoadResult:
    """
    Bolt tension from a rectangular-triangular concrete stress block under the base plate.

      M_ed  applied moment (kNm)
      w     base plate width (mm)
      x     rise to bolts (mm)
      f_cd  concrete design compressive strength (N/mm2)

    Moment equilibrium about the compression resultant gives
      (2/3)/(f_cd w) T^2 - x T + M = 0
    and the smaller root is the bolt force. The compression zone is 2T/(f_cd w).
    """
    M = float(m_ed) * 1000.0  # Nm
    w_m = float(w) / 1000.0
    x_m = float(x) / 1000.0
    f = float(f_cd) * 1e6  # Pa

    if w_m <= 0.0 or f <= 0.0:
        return _degenerate()

    a = (2.0 / 3.0) * 1.0 / (f * w_m)
    b = -x_m
    c = M
    disc = b * b - 4.0 * a * c
    if disc < 0.0:
        return _degenerate()

    T = (-b - math.sqrt(disc)) / (2.0 * a)
    cz_m = 2.0 * T / (f * w_m)

    moment_residual = T * (x_m - cz_m) + f * w_m * (1.0 / 3.0) * cz_m**2 - M
    shear_residual = T - cz_m * f * w_m * 0.5

    return TensileLoadResult(
        tensile_load_kn=round12(T / 1000.0),
        compression_zone_mm=round12(cz_m * 1000.0),
        moment_residual=round12(moment_residual),
        shear_residual=round12(shear_residual),
        moment_equilibrium_passes=abs(moment_residual) < EQUILIBRIUM_TOLERANCE and T > -EQUILIBRIUM_TOLERANCE,
        shear_equilibrium_passes=abs(shear_residual) < EQUILIBRIUM_TOLERANCE and T > -EQUILIBRIUM_TOLERANCE,
        depth_check_passes=cz_m <= x_m,
    )


def concrete_design_strength(concrete_grade: float = CONCRETE_GRADE) -> float:
    return ALPHA_CC * float(concrete_grade) / GAMMA_C


def check_channel(tension_kn: float, shear_kn: float, spec: ChannelSpec) -> ChannelCheck:
    """Channel resistance plus the tension/shear interaction (lesser of the two code forms)."""
    n_rd = float(spec.max_tension_kn)
    v_rd = float(spec.max_shear_kn)
    n_ratio = tension_kn / n_rd if n_rd > 0 else math.inf
    v_ratio = shear_kn / v_rd if v_rd > 0 else math.inf
    interaction = min(
        n_ratio**CHANNEL_INTERACTION_EXPONENT + v_ratio**CHANNEL_INTERACTION_EXPONENT,
        (n_ratio + v_ratio) / CHANNEL_INTERACTION_LINEAR_LIMIT,
    )
    return ChannelCheck(
        tension_capacity_kn=n_rd,
        shear_capacity_kn=v_rd,
        tension_ratio=round12(n_ratio),
        shear_ratio=round12(v_ratio),
        interaction=round12(interaction),
        passes=tension_kn <= n_rd and shear_kn <= v_rd and interaction <= 1.0,
    )


def verify_fixing(
    applied_shear: float,
    design_cavity: float,
    masonry_thickness: float,
    base_plate_width: float = BASE_PLATE_WIDTH,
    rise_to_bolts: float = 0.0,
    concrete_grade: float = CONCRETE_GRADE,
    load_position: float = 1.0 / 3.0,
    channel_spec: Optional[ChannelSpec] = None,
) -> FixingResult:
    """
    Fixing check at the slab face.

    The design shear (already factored) acts at load_position across the masonry leaf,
    beyond the design cavity:
      L = C' + t_masonry * load_position
      M_ed = V_ed * L / 1000
    """
    L = float(design_cavity) + float(masonry_thickness) * float(load_position)
    m_ed = float(applied_shear) * L / 1000.0
    f_cd = concrete_design_strength(concrete_grade)

    tensile = calculate_tensile_load(m_ed, base_plate_width, rise_to_bolts, f_cd)
    tension = tensile.tensile_load_kn

    channel = check_channel(tension, float(applied_shear), channel_spec) if channel_spec is not None else None

    # without channel data the fixing cannot be verified
    passes = tension > 0.0 and tensile.passes and channel is not None and channel.passes

    return FixingResult(
        applied_shear_kn=round12(applied_shear),
        lever_arm_mm=round12(L),
        applied_moment_knm=round12(m_ed),
        f_cd=round12(f_cd),
        tensile_force_kn=tension,
        tensile=tensile,
        channel=channel,
        passes=bool(passes),
    )


def verify_steel_fixing(shear_kn: float, tension_kn: float, capacity: SteelFixingCapacity) -> SteelFixingResult:
    """Linear bolt interaction: V/V_Rd + T/(1.4 T_Rd) <= 1."""
    v_ratio = float(shear_kn) / capacity.shear_kn
    t_ratio = float(tension_kn) / capacity.tension_kn
    combined = v_ratio + float(tension_kn) / (STEEL_FIXING_TENSION_FACTOR * capacity.tension_kn)
    return SteelFixingResult(
        shear_kn=round12(shear_kn),
        tension_kn=round12(tension_kn),
        shear_ratio=round12(v_ratio),
        tension_ratio=round12(t_ratio),
        combined=round12(combined),
        passes=combined <= 1.0,
    )
