from __future__ import annotations

import math
from dataclasses import dataclass

from ..constants import STEEL_FIXING_TENSION_FACTOR
from ..precision import round12


@dataclass(frozen=True)
class PackerResult:
    t_p: float  # packer thickness (mm)
    d_p: float  # bolt diameter (mm)
    beta_p: float
    V_rd_kn: float  # reduced bolt shear resistance
    N_rd_kn: float
    utilization_pct: float
    passes: bool


def packer_reduction_factor(packer_thickness: float, bolt_diameter: float) -> float:
    """beta_p = 9d / (8d + 3t_p), not more than 1."""
    d = float(bolt_diameter)
    return min(9.0 * d / (8.0 * d + 3.0 * float(packer_thickness)), 1.0)


def verify_shear_reduction_due_to_packers(
    v_ed: float,
    n_bolt: float,
    v_rd: float,
    n_rd: float,
    packer_thickness: float,
    bolt_diameter: int,
) -> PackerResult:
    """Angle-to-bracket bolt interaction with the shear resistance reduced for packing."""
    beta = packer_reduction_factor(packer_thickness, bolt_diameter)
    v_rd_red = beta * float(v_rd)
    if v_rd_red <= 0.0 or n_rd <= 0.0:
        util = math.inf
    else:
        util = float(v_ed) / v_rd_red * 100.0 + float(n_bolt) / (STEEL_FIXING_TENSION_FACTOR * float(n_rd)) * 100.0
    return PackerResult(
        t_p=round12(packer_thickness),
        d_p=round12(bolt_diameter),
        beta_p=round12(beta),
        V_rd_kn=round12(v_rd_red),
        N_rd_kn=round12(n_rd),
        utilization_pct=round12(util),
        passes=util <= 100.0,
    )
