from __future__ import annotations

import math
from dataclasses import dataclass

from ..constants import BOLT_STRESS_AREA_MM2, BOLT_TENSION_ALPHA, F_UB, GAMMA_M2, STEEL_FIXING_TENSION_FACTOR
from ..precision import round12


@dataclass(frozen=True)
class AngleToBracketResult:
    M_b_knm: float
    N_bolt_kn: float
    V_rd_kn: float
    N_rd_kn: float
    U_v_pct: float
    U_n_pct: float
    U_combined_pct: float
    passes: bool


def verify_angle_to_bracket_connection(
    v_ed: float, horizontal_leg: float, bearing: float, rise_to_bolt: float, bolt_diameter: int
) -> AngleToBracketResult:
    """Bolt between angle and bracket: prying tension from the bearing eccentricity plus direct shear."""
    A_s = BOLT_STRESS_AREA_MM2[int(bolt_diameter)]
    m_b = float(v_ed) * (float(horizontal_leg) - float(bearing) + 10.0) / 1000.0
    n_bolt = m_b / (float(rise_to_bolt) / 1000.0) if rise_to_bolt > 0 else math.inf

    v_rd = 0.5 * F_UB * A_s / GAMMA_M2 / 1000.0
    n_rd = BOLT_TENSION_ALPHA * A_s * F_UB / GAMMA_M2 / 1000.0

    u_v = float(v_ed) / v_rd * 100.0
    u_n = n_bolt / n_rd * 100.0
    u_c = u_v + n_bolt / (STEEL_FIXING_TENSION_FACTOR * n_rd) * 100.0
    return AngleToBracketResult(
        M_b_knm=round12(m_b),
        N_bolt_kn=round12(n_bolt),
        V_rd_kn=round12(v_rd),
        N_rd_kn=round12(n_rd),
        U_v_pct=round12(u_v),
        U_n_pct=round12(u_n),
        U_combined_pct=round12(u_c),
        passes=u_c <= 100.0,
    )
