from __future__ import annotations

from dataclasses import dataclass

from ..constants import BRACKET_PLATES, EPSILON, F_Y, GAMMA_M0
from ..precision import round12


@dataclass(frozen=True)
class BracketDesignResult:
    d_c: float  # effective bracket depth below the notch (mm)
    d_ct: float
    epsilon_56: float
    is_class_1: bool
    M_ed_knm: float
    W_pl: float  # mm3
    M_rd_knm: float
    utilization_pct: float
    passes: bool


def verify_bracket_design(
    v_ed: float, cavity: float, ecc: float, bracket_height: float, notch_height: float, thickness: float
) -> BracketDesignResult:
    """Twin-plate bracket in bending at the slab face. Section class is reported, not enforced."""
    d_c = float(bracket_height) - float(notch_height)
    t = float(thickness)
    d_ct = d_c / t
    eps_56 = 56.0 * EPSILON
    is_class_1 = eps_56 > d_ct

    m_ed = float(v_ed) * (float(cavity) + float(ecc)) / 1000.0
    w_pl = 1.2 * t * d_c**2 / 6.0 * BRACKET_PLATES
    m_rd = F_Y * w_pl / (GAMMA_M0 * 1e6)
    util = m_ed / m_rd * 100.0 if m_rd > 0 else float("inf")
    return BracketDesignResult(
        d_c=round12(d_c),
        d_ct=round12(d_ct),
        epsilon_56=round12(eps_56),
        is_class_1=is_class_1,
        M_ed_knm=round12(m_ed),
        W_pl=round12(w_pl),
        M_rd_knm=round12(m_rd),
        utilization_pct=round12(util),
        passes=m_rd >= m_ed,
    )
