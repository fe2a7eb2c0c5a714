from __future__ import annotations

import math
from dataclasses import dataclass

from ..constants import (
    ANGLE_SPAN_IXX,
    DEAD_LOAD_FACTOR,
    E_STEEL,
    F_Y,
    MAX_ANGLE_DEFLECTION,
    MAX_SYSTEM_DEFLECTION,
    SECANT_MODULUS_EXPONENT,
)
from ..precision import round12


@dataclass(frozen=True)
class AngleDeflectionResult:
    V_ek_kn: float
    M_ek_knm: float
    sls_stress: float  # N/mm2
    Es_sr: float  # secant modulus (N/mm2)
    D_tip: float  # mm
    D_horz: float  # mm
    rotation_heel: float  # rad
    D_heel: float  # mm
    total_deflection: float  # mm
    utilization_pct: float
    passes: bool


@dataclass(frozen=True)
class DroppingBelowSlabResult:
    P: float  # drop below slab (mm)
    P_eff: float  # mm
    L_d: float  # mm
    M_ek_knm: float
    Ixx_2: float  # mm4
    L_deflection: float  # mm
    rotation_heel: float  # rad
    D_heel_2: float  # mm
    passes: bool


@dataclass(frozen=True)
class TotalDeflectionResult:
    vertical_deflection: float  # mm
    span_deflection: float  # mm
    total_deflection: float  # mm
    utilization_pct: float
    passes: bool


def secant_modulus(sls_stress: float, f_y: float = F_Y) -> float:
    """Secant modulus of stainless steel at a serviceability stress (N/mm2)."""
    s = float(sls_stress)
    if s <= 0.0:
        return E_STEEL
    return round12(E_STEEL / (1.0 + 0.002 * (E_STEEL / s) * (s / float(f_y)) ** SECANT_MODULUS_EXPONENT))


def verify_angle_deflection_sls(
    v_ed: float,
    L_1: float,
    m_ed_angle: float,
    Z: float,
    a: float,
    b: float,
    I: float,
    horizontal_leg: float,
    Ixx: float,
    load_factor: float = DEAD_LOAD_FACTOR,
    f_y: float = F_Y,
) -> AngleDeflectionResult:
    """
    Angle tip deflection at serviceability load.

    The horizontal leg deflects as a cantilever of length a (D_tip); the vertical leg rotates
    under the characteristic moment over the rise to bolt I, swinging the heel by D_heel.
    Both use the secant modulus at the characteristic bending stress.
    """
    v_ek = float(v_ed) / float(load_factor)
    m_ek = v_ek * float(L_1) / 1000.0
    stress = float(m_ed_angle) * 1e6 / float(Z) / float(load_factor) if Z > 0 else math.inf
    es = secant_modulus(stress, f_y) if math.isfinite(stress) else 0.0

    if es <= 0.0 or Ixx <= 0.0 or I <= 0.0:
        return AngleDeflectionResult(
            V_ek_kn=round12(v_ek),
            M_ek_knm=round12(m_ek),
            sls_stress=stress,
            Es_sr=es,
            D_tip=math.inf,
            D_horz=math.inf,
            rotation_heel=math.inf,
            D_heel=math.inf,
            total_deflection=math.inf,
            utilization_pct=math.inf,
            passes=False,
        )

    a_, b_, I_ = float(a), float(b), float(I)
    d_tip = v_ek * 1000.0 * a_**2 * (3.0 * (a_ + b_) - a_) / (6.0 * es * float(Ixx))
    d_horz = m_ek * 1e6 * I_**2 / (2.0 * es * float(Ixx))
    rotation = math.atan(d_horz / I_)
    d_heel = float(horizontal_leg) * math.sin(rotation)
    total = d_tip + d_heel
    return AngleDeflectionResult(
        V_ek_kn=round12(v_ek),
        M_ek_knm=round12(m_ek),
        sls_stress=round12(stress),
        Es_sr=es,
        D_tip=round12(d_tip),
        D_horz=round12(d_horz),
        rotation_heel=round12(rotation),
        D_heel=round12(d_heel),
        total_deflection=round12(total),
        utilization_pct=round12(total / MAX_ANGLE_DEFLECTION * 100.0),
        passes=total <= MAX_ANGLE_DEFLECTION,
    )


def verify_dropping_below_slab(
    drop_below_slab: float,
    notch_height: float,
    v_ek: float,
    design_cavity: float,
    ecc: float,
    bracket_projection: float,
    bracket_thickness: float,
    bearing_length: float,
) -> DroppingBelowSlabResult:
    """
    Heel deflection from the bracket bending over the depth it hangs below the slab soffit.

    The effective drop is the larger of the drop and the notch height. This contribution always
    passes on its own; it is limited through the total system deflection.
    """
    P = float(drop_below_slab)
    L_d = float(design_cavity) + float(ecc)
    m_ek = float(v_ek) * L_d / 1000.0
    ixx_2 = 2.0 * float(bracket_thickness) * float(bracket_projection) ** 3 / 12.0

    if P <= 0.0 or ixx_2 <= 0.0:
        return DroppingBelowSlabResult(
            P=round12(P),
            P_eff=0.0,
            L_d=round12(L_d),
            M_ek_knm=round12(m_ek),
            Ixx_2=round12(ixx_2),
            L_deflection=0.0,
            rotation_heel=0.0,
            D_heel_2=0.0,
            passes=True,
        )

    p_eff = max(float(notch_height), P)
    l_def = m_ek * 1e6 * p_eff**2 / (2.0 * E_STEEL * ixx_2)
    rotation = math.atan(l_def / p_eff)
    d_heel_2 = (float(design_cavity) + float(bearing_length)) * math.sin(rotation)
    return DroppingBelowSlabResult(
        P=round12(P),
        P_eff=round12(p_eff),
        L_d=round12(L_d),
        M_ek_knm=round12(m_ek),
        Ixx_2=round12(ixx_2),
        L_deflection=round12(l_def),
        rotation_heel=round12(rotation),
        D_heel_2=round12(d_heel_2),
        passes=True,
    )


def verify_total_deflection(
    angle_deflection: float,
    heel_deflection: float,
    Es_sr: float,
    bracket_centres: float,
    characteristic_udl: float,
    angle_thickness: int,
    include_span: bool = True,
) -> TotalDeflectionResult:
    """
    Vertical deflection at the angle toe, plus the angle sagging between brackets.

      span = 5 w L^3 / (384 E_s I_xx)
    """
    vertical = float(angle_deflection) + float(heel_deflection)
    ixx = ANGLE_SPAN_IXX.get(int(angle_thickness), 0.0)
    span = 0.0
    if include_span:
        if ixx <= 0.0 or Es_sr <= 0.0:
            span = math.inf
        else:
            span = 5.0 * float(characteristic_udl) * 1000.0 * float(bracket_centres) ** 3 / (384.0 * float(Es_sr) * ixx)
    total = vertical + span
    return TotalDeflectionResult(
        vertical_deflection=round12(vertical),
        span_deflection=round12(span),
        total_deflection=round12(total),
        utilization_pct=round12(total / MAX_SYSTEM_DEFLECTION * 100.0),
        passes=total <= MAX_SYSTEM_DEFLECTION,
    )
