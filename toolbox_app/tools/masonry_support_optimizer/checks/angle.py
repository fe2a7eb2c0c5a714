from __future__ import annotations

import math
from dataclasses import dataclass

from ..constants import ANGLE_RISE_DEDUCTION, F_Y, GAMMA_M0, HORIZONTAL_LEG, ISOLATION_SHIM_THICKNESS
from ..precision import round12


@dataclass(frozen=True)
class AngleParameters:
    d: float  # cavity face to back of angle (mm)
    b: float  # bearing length (mm)
    R: float  # internal root radius (mm)
    Z: float  # elastic modulus over one bracket centres (mm3)
    Av: float  # shear area (mm2)
    Ixx: float  # second moment of area (mm4)
    horizontal_leg: float


@dataclass(frozen=True)
class MathematicalModel:
    Ecc: float  # load eccentricity from the angle heel (mm)
    a: float
    b: float  # effective bearing beyond the load line (mm)
    I: float  # rise to angle bolt (mm)


@dataclass(frozen=True)
class MomentResistanceResult:
    L_1: float
    M_ed_knm: float
    M_rd_knm: float
    utilization_pct: float
    passes: bool


@dataclass(frozen=True)
class ShearResistanceResult:
    V_ed_kn: float
    V_rd_kn: float
    utilization_pct: float
    passes: bool


def angle_parameters(
    cavity: float,
    bracket_projection: float,
    angle_thickness: float,
    bracket_centres: float,
    horizontal_leg: float = HORIZONTAL_LEG,
    shim: float = ISOLATION_SHIM_THICKNESS,
) -> AngleParameters:
    T = float(angle_thickness)
    d = (float(cavity) - float(bracket_projection) - float(shim)) + (6.0 if T == 5 else 5.0)
    b = float(horizontal_leg) - T - d
    B_cc = float(bracket_centres)
    return AngleParameters(
        d=round12(d),
        b=round12(b),
        R=round12(T),
        Z=round12(B_cc * T**2 / 6.0),
        Av=round12(B_cc * T),
        Ixx=round12(B_cc * T**3 / 12.0),
        horizontal_leg=round12(horizontal_leg),
    )


def mathematical_model(
    params: AngleParameters,
    angle_thickness: float,
    vertical_leg: float,
    facade_thickness: float,
    load_position: float = 1.0 / 3.0,
) -> MathematicalModel:
    T = float(angle_thickness)
    ecc = float(facade_thickness) * float(load_position)
    a = params.d + ecc - (T + params.R) + math.pi * (T / 2.0 + params.R)
    return MathematicalModel(
        Ecc=round12(ecc),
        a=round12(a),
        b=round12(params.b - ecc),
        I=round12(float(vertical_leg) - (params.R + T) - ANGLE_RISE_DEDUCTION),
    )


def verify_moment_resistance_uls(v_ed: float, ecc: float, d: float, angle_thickness: float, Z: float) -> MomentResistanceResult:
    L_1 = float(ecc) + float(d) + float(angle_thickness)
    m_ed = float(v_ed) * L_1 / 1000.0
    m_rd = (float(Z) / 1e6) * (F_Y / GAMMA_M0)
    util = m_ed / m_rd * 100.0 if m_rd > 0 else math.inf
    return MomentResistanceResult(
        L_1=round12(L_1),
        M_ed_knm=round12(m_ed),
        M_rd_knm=round12(m_rd),
        utilization_pct=round12(util),
        passes=util <= 100.0,
    )


def verify_shear_resistance_uls(v_ed: float, Av: float) -> ShearResistanceResult:
    v_rd = float(Av) * (F_Y / math.sqrt(3.0)) / GAMMA_M0 / 1000.0
    util = float(v_ed) / v_rd * 100.0 if v_rd > 0 else math.inf
    return ShearResistanceResult(
        V_ed_kn=round12(v_ed),
        V_rd_kn=round12(v_rd),
        utilization_pct=round12(util),
        passes=util <= 100.0,
    )
