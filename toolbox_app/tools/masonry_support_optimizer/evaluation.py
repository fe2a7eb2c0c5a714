from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .calc_trace import CalcTrace, compute_step
from .checks.angle import (
    AngleParameters,
    MathematicalModel,
    MomentResistanceResult,
    ShearResistanceResult,
    angle_parameters,
    mathematical_model,
    verify_moment_resistance_uls,
    verify_shear_resistance_uls,
)
from .checks.bracket import BracketDesignResult, verify_bracket_design
from .checks.combined_tension_shear import CombinedTensionShearResult, verify_combined_tension_shear
from .checks.connection import AngleToBracketResult, verify_angle_to_bracket_connection
from .checks.deflection import (
    AngleDeflectionResult,
    DroppingBelowSlabResult,
    TotalDeflectionResult,
    verify_angle_deflection_sls,
    verify_dropping_below_slab,
    verify_total_deflection,
)
from .checks.fixing import FixingResult, SteelFixingResult, verify_fixing, verify_steel_fixing
from .checks.packers import PackerResult, verify_shear_reduction_due_to_packers
from .combinations import CandidateSkeleton, GeneticParameters
from .constants import (
    BASE_PLATE_WIDTH,
    BRACKET_PLATES,
    DEAD_LOAD_FACTOR,
    DESIGN_CAVITY_ALLOWANCE,
    HORIZONTAL_LEG,
    MAX_ANGLE_DEFLECTION,
    MAX_SYSTEM_DEFLECTION,
    PACKER_THICKNESS,
)
from .db.channel_specs import get_channel_spec
from .db.steel_fixings import get_steel_fixing_capacity
from .geometry import BracketGeometry, Loading, SystemWeight, calculate_loading, calculate_system_weight
from .models import ChannelType, DesignInputs
from .precision import round12

CHECK_LABELS: Dict[str, str] = {
    "fixing": "Fixing (channel / concrete)",
    "steel_fixing": "Steel fixing",
    "combined_tension_shear": "Bracket combined tension + shear",
    "angle_moment": "Angle moment resistance",
    "angle_shear": "Angle shear resistance",
    "angle_deflection": "Angle deflection (SLS)",
    "angle_bracket_connection": "Angle to bracket bolt",
    "packers": "Bolt with packing",
    "dropping_below_slab": "Bracket drop below slab",
    "total_deflection": "Total system deflection",
    "bracket_design": "Bracket bending",
}


@dataclass(frozen=True)
class VerificationOutcome:
    fixing: Optional[FixingResult]
    steel_fixing: Optional[SteelFixingResult]
    combined_tension_shear: CombinedTensionShearResult
    angle_parameters: AngleParameters
    angle_model: MathematicalModel
    angle_moment: MomentResistanceResult
    angle_shear: ShearResistanceResult
    angle_deflection: AngleDeflectionResult
    angle_bracket_connection: AngleToBracketResult
    packers: PackerResult
    dropping_below_slab: DroppingBelowSlabResult
    total_deflection: TotalDeflectionResult
    bracket_design: BracketDesignResult

    def checks(self) -> Dict[str, Tuple[bool, float]]:
        """Check name -> (passes, utilisation %), in a fixed order."""
        out: Dict[str, Tuple[bool, float]] = {}
        if self.fixing is not None:
            out["fixing"] = (self.fixing.passes, _fixing_utilization(self.fixing))
        if self.steel_fixing is not None:
            out["steel_fixing"] = (self.steel_fixing.passes, self.steel_fixing.combined * 100.0)
        out["combined_tension_shear"] = (
            self.combined_tension_shear.passes,
            self.combined_tension_shear.utilization_pct,
        )
        out["angle_moment"] = (self.angle_moment.passes, self.angle_moment.utilization_pct)
        out["angle_shear"] = (self.angle_shear.passes, self.angle_shear.utilization_pct)
        out["angle_deflection"] = (self.angle_deflection.passes, self.angle_deflection.utilization_pct)
        out["angle_bracket_connection"] = (
            self.angle_bracket_connection.passes,
            self.angle_bracket_connection.U_combined_pct,
        )
        out["packers"] = (self.packers.passes, self.packers.utilization_pct)
        # reported as its share of the system deflection limit
        out["dropping_below_slab"] = (
            self.dropping_below_slab.passes,
            round12(self.dropping_below_slab.D_heel_2 / MAX_SYSTEM_DEFLECTION * 100.0),
        )
        out["total_deflection"] = (self.total_deflection.passes, self.total_deflection.utilization_pct)
        out["bracket_design"] = (self.bracket_design.passes, self.bracket_design.utilization_pct)
        return out

    @property
    def all_checks_pass(self) -> bool:
        return all(p for p, _ in self.checks().values())

    @property
    def failed_checks(self) -> List[str]:
        return [k for k, (p, _) in self.checks().items() if not p]

    @property
    def governing(self) -> Tuple[str, float]:
        name, (_, util) = max(self.checks().items(), key=lambda kv: kv[1][1])
        return name, round12(util)


@dataclass(frozen=True)
class Candidate:
    index: int
    genetic: GeneticParameters
    geometry: BracketGeometry
    loading: Loading
    verification: VerificationOutcome
    weight: SystemWeight

    @property
    def total_weight(self) -> float:
        return self.weight.total_kg_per_m

    @property
    def all_checks_pass(self) -> bool:
        return self.verification.all_checks_pass


def _fixing_utilization(fixing: FixingResult) -> float:
    if not fixing.tensile.passes:
        return math.inf
    if fixing.channel is not None:
        c = fixing.channel
        return max(c.tension_ratio, c.shear_ratio, c.interaction) * 100.0
    return 0.0


def steel_fixing_tension(m_ed_knm: float, rise_to_bolts: float) -> float:
    """Bolt tension from the fixing moment over the rise to bolts (kN)."""
    if rise_to_bolts <= 0.0:
        return math.inf
    return round12(float(m_ed_knm) / (float(rise_to_bolts) / 1000.0))


def _fixing_moment(inputs: DesignInputs, shear_kn: float) -> float:
    lever = float(inputs.cavity_width) + DESIGN_CAVITY_ALLOWANCE + float(inputs.masonry_thickness) * float(
        inputs.load_position
    )
    return round12(float(shear_kn) * lever / 1000.0)


def bracket_section_areas(bracket_height: float, notch_height: float, thickness: float, bolt_diameter: int) -> Tuple[float, float]:
    """Gross and net-of-hole areas of the twin bracket plates at the fixing (mm2)."""
    d_c = float(bracket_height) - float(notch_height)
    t = float(thickness)
    area = BRACKET_PLATES * t * d_c
    shear_area = BRACKET_PLATES * t * (d_c - (int(bolt_diameter) + 2.0))
    return round12(area), round12(shear_area)


def evaluate_candidate(inputs: DesignInputs, skeleton: CandidateSkeleton) -> Candidate:
    """Run every verification on one skeleton. Pure; never raises for a generated skeleton."""
    g = skeleton.genetic
    geom = skeleton.geometry

    loading = calculate_loading(
        inputs.characteristic_load,
        g.bracket_centres,
        masonry_density=inputs.masonry_density,
        masonry_thickness=inputs.masonry_thickness,
        masonry_height_m=inputs.masonry_height,
    )
    v_ed = loading.shear_kn

    fixing: Optional[FixingResult] = None
    steel: Optional[SteelFixingResult] = None
    if g.channel_type is not None:
        spec = get_channel_spec(ChannelType(g.channel_type), inputs.slab_thickness, g.bracket_centres)
        fixing = verify_fixing(
            v_ed,
            float(inputs.cavity_width) + DESIGN_CAVITY_ALLOWANCE,
            inputs.masonry_thickness,
            base_plate_width=BASE_PLATE_WIDTH,
            rise_to_bolts=geom.rise_to_bolts,
            concrete_grade=inputs.concrete_grade,
            load_position=inputs.load_position,
            channel_spec=spec,
        )
        tension = fixing.tensile_force_kn
    else:
        capacity = get_steel_fixing_capacity(inputs.steel_section_type, g.steel_bolt_size, g.steel_fixing_method)
        tension = steel_fixing_tension(_fixing_moment(inputs, v_ed), geom.rise_to_bolts)
        steel = verify_steel_fixing(v_ed, tension, capacity)

    area, shear_area = bracket_section_areas(
        geom.bracket_height, inputs.notch_height, g.bracket_thickness, g.bolt_diameter
    )
    combined = verify_combined_tension_shear(tension, v_ed, area, shear_area)

    params = angle_parameters(inputs.cavity_width, geom.bracket_projection, g.angle_thickness, g.bracket_centres)
    model = mathematical_model(params, g.angle_thickness, g.vertical_leg, inputs.facade_thickness, inputs.load_position)
    moment = verify_moment_resistance_uls(v_ed, model.Ecc, params.d, g.angle_thickness, params.Z)
    shear = verify_shear_resistance_uls(v_ed, params.Av)
    deflection = verify_angle_deflection_sls(
        v_ed, moment.L_1, moment.M_ed_knm, params.Z, model.a, model.b, model.I, HORIZONTAL_LEG, params.Ixx
    )
    connection = verify_angle_to_bracket_connection(v_ed, HORIZONTAL_LEG, params.b, model.I, g.bolt_diameter)
    packers = verify_shear_reduction_due_to_packers(
        v_ed, connection.N_bolt_kn, connection.V_rd_kn, connection.N_rd_kn, PACKER_THICKNESS, g.bolt_diameter
    )
    drop = verify_dropping_below_slab(
        geom.drop_below_slab,
        inputs.notch_height,
        v_ed / DEAD_LOAD_FACTOR,
        float(inputs.cavity_width) + DESIGN_CAVITY_ALLOWANCE,
        model.Ecc,
        geom.bracket_projection,
        g.bracket_thickness,
        params.b,
    )
    total_deflection = verify_total_deflection(
        deflection.total_deflection,
        drop.D_heel_2,
        deflection.Es_sr,
        g.bracket_centres,
        loading.characteristic_udl,
        g.angle_thickness,
    )
    bracket = verify_bracket_design(
        v_ed, inputs.cavity_width, model.Ecc, geom.bracket_height, inputs.notch_height, g.bracket_thickness
    )

    weight = calculate_system_weight(
        geom.bracket_height,
        geom.bracket_projection,
        g.bracket_thickness,
        g.bracket_centres,
        g.angle_thickness,
        g.vertical_leg,
    )

    return Candidate(
        index=skeleton.index,
        genetic=g,
        geometry=geom,
        loading=loading,
        verification=VerificationOutcome(
            fixing=fixing,
            steel_fixing=steel,
            combined_tension_shear=combined,
            angle_parameters=params,
            angle_model=model,
            angle_moment=moment,
            angle_shear=shear,
            angle_deflection=deflection,
            angle_bracket_connection=connection,
            packers=packers,
            dropping_below_slab=drop,
            total_deflection=total_deflection,
            bracket_design=bracket,
        ),
        weight=weight,
    )


def _pf(ok: bool) -> str:
    return "PASS" if ok else "FAIL"


def evaluate_with_trace(trace: CalcTrace, inputs: DesignInputs, candidate: Candidate) -> Candidate:
    """Record the chosen design's governing quantities as calc steps."""
    g = candidate.genetic
    geom = candidate.geometry
    ld = candidate.loading
    vo = candidate.verification
    v_ed = ld.shear_kn

    # Loads
    compute_step(
        trace,
        id="L1",
        section="Loads",
        title="Characteristic line load on the support",
        output_symbol="w_k",
        output_description="Characteristic masonry line load",
        equation_latex=r"w_k = \rho\,g\,h\,t_m" if ld.area_load is not None else r"w_k = w_{k,input}",
        variables=[
            {"symbol": r"\rho", "description": "Masonry density", "value": inputs.masonry_density, "units": "kg/m3", "source": "input:masonry_density"},
            {"symbol": "h", "description": "Masonry height", "value": inputs.masonry_height, "units": "m", "source": "input:masonry_height"},
            {"symbol": "t_m", "description": "Masonry thickness", "value": inputs.masonry_thickness, "units": "mm", "source": "input:masonry_thickness"},
        ]
        if ld.area_load is not None
        else [
            {"symbol": r"w_{k,input}", "description": "Characteristic load", "value": inputs.characteristic_load, "units": "kN/m", "source": "input:characteristic_load"},
        ],
        compute_fn=lambda: ld.characteristic_udl,
        units="kN/m",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 3},
        references=[{"type": "derived", "ref": "geometry.calculate_loading:L1"}],
    )

    compute_step(
        trace,
        id="L2",
        section="Loads",
        title="Design line load",
        output_symbol="w_{Ed}",
        output_description="Factored line load",
        equation_latex=r"w_{Ed} = \gamma_G\,w_k",
        variables=[
            {"symbol": r"\gamma_G", "description": "Dead load factor", "value": DEAD_LOAD_FACTOR, "units": "-", "source": "constant:DEAD_LOAD_FACTOR"},
            {"symbol": "w_k", "description": "Characteristic line load", "value": ld.characteristic_udl, "units": "kN/m", "source": "step:L1"},
        ],
        compute_fn=lambda: ld.design_udl,
        units="kN/m",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 3},
        references=[{"type": "derived", "ref": "geometry.calculate_loading:L2"}],
    )

    compute_step(
        trace,
        id="L3",
        section="Loads",
        title="Design shear per bracket",
        output_symbol="V_{Ed}",
        output_description="Shear at one bracket",
        equation_latex=r"V_{Ed} = \frac{w_{Ed}\,B_{cc}}{1000}",
        variables=[
            {"symbol": "w_{Ed}", "description": "Design line load", "value": ld.design_udl, "units": "kN/m", "source": "step:L2"},
            {"symbol": "B_{cc}", "description": "Bracket centres", "value": g.bracket_centres, "units": "mm", "source": "search:bracket_centres"},
        ],
        compute_fn=lambda: v_ed,
        units="kN",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 3},
        references=[{"type": "derived", "ref": "geometry.calculate_loading:L3"}],
    )

    # Geometry
    compute_step(
        trace,
        id="G1",
        section="Geometry",
        title="Bracket height",
        output_symbol="H_b",
        output_description=f"{g.bracket_type} bracket with {g.angle_orientation.lower()} angle",
        equation_latex=r"H_b = |SL| - X + Y",
        variables=[
            {"symbol": "SL", "description": "Support level", "value": inputs.support_level, "units": "mm", "source": "input:support_level"},
            {"symbol": "X", "description": "Fixing position", "value": g.fixing_position, "units": "mm", "source": "search:fixing_position"},
            {"symbol": "Y", "description": "Bracket top to fixing", "value": 40.0, "units": "mm", "source": "constant:BRACKET_TOP_TO_FIXING"},
        ],
        compute_fn=lambda: geom.bracket_height,
        units="mm",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 1},
        references=[{"type": "derived", "ref": "geometry.bracket_height:G1"}],
    )

    compute_step(
        trace,
        id="G2",
        section="Geometry",
        title="Rise to bolts (worst case in slot)",
        output_symbol="x",
        output_description="Rise from bracket base to fixing bolts",
        equation_latex=r"x = H_b - (Y + 15)",
        variables=[
            {"symbol": "H_b", "description": "Bracket height", "value": geom.bracket_height, "units": "mm", "source": "step:G1"},
            {"symbol": "Y", "description": "Bracket top to fixing", "value": 40.0, "units": "mm", "source": "constant:BRACKET_TOP_TO_FIXING"},
        ],
        compute_fn=lambda: geom.rise_to_bolts,
        units="mm",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 1},
        references=[{"type": "derived", "ref": "geometry.rise_to_bolts:G2"}],
    )

    # Fixing
    if vo.fixing is not None:
        fx = vo.fixing

        compute_step(
            trace,
            id="F1",
            section="Fixing",
            title="Moment at the slab face",
            output_symbol="M_{Ed}",
            output_description="Design moment on the fixing",
            equation_latex=r"M_{Ed} = \frac{V_{Ed}\,(C' + t_m\,l_p)}{1000}",
            variables=[
                {"symbol": "V_{Ed}", "description": "Design shear", "value": v_ed, "units": "kN", "source": "step:L3"},
                {"symbol": "C'", "description": "Design cavity", "value": float(inputs.cavity_width) + DESIGN_CAVITY_ALLOWANCE, "units": "mm", "source": "input:cavity_width"},
                {"symbol": "t_m", "description": "Masonry thickness", "value": inputs.masonry_thickness, "units": "mm", "source": "input:masonry_thickness"},
                {"symbol": "l_p", "description": "Load position", "value": inputs.load_position, "units": "-", "source": "input:load_position"},
            ],
            compute_fn=lambda: fx.applied_moment_knm,
            units="kN-m",
            rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 4},
            references=[{"type": "derived", "ref": "checks.fixing.verify_fixing:F1"}],
        )

        def _channel_checks(_x: float):
            out = [
                {
                    "label": "Compression zone within rise to bolts",
                    "demand": fx.tensile.compression_zone_mm,
                    "capacity": geom.rise_to_bolts,
                    "ratio": fx.tensile.compression_zone_mm / geom.rise_to_bolts if geom.rise_to_bolts > 0 else math.inf,
                    "pass_fail": _pf(fx.tensile.depth_check_passes),
                }
            ]
            if fx.channel is not None:
                c = fx.channel
                out.append({"label": "Channel tension", "demand": fx.tensile_force_kn, "capacity": c.tension_capacity_kn, "ratio": c.tension_ratio, "pass_fail": _pf(c.tension_ratio <= 1.0)})
                out.append({"label": "Channel shear", "demand": v_ed, "capacity": c.shear_capacity_kn, "ratio": c.shear_ratio, "pass_fail": _pf(c.shear_ratio <= 1.0)})
                out.append({"label": "Channel interaction", "demand": c.interaction, "capacity": 1.0, "ratio": c.interaction, "pass_fail": _pf(c.interaction <= 1.0)})
            return out

        compute_step(
            trace,
            id="F2",
            section="Fixing",
            title="Tensile load in the fixing",
            output_symbol="T",
            output_description=f"Tension in {g.channel_type} fixing",
            equation_latex=r"T = \frac{-b - \sqrt{b^2 - 4ac}}{2a},\;\; a = \frac{2}{3 f_{cd} w},\; b = -x,\; c = M_{Ed}",
            variables=[
                {"symbol": "M_{Ed}", "description": "Design moment", "value": fx.applied_moment_knm, "units": "kN-m", "source": "step:F1"},
                {"symbol": "f_{cd}", "description": "Concrete design strength", "value": fx.f_cd, "units": "MPa", "source": "input:concrete_grade"},
                {"symbol": "w", "description": "Base plate width", "value": BASE_PLATE_WIDTH, "units": "mm", "source": "constant:BASE_PLATE_WIDTH"},
                {"symbol": "x", "description": "Rise to bolts", "value": geom.rise_to_bolts, "units": "mm", "source": "step:G2"},
            ],
            compute_fn=lambda: fx.tensile_force_kn,
            units="kN",
            rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 3},
            references=[{"type": "derived", "ref": "checks.fixing.calculate_tensile_load:F2"}],
            checks_builder=_channel_checks,
        )
    else:
        sf = vo.steel_fixing

        def _steel_checks(_x: float):
            return [
                {"label": f"{g.steel_fixing_method} {g.steel_bolt_size} interaction", "demand": sf.combined, "capacity": 1.0, "ratio": sf.combined, "pass_fail": _pf(sf.passes)},
            ]

        compute_step(
            trace,
            id="F1",
            section="Fixing",
            title="Steel fixing tension",
            output_symbol="T",
            output_description="Bolt tension from the fixing moment",
            equation_latex=r"T = \frac{M_{Ed}}{x / 1000}",
            variables=[
                {"symbol": "M_{Ed}", "description": "Design moment", "value": _fixing_moment(inputs, v_ed), "units": "kN-m", "source": "derived:fixing"},
                {"symbol": "x", "description": "Rise to bolts", "value": geom.rise_to_bolts, "units": "mm", "source": "step:G2"},
            ],
            compute_fn=lambda: sf.tension_kn,
            units="kN",
            rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 3},
            references=[{"type": "derived", "ref": "evaluation.steel_fixing_tension:F1"}],
            checks_builder=_steel_checks,
        )

    ct = vo.combined_tension_shear
    compute_step(
        trace,
        id="S1",
        section="Bracket",
        title="Combined tension and shear at the fixing",
        output_symbol="U_{vm}",
        output_description="Von Mises utilisation of bracket plates",
        equation_latex=r"U_{vm} = 100\sqrt{(\sigma/f_{yd})^2 + 3(\tau/f_{yd})^2}",
        variables=[
            {"symbol": r"\sigma", "description": "Direct stress", "value": ct.sigma_ed, "units": "MPa", "source": "derived:T/A"},
            {"symbol": r"\tau", "description": "Shear stress", "value": ct.tau_ed, "units": "MPa", "source": "derived:V/A_v"},
            {"symbol": "f_{yd}", "description": "Design yield strength", "value": ct.f_yd, "units": "MPa", "source": "constant:F_Y/GAMMA_M0"},
        ],
        compute_fn=lambda: ct.utilization_pct,
        units="%",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 1},
        references=[{"type": "derived", "ref": "checks.combined_tension_shear:S1"}],
        checks_builder=lambda u: [{"label": "Combined tension + shear", "demand": u, "capacity": 100.0, "ratio": u / 100.0, "pass_fail": _pf(ct.passes)}],
    )

    # Angle
    am = vo.angle_moment
    ap = vo.angle_parameters
    compute_step(
        trace,
        id="A1",
        section="Angle",
        title="Angle moment resistance",
        output_symbol="M_{Ed,a}",
        output_description=f"{g.angle_thickness} mm angle in bending",
        equation_latex=r"M_{Ed,a} = \frac{V_{Ed}\,(Ecc + d + T)}{1000}",
        variables=[
            {"symbol": "V_{Ed}", "description": "Design shear", "value": v_ed, "units": "kN", "source": "step:L3"},
            {"symbol": "Ecc", "description": "Load eccentricity", "value": vo.angle_model.Ecc, "units": "mm", "source": "derived:angle_model"},
            {"symbol": "d", "description": "Cavity face to angle", "value": ap.d, "units": "mm", "source": "derived:angle_parameters"},
            {"symbol": "T", "description": "Angle thickness", "value": g.angle_thickness, "units": "mm", "source": "search:angle_thickness"},
        ],
        compute_fn=lambda: am.M_ed_knm,
        units="kN-m",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 4},
        references=[{"type": "derived", "ref": "checks.angle.verify_moment_resistance_uls:A1"}],
        checks_builder=lambda m: [{"label": "Angle bending", "demand": m, "capacity": am.M_rd_knm, "ratio": am.utilization_pct / 100.0, "pass_fail": _pf(am.passes)}],
    )

    ash = vo.angle_shear
    compute_step(
        trace,
        id="A2",
        section="Angle",
        title="Angle shear resistance",
        output_symbol="V_{Rd,a}",
        output_description="Plastic shear resistance over one bracket centres",
        equation_latex=r"V_{Rd,a} = \frac{A_v\,f_y}{\sqrt{3}\,\gamma_{M0}\,1000}",
        variables=[
            {"symbol": "A_v", "description": "Shear area", "value": ap.Av, "units": "mm2", "source": "derived:angle_parameters"},
        ],
        compute_fn=lambda: ash.V_rd_kn,
        units="kN",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 3},
        references=[{"type": "derived", "ref": "checks.angle.verify_shear_resistance_uls:A2"}],
        checks_builder=lambda vr: [{"label": "Angle shear", "demand": v_ed, "capacity": vr, "ratio": ash.utilization_pct / 100.0, "pass_fail": _pf(ash.passes)}],
    )

    cn = vo.angle_bracket_connection
    compute_step(
        trace,
        id="C1",
        section="Connection",
        title="Angle to bracket bolt",
        output_symbol="U_{bolt}",
        output_description=f"M{g.bolt_diameter} bolt shear plus prying tension",
        equation_latex=r"U_{bolt} = \frac{V_{Ed}}{V_{Rd}} + \frac{N}{1.4\,N_{Rd}}",
        variables=[
            {"symbol": "V_{Ed}", "description": "Design shear", "value": v_ed, "units": "kN", "source": "step:L3"},
            {"symbol": "N", "description": "Bolt tension", "value": cn.N_bolt_kn, "units": "kN", "source": "derived:M_b/I"},
            {"symbol": "V_{Rd}", "description": "Bolt shear resistance", "value": cn.V_rd_kn, "units": "kN", "source": "derived:bolt"},
            {"symbol": "N_{Rd}", "description": "Bolt tension resistance", "value": cn.N_rd_kn, "units": "kN", "source": "derived:bolt"},
        ],
        compute_fn=lambda: cn.U_combined_pct,
        units="%",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 1},
        references=[{"type": "derived", "ref": "checks.connection.verify_angle_to_bracket_connection:C1"}],
        checks_builder=lambda u: [{"label": "Bolt interaction", "demand": u, "capacity": 100.0, "ratio": u / 100.0, "pass_fail": _pf(cn.passes)}],
    )

    pk = vo.packers
    compute_step(
        trace,
        id="C2",
        section="Connection",
        title="Bolt shear reduced for packing",
        output_symbol=r"\beta_p",
        output_description=f"{pk.t_p:g} mm packing on M{g.bolt_diameter} bolt",
        equation_latex=r"\beta_p = \min\left(\frac{9d}{8d + 3t_p},\,1\right)",
        variables=[
            {"symbol": "d", "description": "Bolt diameter", "value": g.bolt_diameter, "units": "mm", "source": "search:bolt_diameter"},
            {"symbol": "t_p", "description": "Packer thickness", "value": pk.t_p, "units": "mm", "source": "constant:PACKER_THICKNESS"},
        ],
        compute_fn=lambda: pk.beta_p,
        units="-",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 3},
        references=[{"type": "derived", "ref": "checks.packers.verify_shear_reduction_due_to_packers:C2"}],
        checks_builder=lambda _b: [{"label": "Bolt interaction with packing", "demand": pk.utilization_pct, "capacity": 100.0, "ratio": pk.utilization_pct / 100.0, "pass_fail": _pf(pk.passes)}],
    )

    # Deflection
    ad = vo.angle_deflection
    compute_step(
        trace,
        id="D1",
        section="Deflection",
        title="Angle deflection at serviceability load",
        output_symbol=r"\delta_a",
        output_description=f"Tip plus heel deflection, secant modulus {ad.Es_sr:.0f} MPa",
        equation_latex=r"\delta_a = \frac{V_{Ek}\,a^2\,(3(a+b) - a)}{6\,E_s\,I_{xx}} + B\sin\theta",
        variables=[
            {"symbol": "V_{Ek}", "description": "Characteristic shear", "value": ad.V_ek_kn, "units": "kN", "source": "derived:V_Ed/1.35"},
            {"symbol": "E_s", "description": "Secant modulus", "value": ad.Es_sr, "units": "MPa", "source": "derived:deflection"},
            {"symbol": "I_{xx}", "description": "Angle second moment of area", "value": ap.Ixx, "units": "mm4", "source": "derived:angle_parameters"},
            {"symbol": "B", "description": "Horizontal leg", "value": HORIZONTAL_LEG, "units": "mm", "source": "constant:HORIZONTAL_LEG"},
        ],
        compute_fn=lambda: ad.total_deflection,
        units="mm",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 3},
        references=[{"type": "derived", "ref": "checks.deflection.verify_angle_deflection_sls:D1"}],
        checks_builder=lambda d: [{"label": "Angle deflection", "demand": d, "capacity": MAX_ANGLE_DEFLECTION, "ratio": ad.utilization_pct / 100.0, "pass_fail": _pf(ad.passes)}],
    )

    dr = vo.dropping_below_slab
    td = vo.total_deflection
    compute_step(
        trace,
        id="D2",
        section="Deflection",
        title="Total system deflection",
        output_symbol=r"\delta_{tot}",
        output_description=f"Includes {dr.D_heel_2:.3f} mm from the bracket below the slab",
        equation_latex=r"\delta_{tot} = \delta_a + \delta_{heel,2} + \frac{5\,w_k\,B_{cc}^3}{384\,E_s\,I_{xx,3}}",
        variables=[
            {"symbol": r"\delta_a", "description": "Angle deflection", "value": ad.total_deflection, "units": "mm", "source": "step:D1"},
            {"symbol": r"\delta_{heel,2}", "description": "Heel deflection from drop below slab", "value": dr.D_heel_2, "units": "mm", "source": "derived:drop_below_slab"},
            {"symbol": "w_k", "description": "Characteristic line load", "value": ld.characteristic_udl, "units": "kN/m", "source": "step:L1"},
            {"symbol": "B_{cc}", "description": "Bracket centres", "value": g.bracket_centres, "units": "mm", "source": "search:bracket_centres"},
        ],
        compute_fn=lambda: td.total_deflection,
        units="mm",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 3},
        references=[{"type": "derived", "ref": "checks.deflection.verify_total_deflection:D2"}],
        checks_builder=lambda d: [{"label": "System deflection", "demand": d, "capacity": MAX_SYSTEM_DEFLECTION, "ratio": td.utilization_pct / 100.0, "pass_fail": _pf(td.passes)}],
    )

    bd = vo.bracket_design
    compute_step(
        trace,
        id="B1",
        section="Bracket",
        title="Bracket bending at the slab face",
        output_symbol="M_{Rd,b}",
        output_description=f"Twin {g.bracket_thickness} mm plates, class 1: {'yes' if bd.is_class_1 else 'no'}",
        equation_latex=r"M_{Rd,b} = \frac{f_y\,W_{pl}}{\gamma_{M0}\,10^6}",
        variables=[
            {"symbol": "W_{pl}", "description": "Plastic modulus", "value": bd.W_pl, "units": "mm3", "source": "derived:bracket"},
            {"symbol": "d_c", "description": "Depth below notch", "value": bd.d_c, "units": "mm", "source": "derived:bracket"},
        ],
        compute_fn=lambda: bd.M_rd_knm,
        units="kN-m",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 4},
        references=[{"type": "derived", "ref": "checks.bracket.verify_bracket_design:B1"}],
        checks_builder=lambda mr: [{"label": "Bracket bending", "demand": bd.M_ed_knm, "capacity": mr, "ratio": bd.utilization_pct / 100.0, "pass_fail": _pf(bd.passes)}],
    )

    w = candidate.weight
    compute_step(
        trace,
        id="W1",
        section="Weight",
        title="System weight per metre",
        output_symbol="W",
        output_description="Brackets plus angle",
        equation_latex=r"W = W_{br}\,\frac{1000}{B_{cc}} + W_{angle}",
        variables=[
            {"symbol": "W_{br}", "description": "Weight of one bracket", "value": w.bracket_weight_kg, "units": "kg", "source": "derived:weight"},
            {"symbol": "B_{cc}", "description": "Bracket centres", "value": g.bracket_centres, "units": "mm", "source": "search:bracket_centres"},
            {"symbol": "W_{angle}", "description": "Angle per metre", "value": w.angle_weight_per_m, "units": "kg/m", "source": "derived:weight"},
        ],
        compute_fn=lambda: w.total_kg_per_m,
        units="kg/m",
        rounding_rule={"rule": "decimals", "decimals_or_sigfigs": 3},
        references=[{"type": "derived", "ref": "geometry.calculate_system_weight:W1"}],
    )

    return candidate
