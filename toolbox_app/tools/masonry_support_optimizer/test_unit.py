from __future__ import annotations

import json
import math

import pytest

from toolbox_app.core.settings import update_tool_settings

from .channel_catalog import (
    get_available_channel_types,
    get_product_characteristics,
    get_product_family_name,
    is_high_margin_channel,
    requires_engineering_review,
    resolve_allowed_channel_types,
)
from .checks.angle import angle_parameters, mathematical_model, verify_moment_resistance_uls
from .checks.bracket import verify_bracket_design
from .checks.combined_tension_shear import verify_combined_tension_shear
from .checks.connection import verify_angle_to_bracket_connection
from .checks.deflection import (
    secant_modulus,
    verify_angle_deflection_sls,
    verify_dropping_below_slab,
    verify_total_deflection,
)
from .checks.fixing import calculate_tensile_load, check_channel, verify_fixing, verify_steel_fixing
from .checks.packers import packer_reduction_factor, verify_shear_reduction_due_to_packers
from .combinations import (
    bracket_centres_for,
    bracket_thicknesses,
    fixing_positions,
    generate_combinations,
    steel_fixing_options,
)
from .config import SearchSettings, load_search_settings
from .db.channel_specs import get_channel_spec, valid_bracket_centres
from .db.steel_fixings import FixingCapacityNotFoundError, get_steel_fixing_capacity, resolve_fixing_method
from .db.steel_sections import SectionSizeError, get_section_height, get_section_sizes, is_valid_standard_size
from .geometry import (
    bracket_geometry,
    bracket_height,
    calculate_loading,
    calculate_system_weight,
    determine_bracket_type,
    rise_to_bolts,
    valid_angle_orientations,
)
from .models import ChannelType, DesignInputs, FixingMethod
from .paths import compute_input_hash


def test_input_hash_deterministic() -> None:
    a = {"b": 2.0, "a": 1.0, "allowed_channel_types": ["CPRO38"]}
    b = {"allowed_channel_types": ["CPRO38"], "a": 1.0, "b": 2.0}
    assert compute_input_hash(a) == compute_input_hash(b)
    assert compute_input_hash(a) != compute_input_hash({**a, "b": 2.5})


# ------------------------------
# Catalogs and tables
# ------------------------------
def test_channel_catalog_order_and_family() -> None:
    types = get_available_channel_types()
    assert [t.value for t in types] == ["CPRO38", "CPRO50", "R-HPTIII-70", "R-HPTIII-90"]
    assert is_high_margin_channel("R-HPTIII-90")
    assert not is_high_margin_channel(ChannelType.CPRO50)
    assert not is_high_margin_channel("NOPE")
    assert get_product_family_name("R-HPTIII-70") == "R-HPTIII A4 M12 (70mm embedment)"
    assert requires_engineering_review("R-HPTIII-70")
    assert not requires_engineering_review("CPRO38")
    assert len(get_product_characteristics("R-HPTIII-90").notes) == 4


def test_channel_filter_drops_unknowns_and_falls_back() -> None:
    assert resolve_allowed_channel_types(["r-hptiii-70", "FOO"]) == (ChannelType.R_HPTIII_70,)
    assert resolve_allowed_channel_types(["FOO"]) == get_available_channel_types()
    assert resolve_allowed_channel_types([]) == get_available_channel_types()
    assert resolve_allowed_channel_types(None) == get_available_channel_types()
    # catalog order wins over request order
    assert resolve_allowed_channel_types(["CPRO50", "CPRO38"]) == (ChannelType.CPRO38, ChannelType.CPRO50)


def test_channel_spec_lookup_uses_nearest_lower_slab() -> None:
    spec = get_channel_spec(ChannelType.CPRO38, 225, 300)
    assert spec is not None
    assert spec.max_tension_kn == 10.75
    assert spec.max_shear_kn == 11.55
    assert get_channel_spec(ChannelType.CPRO38, 240, 300).slab_thickness == 225
    assert get_channel_spec(ChannelType.CPRO38, 150, 300).slab_thickness == 200
    assert get_channel_spec(ChannelType.CPRO38, 225, 325) is None
    assert get_channel_spec(ChannelType.R_HPTIII_70, 225, 300).utilization_factor == 2.0
    assert valid_bracket_centres(ChannelType.CPRO50, 250) == (200, 250, 300, 350, 400, 450, 500)


def test_steel_fixing_capacity_method_resolution() -> None:
    rhs = get_steel_fixing_capacity("RHS", "M12", preferred_method="SET_SCREW")
    assert rhs.method == FixingMethod.BLIND_BOLT
    assert rhs.tension_kn == 22.0

    ib = get_steel_fixing_capacity("I-BEAM", "M16")
    assert ib.method == FixingMethod.SET_SCREW
    assert ib.min_edge_distance_mm == pytest.approx(21.6)

    assert get_steel_fixing_capacity("I-BEAM", "M10", "BLIND_BOLT").shear_kn == 19.5
    assert get_steel_fixing_capacity("CHS", "M10").method == FixingMethod.BLIND_BOLT


def test_missing_steel_fixing_row_raises() -> None:
    with pytest.raises(FixingCapacityNotFoundError):
        get_steel_fixing_capacity("SHS", "M20")
    assert issubclass(FixingCapacityNotFoundError, RuntimeError)


def test_unknown_i_beam_fixing_method_raises() -> None:
    with pytest.raises(FixingCapacityNotFoundError):
        resolve_fixing_method("I-BEAM", "WELDED_STUD")
    with pytest.raises(FixingCapacityNotFoundError):
        get_steel_fixing_capacity("I-BEAM", "M12", "expansion")
    assert resolve_fixing_method("I-BEAM", " blind_bolt ") == FixingMethod.BLIND_BOLT
    # hollow sections ignore the preference altogether
    assert resolve_fixing_method("RHS", "WELDED_STUD") == FixingMethod.BLIND_BOLT


def test_section_helpers() -> None:
    assert get_section_height("RHS", "200x100") == 200
    assert get_section_height("I-BEAM", " 457x191 ") == 457
    assert is_valid_standard_size("SHS", "100x100")
    assert not is_valid_standard_size("SHS", "101x101")
    assert not is_valid_standard_size("CHS", "100x100")
    with pytest.raises(SectionSizeError):
        get_section_height("RHS", "x100")
    with pytest.raises(SectionSizeError):
        get_section_height("RHS", "")
    with pytest.raises(SectionSizeError):
        get_section_sizes("CHS")


# ------------------------------
# Checks
# ------------------------------
def test_tensile_load_equilibrium_and_depth() -> None:
    r = calculate_tensile_load(0.5, 56.0, 110.0, 17.0)
    assert r.tensile_load_kn > 0
    assert r.moment_equilibrium_passes and r.shear_equilibrium_passes and r.depth_check_passes
    assert abs(r.moment_residual) < 1e-5
    assert r.compression_zone_mm == pytest.approx(2.0 * r.tensile_load_kn * 1000.0 / (17.0 * 56.0), rel=1e-9)


def test_tensile_load_zero_moment_passes_with_zero_force() -> None:
    r = calculate_tensile_load(0.0, 56.0, 110.0, 17.0)
    assert r.tensile_load_kn == 0.0
    assert r.passes


def test_tensile_load_degenerate_cases_fail() -> None:
    # discriminant negative: moment far beyond what 10 mm of rise can resist
    r = calculate_tensile_load(1.0, 56.0, 10.0, 17.0)
    assert r.tensile_load_kn == 0.0 and not r.moment_equilibrium_passes and not r.depth_check_passes
    assert not calculate_tensile_load(0.5, 0.0, 110.0, 17.0).passes
    assert not calculate_tensile_load(0.5, 56.0, 110.0, 0.0).passes


def test_tensile_load_matches_closed_form() -> None:
    r = calculate_tensile_load(10.0, 200.0, 150.0, 20.0)
    a = (2.0 / 3.0) / (20e6 * 0.2)
    T = (0.15 - math.sqrt(0.15**2 - 4.0 * a * 10000.0)) / (2.0 * a)
    assert round(r.tensile_load_kn, 5) == round(T / 1000.0, 5) == 72.50828
    assert round(r.compression_zone_mm, 5) == round(2.0 * T / (20e6 * 0.2) * 1000.0, 5)
    assert r.compression_zone_mm == pytest.approx(36.254139, abs=1e-6)
    assert r.moment_equilibrium_passes and r.shear_equilibrium_passes and r.depth_check_passes


def test_tensile_load_zero_moment_on_wide_plate() -> None:
    r = calculate_tensile_load(0.0, 200.0, 150.0, 20.0)
    assert round(r.tensile_load_kn, 5) == 0.0
    assert round(r.compression_zone_mm, 5) == 0.0
    assert r.moment_equilibrium_passes and r.shear_equilibrium_passes and r.depth_check_passes


def test_tensile_load_large_moment_small_rise_fails_depth() -> None:
    assert calculate_tensile_load(20.0, 200.0, 100.0, 20.0).depth_check_passes is False


def test_verify_fixing_zero_rise_fails() -> None:
    spec = get_channel_spec(ChannelType.CPRO38, 225, 500)
    assert not verify_fixing(10.0, 100.0, 102.5, 215.0, 0.0).passes
    assert not verify_fixing(10.0, 100.0, 102.5, 215.0, 0.0, channel_spec=spec).passes


def test_verify_fixing_lever_arm_and_channel() -> None:
    spec = get_channel_spec(ChannelType.CPRO38, 225, 500)
    r = verify_fixing(4.0, 120.0, 102.5, rise_to_bolts=110.0, channel_spec=spec)
    assert r.lever_arm_mm == pytest.approx(120.0 + 102.5 / 3.0)
    assert r.applied_moment_knm == pytest.approx(4.0 * (120.0 + 102.5 / 3.0) / 1000.0)
    assert r.f_cd == pytest.approx(0.85 * 30.0 / 1.5)
    assert r.channel is not None and r.channel.passes
    assert r.passes

    # zero shear gives zero tension, which is a failed fixing
    assert not verify_fixing(0.0, 120.0, 102.5, rise_to_bolts=110.0, channel_spec=spec).passes


def test_verify_fixing_without_channel_data_fails() -> None:
    r = verify_fixing(4.0, 120.0, 102.5, rise_to_bolts=110.0)
    assert r.tensile.passes and r.tensile_force_kn > 0
    assert r.channel is None
    assert not r.passes


def test_channel_interaction_uses_lesser_form() -> None:
    spec = get_channel_spec(ChannelType.CPRO38, 225, 300)
    c = check_channel(5.0, 5.0, spec)
    n, v = 5.0 / 10.75, 5.0 / 11.55
    assert c.interaction == pytest.approx(min(n**1.5 + v**1.5, (n + v) / 1.2))
    assert not check_channel(11.0, 1.0, spec).passes


def test_steel_fixing_linear_interaction() -> None:
    cap = get_steel_fixing_capacity("RHS", "M10")
    r = verify_steel_fixing(5.0, 8.0, cap)
    assert r.combined == pytest.approx(5.0 / 19.5 + 8.0 / (1.4 * 12.7))
    assert r.passes
    assert not verify_steel_fixing(12.0, 12.0, cap).passes


def test_combined_tension_shear_von_mises() -> None:
    f_yd = 210.0 / 1.1
    tension_only = verify_combined_tension_shear(1.0, 0.0, 1000.0, 1000.0)
    assert tension_only.utilization_pct == pytest.approx(100.0 * 1.0 / f_yd, rel=1e-9)
    shear_only = verify_combined_tension_shear(0.0, 1.0, 1000.0, 1000.0)
    assert shear_only.utilization_pct == pytest.approx(100.0 * math.sqrt(3.0) / f_yd, rel=1e-9)
    assert shear_only.passes

    dead = verify_combined_tension_shear(1.0, 1.0, 0.0, 1000.0)
    assert math.isinf(dead.utilization_pct) and not dead.passes


def test_combined_tension_shear_worked_values() -> None:
    r = verify_combined_tension_shear(10.0, 14.0, 1500.0, 1000.0)
    assert r.tau_ed == 14.0
    assert round(r.sigma_ed, 5) == 6.66667
    f_yd = 210.0 / 1.1
    expected = 100.0 * math.sqrt((10000.0 / 1500.0 / f_yd) ** 2 + 3.0 * (14.0 / f_yd) ** 2)
    assert round(r.utilization_pct, 5) == round(expected, 5) == 13.173
    assert r.passes

    assert verify_combined_tension_shear(5.0, 5.0, 1500.0, 1000.0).passes
    assert not verify_combined_tension_shear(150.0, 150.0, 1500.0, 1000.0).passes


def test_angle_parameters_and_moment() -> None:
    p = angle_parameters(100.0, 90.0, 5, 500)
    assert p.d == 13.0  # 5 mm angles take the 6 mm allowance
    assert p.b == 72.0
    assert p.Z == pytest.approx(500 * 25 / 6.0)
    m = mathematical_model(p, 5, 60.0, 102.5)
    assert m.Ecc == pytest.approx(102.5 / 3.0)
    assert m.I == pytest.approx(60.0 - 10.0 - 16.5)
    res = verify_moment_resistance_uls(4.0, m.Ecc, p.d, 5, p.Z)
    assert res.M_ed_knm == pytest.approx(4.0 * (m.Ecc + 13.0 + 5.0) / 1000.0)
    assert res.passes

    thin = angle_parameters(100.0, 90.0, 3, 500)
    assert not verify_moment_resistance_uls(4.05, m.Ecc, thin.d, 3, thin.Z).passes


def test_angle_to_bracket_connection() -> None:
    r = verify_angle_to_bracket_connection(4.0, 90.0, 72.0, 33.5, 10)
    assert r.V_rd_kn == pytest.approx(0.5 * 700 * 58.0 / 1.25 / 1000.0)
    assert r.N_bolt_kn == pytest.approx(4.0 * 28.0 / 33.5)
    assert r.passes
    assert verify_angle_to_bracket_connection(4.0, 90.0, 72.0, 33.5, 12).V_rd_kn > r.V_rd_kn


def test_packing_reduces_bolt_shear_resistance() -> None:
    assert packer_reduction_factor(10.0, 10) == pytest.approx(90.0 / 110.0)
    assert packer_reduction_factor(0.0, 12) == 1.0

    bolt = verify_angle_to_bracket_connection(4.0, 90.0, 72.0, 33.5, 10)
    r = verify_shear_reduction_due_to_packers(4.0, bolt.N_bolt_kn, bolt.V_rd_kn, bolt.N_rd_kn, 10.0, 10)
    assert r.V_rd_kn == pytest.approx(bolt.V_rd_kn * 90.0 / 110.0)
    expected = 4.0 / r.V_rd_kn * 100.0 + bolt.N_bolt_kn / (1.4 * bolt.N_rd_kn) * 100.0
    assert r.utilization_pct == pytest.approx(expected)
    assert r.utilization_pct > bolt.U_combined_pct
    assert r.passes

    unpacked = verify_shear_reduction_due_to_packers(4.0, bolt.N_bolt_kn, bolt.V_rd_kn, bolt.N_rd_kn, 0.0, 10)
    assert unpacked.utilization_pct == pytest.approx(bolt.U_combined_pct)
    assert not verify_shear_reduction_due_to_packers(14.0, 2.0, bolt.V_rd_kn, bolt.N_rd_kn, 10.0, 10).passes


def test_secant_modulus() -> None:
    assert secant_modulus(0.0) == 200000.0
    assert secant_modulus(210.0) == pytest.approx(200000.0 / (1.0 + 0.002 * 200000.0 / 210.0))
    assert secant_modulus(100.0) > secant_modulus(180.0)


def test_angle_deflection_sls() -> None:
    p = angle_parameters(100.0, 90.0, 4, 500)
    m = mathematical_model(p, 4, 60.0, 102.5)
    moment = verify_moment_resistance_uls(4.0, m.Ecc, p.d, 4, p.Z)
    r = verify_angle_deflection_sls(4.0, moment.L_1, moment.M_ed_knm, p.Z, m.a, m.b, m.I, 90.0, p.Ixx)

    assert r.V_ek_kn == pytest.approx(4.0 / 1.35)
    assert r.sls_stress == pytest.approx(moment.M_ed_knm * 1e6 / p.Z / 1.35)
    assert r.Es_sr == pytest.approx(secant_modulus(r.sls_stress))
    d_tip = r.V_ek_kn * 1000.0 * m.a**2 * (3.0 * (m.a + m.b) - m.a) / (6.0 * r.Es_sr * p.Ixx)
    assert r.D_tip == pytest.approx(d_tip)
    assert r.D_heel == pytest.approx(90.0 * math.sin(math.atan(r.D_horz / m.I)))
    assert r.total_deflection == pytest.approx(r.D_tip + r.D_heel)
    assert r.total_deflection < 1.5 and r.passes
    assert r.utilization_pct == pytest.approx(r.total_deflection / 1.5 * 100.0)

    # 3 mm angle under the same load is far too flexible
    thin = angle_parameters(100.0, 90.0, 3, 500)
    tm = mathematical_model(thin, 3, 60.0, 102.5)
    tmom = verify_moment_resistance_uls(4.0, tm.Ecc, thin.d, 3, thin.Z)
    t = verify_angle_deflection_sls(4.0, tmom.L_1, tmom.M_ed_knm, thin.Z, tm.a, tm.b, tm.I, 90.0, thin.Ixx)
    assert t.total_deflection > 1.5 and not t.passes

    no_rise = verify_angle_deflection_sls(4.0, moment.L_1, moment.M_ed_knm, p.Z, m.a, m.b, 0.0, 90.0, p.Ixx)
    assert math.isinf(no_rise.total_deflection) and not no_rise.passes


def test_dropping_below_slab() -> None:
    flush = verify_dropping_below_slab(0.0, 0.0, 3.0, 120.0, 34.17, 90.0, 3, 74.0)
    assert flush.D_heel_2 == 0.0 and flush.P_eff == 0.0 and flush.passes
    assert flush.Ixx_2 == pytest.approx(2 * 3 * 90.0**3 / 12.0)
    assert flush.M_ek_knm == pytest.approx(3.0 * (120.0 + 34.17) / 1000.0)

    r = verify_dropping_below_slab(25.0, 0.0, 3.0, 120.0, 34.17, 90.0, 3, 74.0)
    assert r.P_eff == 25.0
    l_def = r.M_ek_knm * 1e6 * 25.0**2 / (2.0 * 200000.0 * r.Ixx_2)
    assert r.L_deflection == pytest.approx(l_def)
    assert r.D_heel_2 == pytest.approx((120.0 + 74.0) * math.sin(math.atan(l_def / 25.0)))
    assert r.D_heel_2 > 0 and r.passes

    # the notch governs when it is deeper than the drop
    notched = verify_dropping_below_slab(25.0, 60.0, 3.0, 120.0, 34.17, 90.0, 3, 74.0)
    assert notched.P_eff == 60.0
    assert notched.D_heel_2 > r.D_heel_2


def test_total_deflection() -> None:
    r = verify_total_deflection(1.0, 0.1, 195000.0, 500, 6.0, 4)
    span = 5.0 * 6.0 * 1000.0 * 500.0**3 / (384.0 * 195000.0 * 180849.0)
    assert r.vertical_deflection == pytest.approx(1.1)
    assert r.span_deflection == pytest.approx(span)
    assert r.total_deflection == pytest.approx(1.1 + span)
    assert r.passes

    assert verify_total_deflection(1.0, 0.1, 195000.0, 500, 6.0, 4, include_span=False).total_deflection == pytest.approx(1.1)
    assert not verify_total_deflection(1.9, 0.2, 195000.0, 500, 6.0, 4, include_span=False).passes
    # no span stiffness for the thickness
    assert not verify_total_deflection(0.5, 0.0, 195000.0, 500, 6.0, 12).passes


def test_bracket_design_reports_section_class_only() -> None:
    r = verify_bracket_design(4.0, 100.0, 34.17, 300.0, 0.0, 3)
    assert not r.is_class_1  # d/t = 100 > 56 * 1.058
    assert r.passes
    assert r.W_pl == pytest.approx(1.2 * 3 * 300.0**2 / 6.0 * 2)


# ------------------------------
# Geometry, loading, weight
# ------------------------------
def test_bracket_type_and_orientations_by_support_level() -> None:
    assert determine_bracket_type(-75) == "Standard"
    assert determine_bracket_type(-74) == "Inverted"
    assert valid_angle_orientations(0) == ("Standard", "Inverted")
    assert valid_angle_orientations(-40) == ("Standard",)
    assert valid_angle_orientations(-100) == ("Inverted",)
    assert valid_angle_orientations(-250) == ("Standard", "Inverted")


def test_standard_bracket_height_and_rise() -> None:
    assert bracket_height(-250, 75, 60, "Standard", "Standard") == 215.0
    assert bracket_height(-250, 75, 60, "Standard", "Inverted") == 275.0
    # bracket passes the soffit, so the bottom edge limits the rise
    assert rise_to_bolts(215.0, -250, 225, 75, 125) == 110.0
    assert rise_to_bolts(215.0, -140, 225, 75, 125) == 160.0


def test_bracket_geometry_limits() -> None:
    assert bracket_geometry(-500, 225, 100, 75, 125, 60, "Standard", "Inverted") is None
    tall = bracket_geometry(-500, 225, 100, 75, 125, 60, "Standard", "Standard")
    assert tall is not None and tall.bracket_height == 465.0
    assert tall.drop_below_slab == 275.0

    short = bracket_geometry(-100, 225, 100, 75, 125, 60, "Standard", "Standard")
    assert short.bracket_height == 100.0
    assert short.drop_below_slab == 0.0
    assert short.bracket_projection == 90.0

    assert bracket_geometry(-250, 225, 50, 75, 125, 60, "Standard", "Standard").bracket_projection == 65.0


def test_loading_from_masonry_and_direct() -> None:
    derived = calculate_loading(None, 500)
    assert derived.characteristic_udl == pytest.approx(2000 * 9.81e-9 * 3000 * 102.5)
    assert derived.area_load is not None

    direct = calculate_loading(6.0, 500)
    assert direct.area_load is None
    assert direct.design_udl == pytest.approx(8.1)
    assert direct.shear_kn == pytest.approx(4.05)


def test_system_weight() -> None:
    w = calculate_system_weight(215.0, 90.0, 3, 500, 5, 60.0)
    bracket_kg = (180.0 + 43.17) * 215.0 * 3 * 7850e-9
    angle_kg = (60.0 + 90.0 - 5) * 1000.0 * 5 * 7850e-9
    assert w.bracket_weight_kg == pytest.approx(bracket_kg)
    assert w.total_kg_per_m == pytest.approx(angle_kg + 2 * bracket_kg)
    with pytest.raises(ValueError):
        calculate_system_weight(215.0, 90.0, 5, 500, 5, 60.0)


# ------------------------------
# Generator
# ------------------------------
def test_fixing_positions() -> None:
    assert fixing_positions(DesignInputs()) == [75.0]
    opt = fixing_positions(DesignInputs(enable_fixing_optimization=True))
    assert opt[0] == 75.0 and opt[-1] == 150.0 and len(opt) == 16
    custom = DesignInputs(enable_fixing_optimization=True, use_custom_fixing_position=True, fixing_position=90)
    assert fixing_positions(custom) == [90.0]

    # a deeper top critical edge moves the first searched position down
    deep = fixing_positions(DesignInputs(enable_fixing_optimization=True, top_critical_edge=100))
    assert deep[0] == 100.0 and deep[-1] == 150.0
    assert fixing_positions(DesignInputs(enable_fixing_optimization=True, top_critical_edge=40))[0] == 75.0

    steel = DesignInputs(
        frame_fixing_type="steel",
        steel_section_type="I-BEAM",
        steel_section_size="203x133",
        enable_fixing_optimization=True,
    )
    pos = fixing_positions(steel)
    assert pos[0] == 15.0 and pos[-1] == 190.0


def test_centres_and_thickness_rules() -> None:
    inputs = DesignInputs(characteristic_load=6.0)
    assert max(bracket_centres_for(inputs, None, 6.0)) == 500
    assert bracket_centres_for(inputs, None, 6.0)[0] == 200
    assert max(bracket_centres_for(inputs, ChannelType.CPRO38, 6.0)) == 500

    assert bracket_thicknesses(DesignInputs(support_level=-300, characteristic_load=5.0), 5.0) == (4,)
    assert bracket_thicknesses(DesignInputs(support_level=-250, characteristic_load=5.0), 5.0) == (3, 4)
    assert bracket_thicknesses(DesignInputs(support_level=-300, characteristic_load=3.0), 3.0) == (3, 4)


def test_steel_fixing_options() -> None:
    both = DesignInputs(
        frame_fixing_type="steel", steel_section_type="I-BEAM", steel_section_size="203x133", steel_fixing_method="both"
    )
    assert len(steel_fixing_options(both)) == 6
    rhs = DesignInputs(
        frame_fixing_type="steel",
        steel_section_type="RHS",
        steel_section_size="200x100",
        steel_fixing_method="SET_SCREW",
        steel_bolt_size="M12",
    )
    assert steel_fixing_options(rhs) == (("M12", "BLIND_BOLT"),)


def test_generator_is_deterministic_and_respects_filters() -> None:
    inputs = DesignInputs(allowed_channel_types=["CPRO50"])
    a = list(generate_combinations(inputs))
    b = list(generate_combinations(inputs))
    assert a == b
    assert [s.index for s in a] == list(range(len(a)))
    assert {s.genetic.channel_type for s in a} == {"CPRO50"}
    assert all(100.0 <= s.geometry.bracket_height <= 490.0 for s in a)
    assert {s.genetic.vertical_leg for s in a if s.genetic.angle_thickness == 8} == {75.0}


def test_inputs_cross_checks() -> None:
    with pytest.raises(ValueError):
        DesignInputs(fixing_position=230, slab_thickness=225)
    with pytest.raises(ValueError):
        DesignInputs(top_critical_edge=225, slab_thickness=225)
    with pytest.raises(ValueError):
        DesignInputs(frame_fixing_type="steel", steel_section_type="RHS", steel_section_size="999x1")
    assert DesignInputs(allowed_channel_types=[" cpro38 ", ""]).allowed_channel_types == ["CPRO38"]


# ------------------------------
# Settings
# ------------------------------
def test_search_settings_file_and_overrides(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    assert load_search_settings() == SearchSettings()

    update_tool_settings("masonry_support_optimizer", {"top_alternatives": 3})
    update_tool_settings("masonry_support_optimizer", {"margin_warning_pct": 80})
    s = load_search_settings()
    assert s.top_alternatives == 3 and s.margin_warning_pct == 80
    assert load_search_settings({"top_alternatives": 7}).top_alternatives == 7

    root = tmp_path / "MasonrySupportToolbox"
    (root / "settings.json").write_text(
        json.dumps({"masonry_support_optimizer": {"top_alternatives": -1}}), encoding="utf-8"
    )
    assert load_search_settings().top_alternatives == 10
