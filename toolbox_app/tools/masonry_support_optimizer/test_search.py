from __future__ import annotations

import math

import pytest

from .alerts import NO_COMPLIANT_DESIGN_ALERT, attach_alerts, generate_alerts
from .channel_catalog import get_product_characteristics, is_high_margin_channel
from .combinations import count_combinations
from .config import SearchSettings
from .models import DesignInputs
from .solver import run_search


def test_default_search_finds_lightest_compliant_design() -> None:
    inputs = DesignInputs()
    r = run_search(inputs)
    calc = r.calculated

    assert calc.all_checks_pass
    assert calc.complete and not calc.cancelled
    assert calc.candidates_evaluated == calc.total_combinations == count_combinations(inputs)
    assert r.chosen is not None and r.genetic == r.chosen.genetic
    assert calc.optimal_weight == r.chosen.total_weight
    assert calc.candidates_passing == len(r.alternatives) + 1

    weights = [a.weight for a in r.alternatives]
    assert weights == sorted(weights)
    assert all(w >= calc.optimal_weight for w in weights)
    assert all(a.weight_difference_pct >= 0.0 for a in r.alternatives)


def test_equal_weights_keep_the_earliest_candidate() -> None:
    r = run_search(DesignInputs())
    ties = [a for a in r.alternatives if a.weight == r.chosen.total_weight]
    assert all(a.candidate.index > r.chosen.index for a in ties)
    # channel is not part of the weight, so the other channels tie with the chosen geometry
    assert r.genetic.channel_type == "CPRO38"
    assert any("channel (vs CPRO38)" in d for a in ties for d in a.key_differences)


def test_search_is_deterministic() -> None:
    a = run_search(DesignInputs())
    b = run_search(DesignInputs())
    assert a.genetic == b.genetic
    assert [x.candidate.genetic for x in a.alternatives] == [x.candidate.genetic for x in b.alternatives]


def test_channel_restriction() -> None:
    r = run_search(DesignInputs(allowed_channel_types=["CPRO50"]))
    assert r.genetic.channel_type == "CPRO50"
    assert {a.candidate.genetic.channel_type for a in r.alternatives} == {"CPRO50"}
    assert r.calculated.all_checks_pass and r.chosen.all_checks_pass


def test_unknown_channel_filter_searches_full_catalog() -> None:
    full = run_search(DesignInputs())
    unknown = run_search(DesignInputs(allowed_channel_types=["NOT-A-CHANNEL"]))
    assert unknown.genetic == full.genetic
    assert unknown.calculated.total_combinations == full.calculated.total_combinations


def test_max_generations_caps_the_search() -> None:
    r = run_search(DesignInputs(), max_generations=10)
    assert r.calculated.candidates_evaluated == 10
    assert r.calculated.total_combinations == 10
    assert not r.calculated.complete
    assert not r.calculated.cancelled


def test_cancel_before_first_candidate() -> None:
    r = run_search(DesignInputs(), should_cancel=lambda: True)
    assert r.calculated.cancelled and not r.calculated.complete
    assert r.calculated.candidates_evaluated == 0
    assert r.chosen is None and r.genetic is None
    assert not r.calculated.all_checks_pass
    assert math.isnan(r.calculated.optimal_weight)

    alerts = generate_alerts(r, DesignInputs())
    assert alerts == ("No design candidates could be generated for these inputs.",)


def test_cancel_part_way_keeps_best_so_far() -> None:
    calls = {"n": 0}

    def stop_after_200() -> bool:
        calls["n"] += 1
        return calls["n"] > 200

    r = run_search(DesignInputs(), should_cancel=stop_after_200)
    assert r.calculated.cancelled
    assert r.calculated.candidates_evaluated == 200
    assert r.chosen is not None


def test_progress_reports_final_count() -> None:
    seen = []
    r = run_search(DesignInputs(), on_progress=lambda done, total: seen.append((done, total)), progress_interval=250)
    assert seen
    assert seen[-1] == (r.calculated.candidates_evaluated, r.calculated.total_combinations)
    assert all(done % 250 == 0 for done, _ in seen[:-1])


def test_no_compliant_design_returns_closest_for_review() -> None:
    inputs = DesignInputs(characteristic_load=100.0)
    r = run_search(inputs)
    assert not r.calculated.all_checks_pass
    assert r.calculated.candidates_passing == 0
    assert r.chosen is not None
    assert r.calculated.failed_checks
    assert r.alternatives == ()
    assert r.alerts[-1] == NO_COMPLIANT_DESIGN_ALERT


def test_high_margin_channel_alerts() -> None:
    inputs = DesignInputs(allowed_channel_types=["R-HPTIII-70", "R-HPTIII-90"])
    r = run_search(inputs)
    channel = r.genetic.channel_type
    assert is_high_margin_channel(channel)

    pc = get_product_characteristics(channel)
    assert r.alerts[0] == pc.utilization_warning
    assert list(r.alerts[1:5]) == list(pc.notes)
    assert r.alerts[5] == f"Selected channel: {channel} requires engineering review"


def test_high_load_suggests_high_margin_alternatives() -> None:
    inputs = DesignInputs(characteristic_load=6.0)
    r = run_search(inputs)
    assert not is_high_margin_channel(r.genetic.channel_type)
    n = sum(1 for a in r.alternatives if is_high_margin_channel(a.candidate.genetic.channel_type))
    assert n > 0
    assert f"{n} R-HPTIII alternative(s) available - consider for high-load applications" in r.alerts

    quiet = run_search(inputs, settings=SearchSettings(high_load_threshold_kn_m=10.0))
    assert not any("R-HPTIII alternative" in a for a in quiet.alerts)


def test_margin_warning_threshold() -> None:
    inputs = DesignInputs()
    r = run_search(inputs)
    alerts = generate_alerts(r, inputs, SearchSettings(margin_warning_pct=1.0))
    assert any(a.startswith("Low capacity margin:") for a in alerts)


def test_high_margin_only_search_carries_utilization_alert() -> None:
    inputs = DesignInputs(allowed_channel_types=["R-HPTIII-70"])
    r = run_search(inputs)
    assert r.genetic.channel_type == "R-HPTIII-70"
    assert any("200%" in a for a in r.alerts)
    assert r.alerts == generate_alerts(r, inputs)


def test_attach_alerts_returns_new_result() -> None:
    inputs = DesignInputs(allowed_channel_types=["R-HPTIII-90"])
    r = run_search(inputs)
    strict = SearchSettings(margin_warning_pct=1.0)
    rescored = attach_alerts(r, inputs, strict)
    assert rescored is not r
    assert r.alerts == generate_alerts(r, inputs)
    assert rescored.alerts == generate_alerts(r, inputs, strict)
    assert rescored.genetic == r.genetic


def test_settings_cap_the_search() -> None:
    r = run_search(DesignInputs(), settings=SearchSettings(max_generations=5))
    assert r.calculated.candidates_evaluated == 5
    assert run_search(DesignInputs(), settings=SearchSettings(max_generations=5), max_generations=7).calculated.candidates_evaluated == 7


def test_chosen_design_passes_serviceability_checks() -> None:
    r = run_search(DesignInputs())
    vo = r.chosen.verification
    assert list(vo.checks()) == [
        "fixing",
        "combined_tension_shear",
        "angle_moment",
        "angle_shear",
        "angle_deflection",
        "angle_bracket_connection",
        "packers",
        "dropping_below_slab",
        "total_deflection",
        "bracket_design",
    ]
    assert vo.angle_deflection.passes and vo.angle_deflection.total_deflection <= 1.5
    assert vo.total_deflection.passes and vo.total_deflection.total_deflection <= 2.0
    # default support level hangs 25 mm below the slab soffit
    assert r.chosen.geometry.drop_below_slab == 25.0
    assert vo.dropping_below_slab.D_heel_2 > 0.0
    assert vo.total_deflection.vertical_deflection == pytest.approx(
        vo.angle_deflection.total_deflection + vo.dropping_below_slab.D_heel_2
    )
    assert vo.packers.beta_p < 1.0
    assert all(a.candidate.verification.total_deflection.passes for a in r.alternatives)


def test_steel_frame_search() -> None:
    inputs = DesignInputs(
        frame_fixing_type="steel",
        steel_section_type="RHS",
        steel_section_size="200x100",
        steel_bolt_size="M12",
    )
    r = run_search(inputs)
    assert r.genetic.channel_type is None
    assert r.genetic.steel_bolt_size == "M12"
    assert r.genetic.steel_fixing_method == "BLIND_BOLT"
    assert r.chosen.verification.steel_fixing is not None
    assert r.chosen.verification.fixing is None
