from __future__ import annotations

import json
from pathlib import Path

import pytest

from .tool import TOOL


@pytest.fixture(autouse=True)
def _user_data_in_tmp(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))


def _assert_exists(p: Path) -> None:
    assert p.exists(), f"Missing: {p}"


def _check_outputs(run_dir: Path) -> None:
    _assert_exists(run_dir / "report.html")
    _assert_exists(run_dir / "report.pdf")
    _assert_exists(run_dir / "calc_trace.json")
    _assert_exists(run_dir / "results.json")
    _assert_exists(run_dir / "results.xlsx")
    _assert_exists(run_dir / "alternatives.csv")
    _assert_exists(run_dir / "run.log")


def test_smoke_case_1():
    inputs = TOOL.default_inputs()
    res = TOOL.run_batch(inputs)
    assert res["ok"] is True
    assert res["all_checks_pass"] is True
    run_dir = Path(res["run_dir"])
    _check_outputs(run_dir)

    results = json.loads((run_dir / "results.json").read_text(encoding="utf-8"))
    assert results["genetic"]["channel_type"] == "CPRO38"
    assert len(results["alternatives"]) <= 10

    trace = json.loads((run_dir / "calc_trace.json").read_text(encoding="utf-8"))
    assert trace["steps"]
    assert "Starting masonry support search" in (run_dir / "run.log").read_text(encoding="utf-8")


def test_smoke_case_2():
    inputs = TOOL.default_inputs()
    inputs.update(
        {
            "support_level": -50,
            "characteristic_load": 4.5,
            "allowed_channel_types": ["R-HPTIII-90"],
            "enable_fixing_optimization": True,
        }
    )
    res = TOOL.run_batch(inputs)
    assert res["ok"] is True
    assert any("requires engineering review" in a for a in res["alerts"])
    _check_outputs(Path(res["run_dir"]))


def test_smoke_steel_frame():
    inputs = TOOL.default_inputs()
    inputs.update(
        {
            "frame_fixing_type": "steel",
            "steel_section_type": "I-BEAM",
            "steel_section_size": "254x146",
            "steel_fixing_method": "both",
            "steel_bolt_size": "M12",
        }
    )
    res = TOOL.run_batch(inputs)
    assert res["ok"] is True
    assert res["genetic"]["channel_type"] is None
    _check_outputs(Path(res["run_dir"]))


def test_invalid_inputs_do_not_raise():
    inputs = TOOL.default_inputs()
    inputs["fixing_position"] = 400
    res = TOOL.run_batch(inputs)
    assert res["ok"] is False
    assert res["run_dir"] is None
    assert "fixing_position" in res["error"]


def test_headless_entry(tmp_path, capsys):
    from loguru import logger

    from toolbox_app.run import main

    assert main(["--list"]) == 0
    assert "masonry_support_optimizer" in capsys.readouterr().out

    p = tmp_path / "design.json"
    p.write_text(json.dumps({"allowed_channel_types": ["CPRO50"]}), encoding="utf-8")
    assert main(["masonry_support_optimizer", "--inputs", str(p)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["genetic"]["channel_type"] == "CPRO50"
    assert main(["no_such_tool"]) == 2
    # drop the app sinks bound to the captured stderr
    logger.remove()


def test_headless_settings_overrides(tmp_path, capsys):
    from loguru import logger

    from toolbox_app.core.settings import load_settings
    from toolbox_app.run import main

    p = tmp_path / "design.json"
    p.write_text(json.dumps({"allowed_channel_types": ["CPRO38"]}), encoding="utf-8")
    args = ["masonry_support_optimizer", "--inputs", str(p), "--set", "top_alternatives=2"]

    assert main(args) == 0
    out = json.loads(capsys.readouterr().out)
    assert len(out["alternatives"]) == 2
    assert out["alternatives_count"] > 2
    assert "masonry_support_optimizer" not in load_settings()

    assert main(args + ["--save-settings"]) == 0
    capsys.readouterr()
    assert load_settings()["masonry_support_optimizer"] == {"top_alternatives": 2}

    # an invalid setting fails the run, not the process
    assert main(["masonry_support_optimizer", "--set", "top_alternatives=-1"]) == 1
    assert json.loads(capsys.readouterr().out)["ok"] is False
    assert main(["masonry_support_optimizer", "--set", "top_alternatives"]) == 2
    logger.remove()
