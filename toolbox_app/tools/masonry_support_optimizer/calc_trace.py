from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .constants import DEFAULT_UNITS_SYSTEM
from .paths import compute_input_hash


@dataclass(frozen=True)
class TraceMeta:
    tool_id: str
    tool_version: str
    report_version: str
    timestamp: str
    units_system: str
    input_hash: str
    code_basis: Optional[str] = None


@dataclass(frozen=True)
class TraceInput:
    id: str
    label: str
    value: Any
    units: str
    source: str  # user/default
    notes: str = ""


@dataclass(frozen=True)
class Assumption:
    id: str
    text: str


@dataclass(frozen=True)
class CalcVar:
    symbol: str
    description: str
    value: Any
    units: str
    source: str


@dataclass(frozen=True)
class CalcResult:
    value: float
    units: str


@dataclass(frozen=True)
class Rounding:
    rule: str  # "decimals" | "sigfigs"
    decimals_or_sigfigs: int


@dataclass(frozen=True)
class Reference:
    type: str  # "code" | "table" | "derived"
    ref: str


@dataclass(frozen=True)
class CheckResult:
    label: str
    demand: float
    capacity: float
    ratio: float
    pass_fail: str


@dataclass
class CalcStep:
    id: str
    section: str
    title: str
    output_symbol: str
    output_description: str
    equation_latex: str
    substitution_latex: str
    variables: List[CalcVar]
    result_unrounded: CalcResult
    rounding: Rounding
    result_rounded: CalcResult
    references: List[Reference]
    checks: List[CheckResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class CalcTrace:
    """Calculation record of one batch run. Every export is rendered from this object."""

    meta: TraceMeta
    inputs: List[TraceInput] = field(default_factory=list)
    assumptions: List[Assumption] = field(default_factory=list)
    steps: List[CalcStep] = field(default_factory=list)
    tables: Dict[str, Any] = field(default_factory=dict)
    summary: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def new(
        cls,
        *,
        tool_id: str,
        tool_version: str,
        inputs: Dict[str, Any],
        units_system: str = DEFAULT_UNITS_SYSTEM,
        report_version: str = "1.0",
        input_hash: Optional[str] = None,
        code_basis: Optional[str] = None,
        defaults: Optional[Dict[str, Any]] = None,
    ) -> "CalcTrace":
        """Start a trace, listing inputs in key order.

        When defaults are given, inputs equal to their default are tagged "default", others "user".
        """
        meta = TraceMeta(
            tool_id=str(tool_id),
            tool_version=str(tool_version),
            report_version=str(report_version),
            timestamp=datetime.now().isoformat(timespec="seconds"),
            units_system=str(units_system),
            input_hash=str(input_hash or compute_input_hash(inputs)),
            code_basis=code_basis,
        )
        dflt = defaults or {}
        trace_inputs = [
            TraceInput(
                id=str(k),
                label=k.replace("_", " "),
                value=inputs[k],
                units=_infer_units(k),
                source="default" if k in dflt and dflt[k] == inputs[k] else "user",
            )
            for k in sorted(inputs)
        ]
        return cls(meta=meta, inputs=trace_inputs)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_UNITS_BY_KEY: Dict[str, str] = {
    "characteristic_load": "kN/m",
    "masonry_density": "kg/m3",
    "masonry_height": "m",
    "concrete_grade": "MPa",
    "load_position": "-",
}


def _infer_units(key: str) -> str:
    if key in _UNITS_BY_KEY:
        return _UNITS_BY_KEY[key]
    if key.endswith(("_level", "_width", "_thickness", "_edge", "_height", "_depth", "_position")):
        return "mm"
    return "-"


def _format_value_units(value: Any, units: str) -> str:
    shown = f"{value:g}" if isinstance(value, (int, float)) else str(value)
    return f"{shown}\\,\\mathrm{{{units}}}" if units and units != "-" else shown


def _apply_rounding(x: float, rounding: Rounding) -> float:
    if not math.isfinite(x):
        return x
    if rounding.rule == "decimals":
        return round(float(x), int(rounding.decimals_or_sigfigs))
    if rounding.rule == "sigfigs":
        if x == 0:
            return 0.0
        sig = int(rounding.decimals_or_sigfigs)
        return round(float(x), sig - 1 - int(math.floor(math.log10(abs(float(x))))))
    raise ValueError(f"Unsupported rounding rule: {rounding.rule}")


def compute_step(
    trace: CalcTrace,
    *,
    id: str,
    section: str,
    title: str,
    output_symbol: str,
    output_description: str,
    equation_latex: str,
    variables: List[Dict[str, Any]],
    compute_fn: Callable[[], float],
    units: str,
    rounding_rule: Dict[str, Any],
    references: List[Dict[str, Any]],
    checks_builder: Optional[Callable[[float], List[Dict[str, Any]]]] = None,
) -> float:
    """Evaluate one step, append it to the trace and return the rounded value.

    Raises ValueError for an incomplete step (missing id/section/title, variable fields or
    reference fields).
    """
    if not id or not section or not title:
        raise ValueError("compute_step requires non-empty id/section/title.")

    var_objs: List[CalcVar] = []
    for v in variables:
        missing = [k for k in ("symbol", "description", "value", "units", "source") if k not in v]
        if missing:
            raise ValueError(f"Variable missing {missing} in step {id}.")
        var_objs.append(
            CalcVar(
                symbol=str(v["symbol"]),
                description=str(v["description"]),
                value=v["value"],
                units=str(v["units"]),
                source=str(v["source"]),
            )
        )

    ref_objs: List[Reference] = []
    for r in references:
        if "type" not in r or "ref" not in r:
            raise ValueError(f"Reference missing type/ref in step {id}.")
        ref_objs.append(Reference(type=str(r["type"]), ref=str(r["ref"])))

    unrounded = float(compute_fn())
    rounding = Rounding(rule=str(rounding_rule["rule"]), decimals_or_sigfigs=int(rounding_rule["decimals_or_sigfigs"]))
    rounded = _apply_rounding(unrounded, rounding)

    substitution = equation_latex
    for v in var_objs:
        substitution = substitution.replace(v.symbol, _format_value_units(v.value, v.units))

    checks = [
        CheckResult(
            label=str(c["label"]),
            demand=float(c["demand"]),
            capacity=float(c["capacity"]),
            ratio=float(c["ratio"]),
            pass_fail=str(c["pass_fail"]),
        )
        for c in (checks_builder(unrounded) if checks_builder else [])
    ]

    trace.steps.append(
        CalcStep(
            id=id,
            section=section,
            title=title,
            output_symbol=output_symbol,
            output_description=output_description,
            equation_latex=equation_latex,
            substitution_latex=substitution,
            variables=var_objs,
            result_unrounded=CalcResult(value=unrounded, units=units),
            rounding=rounding,
            result_rounded=CalcResult(value=rounded, units=units),
            references=ref_objs,
            checks=checks,
            warnings=[c.label for c in checks if c.pass_fail != "PASS"],
        )
    )
    return rounded
