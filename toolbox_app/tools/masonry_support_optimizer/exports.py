from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from .calc_trace import CalcTrace
from .report_renderer import render_report_html

ALTERNATIVE_COLUMNS = [
    "rank",
    "channel_type",
    "steel_fixing",
    "bracket_type",
    "angle_orientation",
    "bracket_centres",
    "bracket_thickness",
    "angle_thickness",
    "vertical_leg",
    "bolt_diameter",
    "fixing_position",
    "bracket_height",
    "weight_kg_m",
    "weight_difference_pct",
    "governing_check",
    "governing_utilization_pct",
    "key_differences",
]


def _autosize(ws) -> None:
    for col in ws.columns:
        width = max((len(str(c.value)) for c in col if c.value is not None), default=0)
        ws.column_dimensions[get_column_letter(col[0].column)].width = min(80, max(10, width + 2))


def _cell(v: Any) -> Any:
    if isinstance(v, (dict, list, tuple)):
        return json.dumps(v, ensure_ascii=False, default=str)
    return v


def export_html(trace: CalcTrace, out_dir: Path) -> Path:
    p = out_dir / "report.html"
    p.write_text(render_report_html(trace), encoding="utf-8")
    return p


def export_pdf(trace: CalcTrace, out_dir: Path) -> Path:
    """Short PDF: selected design, alerts and check outcomes. Full working is in report.html."""
    p = out_dir / "report.pdf"
    c = canvas.Canvas(str(p), pagesize=A4)
    w, h = A4
    margin = 50
    y = h - margin

    def line(text: str, font: str = "Helvetica", size: int = 9, step: int = 12, indent: int = 0) -> None:
        nonlocal y
        if y < margin:
            c.showPage()
            y = h - margin
        c.setFont(font, size)
        c.drawString(margin + indent, y, text[:120])
        y -= step

    line("Masonry Support Bracket - Design Summary", "Helvetica-Bold", 14, 22)
    line(f"Tool: {trace.meta.tool_id} v{trace.meta.tool_version}", size=10, step=14)
    line(f"Input hash: {trace.meta.input_hash}", size=10, step=14)
    line(f"Generated: {trace.meta.timestamp}", size=10, step=20)

    alerts = trace.summary.get("alerts") or []
    if alerts:
        line("Alerts:", "Helvetica-Bold", 10, 14)
        for a in alerts:
            line(f"- {a}", indent=12)
        y -= 6

    line("Selected design:", "Helvetica-Bold", 10, 14)
    for k, v in trace.summary.items():
        if k != "alerts":
            line(f"{k}: {v}", indent=12)
    y -= 6

    line("Checks:", "Helvetica-Bold", 10, 14)
    for s in trace.steps:
        for chk in s.checks:
            line(f"[{chk.pass_fail}] {s.id} {chk.label}: ratio {chk.ratio:.3f}", indent=12)

    c.showPage()
    c.save()
    return p


def export_excel(trace: CalcTrace, out_dir: Path, results: Dict[str, Any]) -> Path:
    wb = Workbook()

    ws = wb.active
    ws.title = "Inputs"
    ws.append(["id", "label", "value", "units", "source"])
    for i in trace.inputs:
        ws.append([i.id, i.label, _cell(i.value), i.units, i.source])
    _autosize(ws)

    ws = wb.create_sheet("Assumptions")
    ws.append(["id", "text"])
    for a in trace.assumptions:
        ws.append([a.id, a.text])
    _autosize(ws)

    ws = wb.create_sheet("Calcs")
    ws.append(["id", "section", "title", "equation", "substitution", "result", "units", "checks"])
    for s in trace.steps:
        checks = "; ".join(f"{c.label}: {c.pass_fail}" for c in s.checks)
        ws.append(
            [s.id, s.section, s.title, s.equation_latex, s.substitution_latex, s.result_rounded.value, s.result_rounded.units, checks]
        )
    _autosize(ws)

    ws = wb.create_sheet("Alternatives")
    ws.append(ALTERNATIVE_COLUMNS)
    for row in trace.tables.get("alternatives") or []:
        ws.append([_cell(row.get(col)) for col in ALTERNATIVE_COLUMNS])
    _autosize(ws)

    ws = wb.create_sheet("Results")
    ws.append(["key", "value"])
    for k, v in results.items():
        ws.append([k, _cell(v)])
    _autosize(ws)

    p = out_dir / "results.xlsx"
    wb.save(p)
    return p


def export_alternatives_csv(rows: List[Dict[str, Any]], out_dir: Path) -> Path:
    p = out_dir / "alternatives.csv"
    df = pd.DataFrame(rows, columns=ALTERNATIVE_COLUMNS)
    if not df.empty:
        df["key_differences"] = df["key_differences"].map(lambda d: "; ".join(d) if isinstance(d, (list, tuple)) else d)
    df.to_csv(p, index=False)
    return p


def export_json(trace: CalcTrace, out_dir: Path, results: Dict[str, Any]) -> Dict[str, Path]:
    p1 = out_dir / "calc_trace.json"
    p1.write_text(json.dumps(trace.to_dict(), indent=2, ensure_ascii=True, default=str), encoding="utf-8")

    p2 = out_dir / "results.json"
    p2.write_text(json.dumps(results, indent=2, ensure_ascii=True, default=str), encoding="utf-8")
    return {"calc_trace": p1, "results": p2}


def export_all(trace: CalcTrace, out_dir: Path, results: Dict[str, Any]) -> Dict[str, Path]:
    outputs: Dict[str, Path] = {}
    outputs["html"] = export_html(trace, out_dir)
    outputs["pdf"] = export_pdf(trace, out_dir)
    outputs.update(export_json(trace, out_dir, results))
    outputs["excel"] = export_excel(trace, out_dir, results)
    outputs["alternatives_csv"] = export_alternatives_csv(trace.tables.get("alternatives") or [], out_dir)
    outputs["log"] = out_dir / "run.log"
    return outputs
