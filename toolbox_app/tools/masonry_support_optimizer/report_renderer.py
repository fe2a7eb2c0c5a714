from __future__ import annotations

import html
from typing import Any, Dict, List

from .calc_trace import CalcTrace


def _h(s: Any) -> str:
    return html.escape(str(s))


_CSS = """
@page { size: A4; margin: 15mm; }
body { font-family: Arial, Helvetica, sans-serif; font-size: 10pt; color: #111; }
h1 { font-size: 16pt; margin: 0 0 6px 0; }
h2 { font-size: 12.5pt; margin: 16px 0 6px 0; border-bottom: 1px solid #ccc; padding-bottom: 2px; }
h3 { font-size: 11pt; margin: 12px 0 4px 0; }
.meta { font-size: 9pt; color: #333; }
.box { border: 1px solid #999; padding: 8px; margin: 6px 0; }
.alert { border-left: 4px solid #d80; background: #fff7e6; padding: 6px 8px; margin: 4px 0; }
.eq { font-family: "Courier New", monospace; background: #f7f7f7; padding: 6px; white-space: pre-wrap; }
table { border-collapse: collapse; width: 100%; margin: 6px 0 10px 0; }
th, td { border: 1px solid #bbb; padding: 4px 6px; vertical-align: top; }
th { background: #f1f1f1; text-align: left; }
.pass { color: #0a6; font-weight: bold; }
.fail { color: #b00; font-weight: bold; }
"""


def _kv_table(rows: Dict[str, Any]) -> str:
    out = ["<table><tr><th>Item</th><th>Value</th></tr>"]
    for k, v in rows.items():
        out.append(f"<tr><td>{_h(k.replace('_', ' '))}</td><td>{_h(v)}</td></tr>")
    out.append("</table>")
    return "".join(out)


def _alternatives_table(rows: List[Dict[str, Any]]) -> str:
    out = [
        "<table><tr><th>#</th><th>Channel</th><th>Centres (mm)</th><th>Bracket t (mm)</th>"
        "<th>Angle t (mm)</th><th>Weight (kg/m)</th><th>+%</th><th>Key differences</th></tr>"
    ]
    for i, r in enumerate(rows, start=1):
        out.append(
            f"<tr><td>{i}</td><td>{_h(r.get('channel_type') or r.get('steel_fixing') or '-')}</td>"
            f"<td>{_h(r['bracket_centres'])}</td><td>{_h(r['bracket_thickness'])}</td>"
            f"<td>{_h(r['angle_thickness'])}</td><td>{_h(round(r['weight_kg_m'], 3))}</td>"
            f"<td>{_h(round(r['weight_difference_pct'], 1))}</td><td>{_h(r['key_differences'])}</td></tr>"
        )
    out.append("</table>")
    return "".join(out)


def render_report_html(trace: CalcTrace) -> str:
    meta = trace.meta
    parts: List[str] = []
    parts.append("<!doctype html><html><head><meta charset='utf-8'>")
    parts.append(f"<title>Masonry Support Design - {_h(meta.input_hash)}</title>")
    parts.append(f"<style>{_CSS}</style></head><body>")

    parts.append("<h1>Masonry Support Bracket - Design Package</h1>")
    parts.append(
        "<div class='meta'>"
        f"<div><b>Tool:</b> {_h(meta.tool_id)} v{_h(meta.tool_version)} (report {_h(meta.report_version)})</div>"
        f"<div><b>Generated:</b> {_h(meta.timestamp)}</div>"
        f"<div><b>Units:</b> {_h(meta.units_system)}</div>"
        f"<div><b>Input hash:</b> {_h(meta.input_hash)}</div>"
        + (f"<div><b>Basis:</b> {_h(meta.code_basis)}</div>" if meta.code_basis else "")
        + "</div>"
    )

    alerts = trace.summary.get("alerts") or []
    if alerts:
        parts.append("<h2>Alerts</h2>")
        for a in alerts:
            parts.append(f"<div class='alert'>{_h(a)}</div>")

    parts.append("<h2>Selected Design</h2>")
    design = {k: v for k, v in trace.summary.items() if k != "alerts"}
    parts.append(_kv_table(design) if design else "<div class='box'>No design was generated.</div>")

    parts.append("<h2>Inputs</h2>")
    parts.append("<table><tr><th>ID</th><th>Label</th><th>Value</th><th>Units</th><th>Source</th></tr>")
    for i in trace.inputs:
        parts.append(
            f"<tr><td>{_h(i.id)}</td><td>{_h(i.label)}</td><td>{_h(i.value)}</td><td>{_h(i.units)}</td><td>{_h(i.source)}</td></tr>"
        )
    parts.append("</table>")

    parts.append("<h2>Assumptions &amp; Limitations</h2>")
    if trace.assumptions:
        parts.append("<ul>" + "".join(f"<li><b>{_h(a.id)}</b>: {_h(a.text)}</li>" for a in trace.assumptions) + "</ul>")
    else:
        parts.append("<div class='box'>None.</div>")

    parts.append("<h2>Calculations</h2>")
    section = None
    for s in trace.steps:
        if s.section != section:
            section = s.section
            parts.append(f"<h3>{_h(section)}</h3>")
        parts.append("<div class='box'>")
        parts.append(f"<div><b>{_h(s.id)}: {_h(s.title)}</b> ({_h(s.output_description)})</div>")
        parts.append("<div class='eq'>" + _h(s.equation_latex) + "\n" + _h(s.substitution_latex) + "</div>")
        parts.append("<table><tr><th>Symbol</th><th>Description</th><th>Value</th><th>Units</th><th>Source</th></tr>")
        for v in s.variables:
            parts.append(
                f"<tr><td>{_h(v.symbol)}</td><td>{_h(v.description)}</td><td>{_h(v.value)}</td><td>{_h(v.units)}</td><td>{_h(v.source)}</td></tr>"
            )
        parts.append("</table>")
        parts.append(
            f"<div><b>{_h(s.output_symbol)} =</b> {_h(s.result_rounded.value)} {_h(s.result_rounded.units)}"
            f" <span class='meta'>(unrounded {_h(s.result_unrounded.value)})</span></div>"
        )
        if s.checks:
            parts.append("<table><tr><th>Check</th><th>Demand</th><th>Capacity</th><th>Ratio</th><th>Status</th></tr>")
            for c in s.checks:
                cls = "pass" if c.pass_fail.upper() == "PASS" else "fail"
                parts.append(
                    f"<tr><td>{_h(c.label)}</td><td>{_h(round(c.demand, 4))}</td><td>{_h(round(c.capacity, 4))}</td>"
                    f"<td>{_h(round(c.ratio, 3))}</td><td class='{cls}'>{_h(c.pass_fail)}</td></tr>"
                )
            parts.append("</table>")
        parts.append("</div>")

    alts = trace.tables.get("alternatives") or []
    parts.append("<h2>Alternatives</h2>")
    parts.append(_alternatives_table(alts) if alts else "<div class='box'>No compliant alternatives.</div>")

    parts.append("</body></html>")
    return "".join(parts)
