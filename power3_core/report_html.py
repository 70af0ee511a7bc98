from __future__ import annotations
from html import escape
from typing import Dict, Any, List, Optional

from .profiles import Profile

def _num(val: Any, fmt: str = "{:.2f}") -> str:
    try:
        return fmt.format(float(val))
    except (TypeError, ValueError):
        return "-"

def _row_domain(d: Dict[str, Any], self_pct: Any) -> str:
    return (f"<tr><td>{escape(str(d.get('category')))}</td><td>{d.get('rank', '-')}</td>"
            f"<td>{_num(d.get('average'))}</td><td>{_num(self_pct, '{:.0f}%')}</td></tr>")

def _row_component(c: Dict[str, Any]) -> str:
    return (f"<tr><td>{escape(str(c.get('domain')))}</td><td>{escape(str(c.get('component')))}</td>"
            f"<td>{escape(str(c.get('tag')))}</td><td>{_num(c.get('average'))}</td></tr>")

def _bullets(title: str, items: List[str]) -> str:
    if not items:
        return ""
    lis = "".join(f"<li>{escape(i)}</li>" for i in items)
    return f"<h4>{title}</h4><ul>{lis}</ul>"

def render_report_html(assessment: Dict[str, Any], profile: Optional[Profile] = None) -> str:
    user = assessment.get("user") or {}
    results = assessment.get("results") or {}
    self_sa = results.get("self_assessment") or {
        "vision": assessment.get("vision_self"),
        "people": assessment.get("people_self"),
        "execution": assessment.get("execution_self"),
    }
    cats: List[Dict[str, Any]] = results.get("category_scores") or [
        {"category": "Vision", "average": assessment.get("vision_score")},
        {"category": "People", "average": assessment.get("people_score")},
        {"category": "Execution", "average": assessment.get("execution_score")},
    ]
    rows = "\n".join(_row_domain(c, self_sa.get(str(c.get("category", "")).lower())) for c in cats)
    comps = results.get("component_scores") or []
    rows2 = "\n".join(_row_component(c) for c in comps)
    ei = results.get("ei_score") or {}
    traits = results.get("dominant_traits") or []

    name = escape(f"{user.get('first_name', '')} {user.get('last_name', '')}".strip())
    code = escape(str(assessment.get("personality_type") or "Processing..."))

    profile_html = ""
    if profile:
        profile_html = (
            f"<h3>{escape(profile.title)}</h3>"
            f"<p><b>Style:</b> {escape(profile.style_name)} · "
            f"<b>Dominant:</b> {escape(profile.dominant_orientation)} · "
            f"<b>Supporting:</b> {escape(profile.supporting_orientation)} · "
            f"<b>Blind spot:</b> {escape(profile.blind_spot)}</p>"
            f"<p>{escape(profile.description)}</p>"
            + _bullets("Strengths", profile.strengths)
            + _bullets("Development areas", profile.development_areas)
            + _bullets("Potential pitfalls", profile.pitfalls)
        )

    components_html = ""
    if comps:
        components_html = f"""
  <h3>Component breakdown (1–7)</h3>
  <table border='1' cellpadding='6' cellspacing='0'>
    <thead><tr><th>Domain</th><th>Component</th><th>Tag</th><th>Average</th></tr></thead>
    <tbody>{rows2}</tbody>
  </table>"""

    ei_html = ""
    if ei:
        ei_html = (
            f"<p><b>Orientation:</b> {escape(str(ei.get('orientation', '')))} "
            f"(E {_num(ei.get('extraversion_average'))} / I {_num(ei.get('introversion_average'))})</p>"
        )
    else:
        ei_html = (
            f"<p><b>Extraversion:</b> {_num(assessment.get('extraversion_score'))} · "
            f"<b>Introversion:</b> {_num(assessment.get('introversion_score'))}</p>"
        )

    traits_html = _bullets("Dominant traits", [str(t) for t in traits])

    return f"""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8"/>
<title>POWER3 Leadership Report</title>
<style>
 body{{font-family:system-ui,-apple-system,Segoe UI,Roboto,Ubuntu,'Helvetica Neue',Arial}}
 .wrap{{max-width:960px;margin:40px auto;padding:0 16px}}
 h1{{margin:0 0 16px}}
 .code{{font-size:1.6rem;font-weight:700;margin:8px 0 16px}}
 table{{border-collapse:collapse;width:100%}}
 th,td{{text-align:left}}
 @media print{{.wrap{{margin:0}}}}
</style>
</head>
<body>
<div class="wrap">
  <h1>POWER3 Leadership Report{(' - ' + name) if name else ''}</h1>
  <div class="code">{code}</div>

  <table border='1' cellpadding='6' cellspacing='0'>
    <thead><tr><th>Domain</th><th>Rank</th><th>Average</th><th>Self-report</th></tr></thead>
    <tbody>{rows}</tbody>
  </table>
  {ei_html}
  {components_html}
  {traits_html}
  {profile_html}
</div>
</body>
</html>"""

def export_report_html(assessment: Dict[str, Any], path: str, profile: Optional[Profile] = None) -> str:
    html = render_report_html(assessment, profile)
    with open(path, "w", encoding="utf-8") as f:
        f.write(html)
    return path
