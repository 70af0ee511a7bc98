"""CSV and plain-text exports of stored assessments."""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional
import csv
import io

from .catalog import Catalog
from .links import parse_ts
from .profiles import Profile, get_profile

_SUMMARY_FIELDS: tuple[str, ...] = (
    "Assessment ID",
    "First Name",
    "Last Name",
    "Age",
    "Gender",
    "Leadership Experience (Years)",
    "Personality Type",
    "Vision Score",
    "People Score",
    "Execution Score",
    "Extraversion Score",
    "Introversion Score",
    "Vision Self-Report (%)",
    "People Self-Report (%)",
    "Execution Self-Report (%)",
    "Profile Title",
    "Style Name",
    "Dominant Orientation",
    "Supporting Orientation",
    "Blind Spot",
)

_SCORE_KEYS: tuple[str, ...] = (
    "vision_score",
    "people_score",
    "execution_score",
    "extraversion_score",
    "introversion_score",
    "vision_self",
    "people_self",
    "execution_self",
)

ProfileLookup = Callable[[Optional[str]], Optional[Profile]]


def _fmt2(val: Any) -> str:
    try:
        return f"{float(val):.2f}"
    except (TypeError, ValueError):
        return ""


def _text(val: Any) -> str:
    return "" if val is None else str(val)


def _date_time(assessment: Dict[str, Any]) -> tuple[str, str]:
    try:
        ts = parse_ts(assessment.get("created_at"))
    except ValueError:
        ts = None
    if ts is None:
        return "", ""
    return ts.date().isoformat(), ts.strftime("%H:%M:%S")


def _base_row(assessment: Dict[str, Any], profile: Optional[Profile]) -> List[str]:
    user = assessment.get("user") or {}
    row = [
        _text(assessment.get("id")),
        _text(user.get("first_name")),
        _text(user.get("last_name")),
        _text(user.get("age")),
        _text(user.get("gender")),
        _text(user.get("leadership_experience")),
        _text(assessment.get("personality_type")),
    ]
    row.extend(_fmt2(assessment.get(k)) for k in _SCORE_KEYS)
    row.extend([
        profile.title if profile else "",
        profile.style_name if profile else "",
        profile.dominant_orientation if profile else "",
        profile.supporting_orientation if profile else "",
        profile.blind_spot if profile else "",
    ])
    return row


def _lists(profile: Optional[Profile]) -> List[str]:
    if not profile:
        return ["", "", ""]
    return ["; ".join(profile.strengths), "; ".join(profile.development_areas), "; ".join(profile.pitfalls)]


def _render(header: Iterable[str], rows: Iterable[List[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(list(header))
    for row in rows:
        writer.writerow(row)
    return buf.getvalue()


def summary_csv(assessments: Iterable[Dict[str, Any]], lookup: ProfileLookup = get_profile) -> str:
    """One row per assessment with scores and the matched profile."""

    header = list(_SUMMARY_FIELDS) + ["Test Date", "Test Time", "Strengths", "Development Areas", "Potential Pitfalls"]
    rows = []
    for a in assessments:
        profile = lookup(a.get("personality_type"))
        rows.append(_base_row(a, profile) + list(_date_time(a)) + _lists(profile))
    return _render(header, rows)


def detailed_csv(
    assessments: Iterable[Dict[str, Any]],
    catalog: Catalog,
    lookup: ProfileLookup = get_profile,
) -> str:
    """Summary columns plus the profile description and one column per question."""

    questions = list(catalog)
    header = (
        list(_SUMMARY_FIELDS)
        + ["Profile Description", "Strengths", "Development Areas", "Potential Pitfalls", "Test Date", "Test Time"]
        + [f"{q.id}: {q.text[:50]}..." for q in questions]
    )
    rows = []
    for a in assessments:
        profile = lookup(a.get("personality_type"))
        answers = a.get("answers") or {}
        rows.append(
            _base_row(a, profile)
            + [profile.description if profile else ""]
            + _lists(profile)
            + list(_date_time(a))
            + [_text(answers.get(q.id, "")) for q in questions]
        )
    return _render(header, rows)


def _provided(val: Any, suffix: str = "") -> str:
    return "Not provided" if val is None or val == "" else f"{val}{suffix}"


def _na(val: Any, suffix: str = "") -> str:
    txt = _fmt2(val)
    return f"{txt}{suffix}" if txt else "N/A"


def individual_report(assessment: Dict[str, Any], profile: Optional[Profile] = None) -> str:
    user = assessment.get("user") or {}
    date, _ = _date_time(assessment)
    lines = [
        "POWER3 Leadership Assessment Report",
        "==================================",
        "",
        "Personal Information:",
        f"- Name: {_text(user.get('first_name'))} {_text(user.get('last_name'))}".rstrip(),
        f"- Age: {_provided(user.get('age'))}",
        f"- Gender: {_provided(user.get('gender'))}",
        f"- Leadership Experience: {_provided(user.get('leadership_experience'), ' years')}",
        f"- Assessment Date: {date or 'Unknown'}",
        "",
        "Assessment Results:",
        f"- Personality Type: {assessment.get('personality_type') or 'Processing...'}",
        f"- Vision Score: {_na(assessment.get('vision_score'))}",
        f"- People Score: {_na(assessment.get('people_score'))}",
        f"- Execution Score: {_na(assessment.get('execution_score'))}",
        f"- Extraversion Score: {_na(assessment.get('extraversion_score'))}",
        f"- Introversion Score: {_na(assessment.get('introversion_score'))}",
        "",
        "Self-Assessment (Self-Reported):",
        f"- Vision: {_na(assessment.get('vision_self'), '%')}",
        f"- People: {_na(assessment.get('people_self'), '%')}",
        f"- Execution: {_na(assessment.get('execution_self'), '%')}",
        "",
    ]
    if profile:
        lines += [
            "Profile Details:",
            f"- Title: {profile.title}",
            f"- Style Name: {profile.style_name}",
            f"- Dominant Orientation: {profile.dominant_orientation}",
            f"- Supporting Orientation: {profile.supporting_orientation}",
            f"- Blind Spot: {profile.blind_spot}",
            "",
            "Description:",
            profile.description,
            "",
            "Strengths:",
            *[f"• {s}" for s in profile.strengths],
            "",
            "Development Areas:",
            *[f"• {d}" for d in profile.development_areas],
            "",
            "Potential Pitfalls:",
            *[f"• {p}" for p in profile.pitfalls],
        ]
    else:
        lines.append("Profile information not available.")
    lines += ["", "---", "Generated by POWER3 Leadership Assessment System"]
    return "\n".join(lines)


__all__ = ["summary_csv", "detailed_csv", "individual_report"]
