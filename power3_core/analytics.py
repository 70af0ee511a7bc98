"""Aggregate statistics and text reports over stored assessments."""
from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from statistics import mean
from typing import Any, Dict, Iterable, List, Optional, Tuple

from . import config
from .links import parse_ts, utcnow
from .profiles import Profile

AGE_GROUPS: tuple[tuple[str, int | None], ...] = (
    ("18-25", 25),
    ("26-35", 35),
    ("36-45", 45),
    ("46-55", 55),
    ("56+", None),
)

EXPERIENCE_GROUPS: tuple[tuple[str, int | None], ...] = (
    ("0-2 years", 2),
    ("3-5 years", 5),
    ("6-10 years", 10),
    ("11-15 years", 15),
    ("16+ years", None),
)

NOT_SPECIFIED = "Not specified"


def _created(a: Dict[str, Any]) -> Optional[datetime]:
    try:
        return parse_ts(a.get("created_at"))
    except ValueError:
        return None


def _recent(assessments: List[Dict[str, Any]], days: int, now: datetime) -> int:
    cutoff = now - timedelta(days=days)
    return sum(1 for a in assessments if (_created(a) or cutoff) > cutoff)


def _bucket(value: Any, groups: tuple[tuple[str, int | None], ...]) -> str:
    if value is None or value == "":
        return NOT_SPECIFIED
    try:
        v = int(value)
    except (TypeError, ValueError):
        return NOT_SPECIFIED
    for label, upper in groups:
        if upper is None or v <= upper:
            return label
    return NOT_SPECIFIED


def _distribution(values: Iterable[str], labels: Iterable[str]) -> Dict[str, int]:
    counts = {label: 0 for label in labels}
    for v in values:
        counts[v] = counts.get(v, 0) + 1
    return counts


def type_distribution(assessments: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    return dict(Counter(a["personality_type"] for a in assessments if a.get("personality_type")))


def _scored(assessments: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    keys = ("vision_score", "people_score", "execution_score")
    return [a for a in assessments if all(a.get(k) is not None for k in keys)]


def average_scores(assessments: Iterable[Dict[str, Any]]) -> Dict[str, float]:
    valid = _scored(assessments)
    if not valid:
        return {"vision": 0.0, "people": 0.0, "execution": 0.0}
    return {
        "vision": mean(float(a["vision_score"]) for a in valid),
        "people": mean(float(a["people_score"]) for a in valid),
        "execution": mean(float(a["execution_score"]) for a in valid),
    }


def dominant_domain(avg: Dict[str, float]) -> str:
    if avg["vision"] >= avg["people"] and avg["vision"] >= avg["execution"]:
        return "Vision"
    return "People" if avg["people"] >= avg["execution"] else "Execution"


def dashboard_stats(assessments: Iterable[Dict[str, Any]], now: Optional[datetime] = None) -> Dict[str, Any]:
    rows = list(assessments)
    return {
        "totalTests": len(rows),
        "profileDistribution": type_distribution(rows),
        "recentTests": _recent(rows, config.STATS_RECENT_DAYS, now or utcnow()),
    }


def _pct(count: int, total: int) -> str:
    return f"{(count / total * 100) if total else 0.0:.1f}"


def _lines(dist: Dict[str, int], total: int) -> str:
    return "\n".join(f"{k}: {v} ({_pct(v, total)}%)" for k, v in dist.items())


def analytics_report(assessments: Iterable[Dict[str, Any]], now: Optional[datetime] = None) -> str:
    rows = list(assessments)
    now = now or utcnow()
    total = len(rows)
    types = dict(sorted(type_distribution(rows).items(), key=lambda kv: kv[1], reverse=True))
    users = [a.get("user") or {} for a in rows]
    ages = _distribution(
        (_bucket(u.get("age"), AGE_GROUPS) for u in users), [g for g, _ in AGE_GROUPS] + [NOT_SPECIFIED]
    )
    genders = dict(Counter(u.get("gender") or NOT_SPECIFIED for u in users))
    experience = _distribution(
        (_bucket(u.get("leadership_experience"), EXPERIENCE_GROUPS) for u in users),
        [g for g, _ in EXPERIENCE_GROUPS] + [NOT_SPECIFIED],
    )
    avg = average_scores(rows)

    return "\n".join([
        "POWER3 Leadership Assessment Analytics Report",
        "===========================================",
        f"Generated: {now.strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        "OVERVIEW",
        "--------",
        f"Total Assessments: {total}",
        f"Recent Tests ({config.ANALYTICS_RECENT_DAYS} days): {_recent(rows, config.ANALYTICS_RECENT_DAYS, now)}",
        f"Valid Score Data: {len(_scored(rows))}",
        "",
        "PERSONALITY TYPE DISTRIBUTION",
        "----------------------------",
        _lines(types, total),
        "",
        "AGE DISTRIBUTION",
        "---------------",
        _lines(ages, total),
        "",
        "GENDER DISTRIBUTION",
        "------------------",
        _lines(genders, total),
        "",
        "LEADERSHIP EXPERIENCE DISTRIBUTION",
        "---------------------------------",
        _lines(experience, total),
        "",
        "AVERAGE SCORES",
        "-------------",
        f"Vision: {avg['vision']:.2f}",
        f"People: {avg['people']:.2f}",
        f"Execution: {avg['execution']:.2f}",
        "",
        "---",
        "Generated by POWER3 Leadership Assessment System",
    ])


def top_types(assessments: Iterable[Dict[str, Any]], limit: int | None = None) -> List[Tuple[str, int]]:
    cap = config.TOP_TYPES_MAX if limit is None else limit
    return sorted(type_distribution(assessments).items(), key=lambda kv: kv[1], reverse=True)[:cap]


def summary_report(
    assessments: Iterable[Dict[str, Any]],
    profiles: Iterable[Profile],
    now: Optional[datetime] = None,
) -> str:
    rows = list(assessments)
    if not rows:
        return "No assessment data available for summary report."
    now = now or utcnow()
    titles = {p.code: p.title for p in profiles}

    completed = [a for a in rows if a.get("personality_type")]
    rate = _pct(len(completed), len(rows))
    avg = average_scores(completed)
    recent = _recent(rows, config.STATS_RECENT_DAYS, now)

    ranked = []
    for idx, (code, count) in enumerate(top_types(completed), start=1):
        ranked.append(
            f"{idx}. {code} - {titles.get(code, 'Unknown')} ({count} tests, {_pct(count, len(completed))}%)"
        )

    return "\n".join([
        "POWER3 Leadership Assessment Summary Report",
        "=========================================",
        f"Generated: {now.strftime('%Y-%m-%d %H:%M:%S')}",
        "",
        "OVERVIEW",
        "--------",
        f"Total Assessments: {len(rows)}",
        f"Completed Assessments: {len(completed)}",
        f"Completion Rate: {rate}%",
        f"Recent Activity ({config.STATS_RECENT_DAYS} days): {recent}",
        "",
        "TOP PERSONALITY TYPES",
        "--------------------",
        "\n".join(ranked),
        "",
        "AVERAGE DOMAIN SCORES",
        "--------------------",
        f"Vision: {avg['vision']:.2f}",
        f"People: {avg['people']:.2f}",
        f"Execution: {avg['execution']:.2f}",
        "",
        "INSIGHTS",
        "--------",
        f"• Most dominant domain: {dominant_domain(avg)}",
        f"• Assessment completion rate: {rate}%",
        f"• Recent engagement: {recent} tests in the last {config.STATS_RECENT_DAYS} days",
        "",
        "---",
        "Generated by POWER3 Leadership Assessment System",
    ])
