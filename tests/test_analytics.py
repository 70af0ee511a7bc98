from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from power3_core.analytics import (
    analytics_report,
    average_scores,
    dashboard_stats,
    dominant_domain,
    summary_report,
    top_types,
    type_distribution,
)
from power3_core.profiles import all_profiles

NOW = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


def _row(code, days_ago, scores=(5.0, 4.0, 3.0), **user):
    v, p, e = scores
    return {
        "id": f"{code}-{days_ago}",
        "created_at": (NOW - timedelta(days=days_ago)).isoformat(),
        "personality_type": code,
        "vision_score": v,
        "people_score": p,
        "execution_score": e,
        "user": user,
    }


@pytest.fixture
def rows():
    return [
        _row("VPEE", 1, age=24, gender="Female", leadership_experience=0),
        _row("VPEE", 3, age=40, gender="Male", leadership_experience=7),
        _row("PVEI", 10, (3.0, 6.0, 3.0), age=60, leadership_experience=20),
        _row(None, 40, (None, None, None)),
    ]


def test_dashboard_stats(rows):
    stats = dashboard_stats(rows, now=NOW)
    assert stats == {
        "totalTests": 4,
        "profileDistribution": {"VPEE": 2, "PVEI": 1},
        "recentTests": 2,
    }


def test_average_scores_skip_incomplete_rows(rows):
    avg = average_scores(rows)
    assert avg["vision"] == pytest.approx(13 / 3)
    assert avg["people"] == pytest.approx(14 / 3)
    assert dominant_domain(avg) == "People"
    assert average_scores([]) == {"vision": 0.0, "people": 0.0, "execution": 0.0}


def test_dominant_domain_prefers_vision_on_ties():
    assert dominant_domain({"vision": 4.0, "people": 4.0, "execution": 4.0}) == "Vision"
    assert dominant_domain({"vision": 1.0, "people": 3.0, "execution": 3.0}) == "People"


def test_top_types_and_distribution(rows):
    assert type_distribution(rows) == {"VPEE": 2, "PVEI": 1}
    assert top_types(rows) == [("VPEE", 2), ("PVEI", 1)]
    assert top_types(rows, limit=1) == [("VPEE", 2)]


def test_analytics_report_sections(rows):
    text = analytics_report(rows, now=NOW)
    assert text.startswith("POWER3 Leadership Assessment Analytics Report")
    assert "Total Assessments: 4" in text
    assert "Recent Tests (30 days): 3" in text
    assert "VPEE: 2 (50.0%)" in text
    assert "18-25: 1 (25.0%)" in text
    assert "56+: 1 (25.0%)" in text
    assert "0-2 years: 1 (25.0%)" in text
    assert "16+ years: 1 (25.0%)" in text
    assert "Not specified: 2 (50.0%)" in text  # gender
    assert "Vision: 4.33" in text


def test_summary_report(rows):
    text = summary_report(rows, all_profiles(), now=NOW)
    assert "Completed Assessments: 3" in text
    assert "Completion Rate: 75.0%" in text
    assert "1. VPEE - The Inspiring Visionary (Extraverted) (2 tests, 66.7%)" in text
    assert "• Most dominant domain: People" in text


def test_summary_report_without_data():
    assert summary_report([], all_profiles()) == "No assessment data available for summary report."
