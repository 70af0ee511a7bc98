from __future__ import annotations

import csv
import io

from power3_core.catalog import build_catalog
from power3_core.export import detailed_csv, individual_report, summary_csv
from power3_core.profiles import get_profile
from power3_core.report_html import export_report_html, render_report_html
from power3_core.scoring import flat_scores, results_from_answers
from tests.conftest import answers_for, build_synthetic_catalog


def _assessment(**user) -> dict:
    questions = build_synthetic_catalog(components_per_domain=1, questions_per_component=2, ei_per_side=1)
    answers = answers_for(questions, {"People C0": 7, "Vision C0": 5, "Execution C0": 2, "Introversion": 6})
    res = results_from_answers(questions, answers, {"vision": 20, "people": 50, "execution": 30})
    row = {
        "id": "a-1",
        "created_at": "2024-03-02T09:15:00+00:00",
        "answers": answers,
        "vision_self": 20.0,
        "people_self": 50.0,
        "execution_self": 30.0,
        "results": res.to_dict(),
        "user": {"first_name": "Ada", "last_name": "Lovelace", **user},
        **flat_scores(res),
    }
    return row


def _parse(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_summary_csv_columns_and_values():
    row = _assessment(age=41, gender="Female", leadership_experience=12)
    table = _parse(summary_csv([row]))

    header, values = table[0], table[1]
    assert header[0] == "Assessment ID"
    assert header[-5:] == ["Test Date", "Test Time", "Strengths", "Development Areas", "Potential Pitfalls"]
    record = dict(zip(header, values))
    assert record["Personality Type"] == "PVEI"
    assert record["People Score"] == "7.00"
    assert record["Vision Self-Report (%)"] == "20.00"
    assert record["Test Date"] == "2024-03-02"
    assert record["Test Time"] == "09:15:00"
    assert record["Profile Title"] == get_profile("PVEI").title
    assert record["Dominant Orientation"] == "People"


def test_summary_csv_without_profile_leaves_blanks():
    row = _assessment()
    row["personality_type"] = None
    record = dict(zip(*_parse(summary_csv([row]))))
    assert record["Profile Title"] == ""
    assert record["Strengths"] == ""


def test_detailed_csv_has_question_columns():
    questions = build_synthetic_catalog(components_per_domain=1, questions_per_component=2, ei_per_side=1)
    catalog = build_catalog(questions)
    row = _assessment()
    table = _parse(detailed_csv([row], catalog))

    header = table[0]
    assert "Profile Description" in header
    q_cols = [h for h in header if h.endswith("...")]
    assert len(q_cols) == len(questions)
    assert q_cols[0].startswith(f"{questions[0].id}: ")
    record = dict(zip(header, table[1]))
    assert record[q_cols[0]] == str(row["answers"][questions[0].id])


def test_individual_report_text():
    text = individual_report(_assessment(age=30), get_profile("PVEI"))
    assert text.startswith("POWER3 Leadership Assessment Report")
    assert "- Name: Ada Lovelace" in text
    assert "- Personality Type: PVEI" in text
    assert "- Gender: Not provided" in text
    assert "Strengths:" in text
    assert text.rstrip().endswith("Generated by POWER3 Leadership Assessment System")


def test_individual_report_without_profile():
    text = individual_report(_assessment())
    assert "Profile information not available." in text


def test_html_report_escapes_and_writes(tmp_path):
    row = _assessment()
    row["user"]["first_name"] = "<b>Ada</b>"
    html = render_report_html(row, get_profile("PVEI"))
    assert "POWER3 Leadership Report" in html
    assert "&lt;b&gt;Ada&lt;/b&gt;" in html
    assert "<b>Ada</b>" not in html
    assert "PVEI" in html
    assert "Strongly Introverted" in html

    out = export_report_html(row, str(tmp_path / "report.html"))
    assert (tmp_path / "report.html").read_text(encoding="utf-8").startswith("<!doctype html>")
    assert out.endswith("report.html")


def test_html_report_falls_back_to_flat_fields():
    row = {"id": "x", "personality_type": "VPEE", "vision_score": 5, "people_score": 4, "execution_score": 3}
    html = render_report_html(row)
    assert "5.00" in html
    assert "Extraversion:" in html


def test_individual_report_keeps_zero_experience():
    text = individual_report(_assessment(leadership_experience=0))
    assert "- Leadership Experience: 0 years" in text
    assert "- Age: Not provided" in text
    missing = individual_report(_assessment())
    assert "- Leadership Experience: Not provided" in missing
    assert "Not provided years" not in missing
