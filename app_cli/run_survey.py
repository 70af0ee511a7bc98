from __future__ import annotations
import os, datetime
from power3_core.catalog import load_catalog
from power3_core.config import load_config
from power3_core.errors import SelfAssessmentError
from power3_core.profiles import get_profile, ei_interpretation
from power3_core.report_html import export_report_html
from power3_core.scoring import compute_results, flat_scores, require_valid_self_assessment, self_vs_actual
from power3_core.types import Response, SelfAssessment
def ask_int(prompt: str, lo: int, hi: int) -> int:
    while True:
        v = input(prompt + " ").strip()
        if v.isdigit() and lo <= int(v) <= hi: return int(v)
        print(f"Enter a whole number from {lo} to {hi}.")
def ask_split() -> SelfAssessment:
    print("Split 100 points across Vision, People and Execution.")
    while True:
        sa = SelfAssessment(vision=ask_int("Vision:", 0, 100), people=ask_int("People:", 0, 100),
                            execution=ask_int("Execution:", 0, 100))
        try:
            require_valid_self_assessment(sa); return sa
        except SelfAssessmentError as e:
            print(e)
def main():
    print("POWER3 Leadership Assessment")
    cfg = load_config(); catalog = load_catalog(cfg.get("QUESTIONS_PATH")); sa = ask_split(); responses = []
    for i, q in enumerate(catalog, start=1):
        score = ask_int(f"[{i}/{len(catalog)}] {q.text}  (1=strongly disagree, 7=strongly agree)", 1, 7)
        responses.append(Response(question_id=q.id, score=score))
    res = compute_results(catalog, responses, sa); profile = get_profile(res.personality_type)
    print(f"\nYour type: {res.personality_type}" + (f" - {profile.title}" if profile else ""))
    for c in res.category_scores: print(f"  {c.rank}. {c.category.value}: {c.average:.2f}")
    print(f"  {res.ei_score.orientation.value}: {ei_interpretation(res.ei_score)}")
    print("  Dominant traits: " + ", ".join(res.dominant_traits))
    for row in self_vs_actual(res): print(f"  {row['domain']}: self {row['self']:.0f}% vs scored {row['actual']:.0f}%")
    row = {"id": "local", "results": res.to_dict(), **flat_scores(res)}; os.makedirs("reports", exist_ok=True)
    ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    path = export_report_html(row, os.path.join("reports", f"power3_{ts}.html"), profile)
    print(f"Done. Report saved to: {path}")
if __name__ == "__main__": main()
