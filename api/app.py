from __future__ import annotations
from fastapi import FastAPI, HTTPException, Header, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from dataclasses import asdict
import logging, os, typing as t

# ---- Engine imports ----
from power3_core import config
from power3_core.analytics import analytics_report, dashboard_stats, summary_report
from power3_core.catalog import Catalog, build_catalog
from power3_core.errors import InconsistentCatalogError, InvalidResponseError, LinkError, SelfAssessmentError
from power3_core.export import detailed_csv, individual_report, summary_csv
from power3_core.links import effective_show_results, new_link, new_links, parse_ts, require_valid
from power3_core.profiles import all_profiles, ei_interpretation, get_profile
from power3_core.report_html import render_report_html
from power3_core.scoring import (
    check_responses,
    compute_results,
    flat_scores,
    require_valid_self_assessment,
    responses_from_answers,
    results_from_answers,
    self_vs_actual,
)
from power3_core.types import AssessmentResults, SelfAssessment
from . import storage

log = logging.getLogger(__name__)

app = FastAPI(title="POWER3 Assessment API")


@app.get("/")
def root():
    return {"status": "ok", "service": "power3-assessment-api"}


ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,  # keep False unless you use cookies
)

# ---- Schemas ----
class PersonalInfo(BaseModel):
    first_name: str
    last_name: str
    age: int | None = None
    gender: str | None = None
    leadership_experience: int | None = None

class SelfAssessmentReq(BaseModel):
    vision: float
    people: float
    execution: float
    extraversion: float = 50.0

class SubmitReq(BaseModel):
    user: PersonalInfo
    answers: dict[str, int]
    self_assessment: SelfAssessmentReq

class LinkReq(BaseModel):
    show_results_immediately: bool | None = None
    expires_at: str | None = None
    single_use: bool | None = None

class BatchLinkReq(LinkReq):
    count: int

class AccessRequestReq(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    organization: str | None = None
    message: str | None = None

class ApproveReq(BaseModel):
    show_results: bool | None = None
    expires_at: str | None = None
    single_use: bool = True

class QuestionReq(BaseModel):
    id: str
    domain: str
    component: str
    tag: str
    text: str = ""

class QuestionUpdate(BaseModel):
    domain: str | None = None
    component: str | None = None
    tag: str | None = None
    text: str | None = None

class SettingReq(BaseModel):
    value: bool

# ---- Helpers ----
def _require_session(session: str | None) -> str:
    # Identity lives with the external provider; only presence is checked here.
    if config.REQUIRE_ADMIN_SESSION and not (session or "").strip():
        raise HTTPException(401, "admin session required")
    return (session or "").strip()


def _catalog(questions: list[dict[str, t.Any]] | None = None) -> Catalog:
    try:
        return build_catalog(questions if questions is not None else storage.list_questions())
    except InconsistentCatalogError as e:
        raise HTTPException(500, f"question catalog is inconsistent: {e}")


def _profile_dict(code: str | None) -> dict[str, t.Any] | None:
    prof = get_profile(code)
    return asdict(prof) if prof else None


def _stored_self(row: dict[str, t.Any]) -> dict[str, t.Any]:
    return {k: row.get(f"{k}_self") for k in ("vision", "people", "execution")}


def _rescore(row: dict[str, t.Any], catalog: Catalog) -> dict[str, t.Any]:
    res = results_from_answers(catalog, row.get("answers") or {}, _stored_self(row))
    updates = flat_scores(res)
    updates["results"] = res.to_dict()
    return updates


def _link_error(e: LinkError) -> HTTPException:
    return HTTPException(404 if e.reason == "unknown" else 410, str(e))


def _link_or_error(code: str) -> dict[str, t.Any]:
    try:
        return require_valid(storage.get_link_by_code(code), code)
    except LinkError as e:
        raise _link_error(e)


def _expiry_or_400(value: str | None) -> str | None:
    try:
        ts = parse_ts(value)
    except ValueError:
        raise HTTPException(400, f"invalid expires_at: {value!r}")
    return ts.isoformat() if ts else None


def _attachment(body: str, media_type: str, filename: str) -> Response:
    return Response(
        content=body,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
    )

# ---- Health ----
@app.get("/health")
def health():
    return {
        "data_dir": str(storage.DATA_ROOT),
        "questions": len(storage.list_questions()),
        "require_admin_session": config.REQUIRE_ADMIN_SESSION,
    }

# ---- Respondent flow ----
@app.get("/links/{code}")
def validate_link(code: str):
    link = _link_or_error(code)
    show = effective_show_results(link, storage.get_setting("show_results_immediately"))
    return {"valid": True, "single_use": bool(link.get("single_use")), "show_results": show}


@app.get("/questions")
def list_questions():
    return {"questions": [q.to_dict() for q in _catalog()]}


@app.post("/links/{code}/submit")
def submit(code: str, req: SubmitReq):
    _link_or_error(code)
    catalog = _catalog()

    sa = SelfAssessment(**req.self_assessment.model_dump())
    responses = responses_from_answers(req.answers)
    try:
        require_valid_self_assessment(sa)
        check_responses(catalog, responses)
    except (SelfAssessmentError, InvalidResponseError) as e:
        raise HTTPException(400, str(e))

    try:
        link = storage.claim_link(code)
    except LinkError as e:
        raise _link_error(e)

    user = storage.create_user(req.user.model_dump())
    res = compute_results(catalog, responses, sa)
    record = {
        "user_id": user["id"],
        "link_code": code,
        "answers": dict(req.answers),
        "vision_self": sa.vision,
        "people_self": sa.people,
        "execution_self": sa.execution,
        "results": res.to_dict(),
        **flat_scores(res),
    }
    assessment = storage.create_assessment(record)
    log.info("assessment %s stored for link %s as %s", assessment["id"], code, res.personality_type)

    show = effective_show_results(link, storage.get_setting("show_results_immediately"))
    out: dict[str, t.Any] = {"assessment_id": assessment["id"], "show_results": show}
    if show:
        out["results"] = res.to_dict()
        out["profile"] = _profile_dict(res.personality_type)
        out["ei_interpretation"] = ei_interpretation(res.ei_score)
        out["comparison"] = self_vs_actual(res)
    return out


@app.get("/results/{assessment_id}")
def public_results(assessment_id: str):
    row = storage.get_assessment(assessment_id)
    if not row:
        raise HTTPException(404, "assessment not found")
    if row.get("results"):
        res = AssessmentResults.from_dict(row["results"])
    else:
        res = results_from_answers(_catalog(), row.get("answers") or {}, _stored_self(row))
    return {
        "assessment": {k: v for k, v in row.items() if k != "answers"},
        "profile": _profile_dict(row.get("personality_type")),
        "ei_interpretation": ei_interpretation(res.ei_score),
        "comparison": self_vs_actual(res),
    }


@app.post("/access-requests")
def submit_access_request(req: AccessRequestReq):
    record = storage.create_access_request(req.model_dump())
    return {"ok": True, "id": record["id"]}

# ---- Admin: assessments ----
@app.get("/admin/assessments")
def admin_list_assessments(x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    rows = storage.list_assessments()
    return {"assessments": [{"assessment": r, "profile": _profile_dict(r.get("personality_type"))} for r in rows]}


@app.get("/admin/assessments/{assessment_id}")
def admin_get_assessment(assessment_id: str, x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    row = storage.get_assessment(assessment_id)
    if not row:
        raise HTTPException(404, "assessment not found")
    return {"assessment": row, "profile": _profile_dict(row.get("personality_type"))}


@app.delete("/admin/assessments/{assessment_id}")
def admin_delete_assessment(assessment_id: str, x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    if not storage.delete_assessment(assessment_id):
        raise HTTPException(404, "assessment not found")
    return {"ok": True}


@app.post("/admin/assessments/{assessment_id}/recalculate")
def admin_recalculate(assessment_id: str, x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    row = storage.get_assessment(assessment_id)
    if not row:
        raise HTTPException(404, "assessment not found")
    updated = storage.update_assessment(assessment_id, _rescore(row, _catalog()))
    return {"ok": True, "personality_type": updated.get("personality_type") if updated else None}


@app.post("/admin/assessments/recalculate-all")
def admin_recalculate_all(x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    catalog = _catalog()
    count = 0
    for row in storage.list_assessments():
        if row.get("personality_type"):
            continue
        if storage.update_assessment(row["id"], _rescore(row, catalog)):
            count += 1
    log.info("recalculated %d assessments", count)
    return {"recalculated": count}


@app.get("/admin/assessments/{assessment_id}/report.txt")
def admin_individual_report(assessment_id: str, x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    row = storage.get_assessment(assessment_id)
    if not row:
        raise HTTPException(404, "assessment not found")
    body = individual_report(row, get_profile(row.get("personality_type")))
    return _attachment(body, "text/plain", f"{assessment_id}_report.txt")


@app.get("/admin/assessments/{assessment_id}/report.html")
def admin_report_html(assessment_id: str, x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    row = storage.get_assessment(assessment_id)
    if not row:
        raise HTTPException(404, "assessment not found")
    html = render_report_html(row, get_profile(row.get("personality_type")))
    return Response(content=html, media_type="text/html")

# ---- Admin: links ----
@app.get("/admin/links")
def admin_list_links(x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    return {"links": storage.list_links()}


@app.post("/admin/links")
def admin_create_link(req: LinkReq | None = None, x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    req = req or LinkReq()
    (link,) = storage.save_links([new_link(req.show_results_immediately, _expiry_or_400(req.expires_at), req.single_use)])
    return link


@app.post("/admin/links/batch")
def admin_create_links(req: BatchLinkReq, x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    links = storage.save_links(new_links(req.count, req.show_results_immediately, _expiry_or_400(req.expires_at), req.single_use))
    return {"codes": [l["link_code"] for l in links]}


@app.delete("/admin/links/{link_id}")
def admin_revoke_link(link_id: str, x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    if not storage.delete_link(link_id):
        raise HTTPException(404, "link not found")
    return {"ok": True}

# ---- Admin: access requests ----
@app.get("/admin/access-requests")
def admin_list_access_requests(x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    return {"requests": storage.list_access_requests()}


@app.post("/admin/access-requests/{request_id}/approve")
def admin_approve_request(
    request_id: str,
    req: ApproveReq | None = None,
    x_admin_session: str | None = Header(None),
):
    session = _require_session(x_admin_session)
    if not storage.get_access_request(request_id):
        raise HTTPException(404, "access request not found")
    req = req or ApproveReq()
    (link,) = storage.save_links([new_link(req.show_results, _expiry_or_400(req.expires_at), req.single_use)])
    storage.update_access_request(request_id, {
        "status": "approved",
        "reviewed_at": storage.utcnow_iso(),
        "reviewed_by": session,
        "generated_link_id": link["id"],
    })
    log.info("access request %s approved", request_id)
    return {"success": True, "link": link["link_code"]}


@app.post("/admin/access-requests/{request_id}/reject")
def admin_reject_request(request_id: str, x_admin_session: str | None = Header(None)):
    session = _require_session(x_admin_session)
    updated = storage.update_access_request(request_id, {
        "status": "rejected",
        "reviewed_at": storage.utcnow_iso(),
        "reviewed_by": session,
    })
    if not updated:
        raise HTTPException(404, "access request not found")
    return {"ok": True}

# ---- Admin: questions ----
@app.post("/admin/questions")
def admin_create_question(req: QuestionReq, x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    existing = storage.list_questions()
    if any(q["id"] == req.id for q in existing):
        raise HTTPException(409, "question id already exists")
    try:
        build_catalog(existing + [req.model_dump()])
    except InconsistentCatalogError as e:
        raise HTTPException(400, str(e))
    return storage.save_question(req.model_dump())


@app.put("/admin/questions/{question_id}")
def admin_update_question(question_id: str, req: QuestionUpdate, x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    current = storage.get_question(question_id)
    if not current:
        raise HTTPException(404, "question not found")
    merged = dict(current)
    merged.update({k: v for k, v in req.model_dump().items() if v is not None})
    others = [q for q in storage.list_questions() if q["id"] != question_id]
    try:
        build_catalog(others + [merged])
    except InconsistentCatalogError as e:
        raise HTTPException(400, str(e))
    return storage.save_question(merged)


@app.delete("/admin/questions/{question_id}")
def admin_delete_question(question_id: str, x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    if not storage.delete_question(question_id):
        raise HTTPException(404, "question not found")
    return {"ok": True}

# ---- Admin: settings, stats, exports ----
@app.get("/admin/settings")
def admin_settings(x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    return {"settings": storage.all_settings()}


@app.put("/admin/settings/{key}")
def admin_update_setting(key: str, req: SettingReq, x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    storage.set_setting(key, req.value)
    return {"ok": True, "key": key, "value": req.value}


@app.get("/admin/stats")
def admin_stats(x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    return dashboard_stats(storage.list_assessments())


@app.get("/admin/export/summary.csv")
def export_summary_csv(x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    return _attachment(summary_csv(storage.list_assessments()), "text/csv", "power3_assessments.csv")


@app.get("/admin/export/detailed.csv")
def export_detailed_csv(x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    body = detailed_csv(storage.list_assessments(), _catalog())
    return _attachment(body, "text/csv", "power3_assessments_detailed.csv")


@app.get("/admin/export/analytics.txt")
def export_analytics(x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    return _attachment(analytics_report(storage.list_assessments()), "text/plain", "power3_analytics.txt")


@app.get("/admin/export/summary.txt")
def export_summary(x_admin_session: str | None = Header(None)):
    _require_session(x_admin_session)
    body = summary_report(storage.list_assessments(), all_profiles())
    return _attachment(body, "text/plain", "power3_summary.txt")
