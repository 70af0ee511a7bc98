"""Utility helpers for persisting assessments, links and reference data.

The production deployment should ideally swap this module for a proper
database-backed implementation.  For now we use simple JSON files stored on
disk, one file per table, keyed by record id.
"""

from __future__ import annotations

import json
import logging
import os
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from power3_core.catalog import DEFAULT_QUESTIONS_PATH
from power3_core.config import SHOW_RESULTS_IMMEDIATELY
from power3_core.links import mark_used, require_valid


DATA_ROOT = Path(os.getenv("DATA_DIR", "data")).resolve()
USERS_PATH = DATA_ROOT / "users.json"
ASSESSMENTS_PATH = DATA_ROOT / "assessments.json"
LINKS_PATH = DATA_ROOT / "test_links.json"
ACCESS_REQUESTS_PATH = DATA_ROOT / "access_requests.json"
QUESTIONS_PATH = DATA_ROOT / "questions.json"
SETTINGS_PATH = DATA_ROOT / "settings.json"

_LOCK = threading.Lock()

log = logging.getLogger(__name__)


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.warning("could not read %s: %s", path, exc)
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    tmp.replace(path)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


def _newest_first(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    out = list(rows)
    out.sort(key=lambda r: r.get("created_at", ""), reverse=True)
    return out


# ---- users ----

def create_user(data: Dict[str, Any]) -> Dict[str, Any]:
    record = dict(data)
    record["id"] = _new_id()
    record["created_at"] = utcnow_iso()
    with _LOCK:
        users = _read_json(USERS_PATH, {})
        users[record["id"]] = record
        _write_json(USERS_PATH, users)
    return record


def get_user(user_id: str) -> Optional[Dict[str, Any]]:
    return _read_json(USERS_PATH, {}).get(user_id)


def delete_user(user_id: str) -> bool:
    with _LOCK:
        users = _read_json(USERS_PATH, {})
        if user_id not in users:
            return False
        users.pop(user_id, None)
        _write_json(USERS_PATH, users)
    return True


# ---- assessments ----

def create_assessment(record: Dict[str, Any]) -> Dict[str, Any]:
    """Persist a scored submission; ``record`` holds user_id, answers and flat scores."""

    out = dict(record)
    out["id"] = _new_id()
    out["created_at"] = utcnow_iso()
    with _LOCK:
        rows = _read_json(ASSESSMENTS_PATH, {})
        rows[out["id"]] = out
        _write_json(ASSESSMENTS_PATH, rows)
    return out


def _with_user(row: Dict[str, Any], users: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(row)
    out["user"] = users.get(row.get("user_id"), {})
    return out


def get_assessment(assessment_id: str) -> Optional[Dict[str, Any]]:
    row = _read_json(ASSESSMENTS_PATH, {}).get(assessment_id)
    if row is None:
        return None
    return _with_user(row, _read_json(USERS_PATH, {}))


def list_assessments() -> List[Dict[str, Any]]:
    users = _read_json(USERS_PATH, {})
    rows = _read_json(ASSESSMENTS_PATH, {})
    return _newest_first(_with_user(r, users) for r in rows.values())


def update_assessment(assessment_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    with _LOCK:
        rows = _read_json(ASSESSMENTS_PATH, {})
        if assessment_id not in rows:
            return None
        rows[assessment_id].update(updates)
        _write_json(ASSESSMENTS_PATH, rows)
        return dict(rows[assessment_id])


def delete_assessment(assessment_id: str) -> bool:
    """Delete an assessment together with the respondent record it belongs to."""

    with _LOCK:
        rows = _read_json(ASSESSMENTS_PATH, {})
        row = rows.pop(assessment_id, None)
        if row is None:
            return False
        _write_json(ASSESSMENTS_PATH, rows)
    user_id = row.get("user_id")
    if user_id and not delete_user(user_id):
        log.warning("assessment %s deleted but user %s was not found", assessment_id, user_id)
    return True


# ---- test links ----

def save_links(records: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    saved = [dict(r) for r in records]
    with _LOCK:
        links = _read_json(LINKS_PATH, {})
        for rec in saved:
            links[rec["id"]] = rec
        _write_json(LINKS_PATH, links)
    return saved


def get_link_by_code(code: str) -> Optional[Dict[str, Any]]:
    for rec in _read_json(LINKS_PATH, {}).values():
        if rec.get("link_code") == code:
            return rec
    return None


def list_links() -> List[Dict[str, Any]]:
    return _newest_first(_read_json(LINKS_PATH, {}).values())


def claim_link(code: str) -> Dict[str, Any]:
    """Check and consume a link in one locked step.

    Raises ``LinkError`` when the link is unknown, expired or already used.
    Multi-use links are stamped but stay valid.
    """

    with _LOCK:
        links = _read_json(LINKS_PATH, {})
        link = next((rec for rec in links.values() if rec.get("link_code") == code), None)
        require_valid(link, code)
        claimed = mark_used(link)
        links[claimed["id"]] = claimed
        _write_json(LINKS_PATH, links)
    return dict(claimed)


def update_link(link_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    with _LOCK:
        links = _read_json(LINKS_PATH, {})
        if link_id not in links:
            return None
        links[link_id].update(updates)
        _write_json(LINKS_PATH, links)
        return dict(links[link_id])


def delete_link(link_id: str) -> bool:
    with _LOCK:
        links = _read_json(LINKS_PATH, {})
        if link_id not in links:
            return False
        links.pop(link_id, None)
        _write_json(LINKS_PATH, links)
    return True


# ---- access requests ----

def create_access_request(data: Dict[str, Any]) -> Dict[str, Any]:
    record = dict(data)
    record.update({"id": _new_id(), "status": "pending", "created_at": utcnow_iso()})
    with _LOCK:
        rows = _read_json(ACCESS_REQUESTS_PATH, {})
        rows[record["id"]] = record
        _write_json(ACCESS_REQUESTS_PATH, rows)
    return record


def get_access_request(request_id: str) -> Optional[Dict[str, Any]]:
    return _read_json(ACCESS_REQUESTS_PATH, {}).get(request_id)


def list_access_requests() -> List[Dict[str, Any]]:
    return _newest_first(_read_json(ACCESS_REQUESTS_PATH, {}).values())


def update_access_request(request_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    with _LOCK:
        rows = _read_json(ACCESS_REQUESTS_PATH, {})
        if request_id not in rows:
            return None
        rows[request_id].update(updates)
        _write_json(ACCESS_REQUESTS_PATH, rows)
        return dict(rows[request_id])


# ---- questions ----

def _load_questions() -> Dict[str, Dict[str, Any]]:
    if QUESTIONS_PATH.exists():
        return _read_json(QUESTIONS_PATH, {})
    # First run: seed from the packaged catalog.
    seed = json.loads(DEFAULT_QUESTIONS_PATH.read_text(encoding="utf-8"))
    return {str(q["id"]): q for q in seed}


def list_questions() -> List[Dict[str, Any]]:
    rows = _load_questions()
    return [rows[k] for k in sorted(rows)]


def get_question(question_id: str) -> Optional[Dict[str, Any]]:
    return _load_questions().get(question_id)


def save_question(question: Dict[str, Any]) -> Dict[str, Any]:
    with _LOCK:
        rows = _load_questions()
        rows[str(question["id"])] = dict(question)
        _write_json(QUESTIONS_PATH, rows)
    return dict(question)


def delete_question(question_id: str) -> bool:
    with _LOCK:
        rows = _load_questions()
        if question_id not in rows:
            return False
        rows.pop(question_id, None)
        _write_json(QUESTIONS_PATH, rows)
    return True


# ---- settings ----

_DEFAULT_SETTINGS: Dict[str, bool] = {"show_results_immediately": SHOW_RESULTS_IMMEDIATELY}


def get_setting(key: str) -> bool:
    settings = _read_json(SETTINGS_PATH, {})
    return bool(settings.get(key, _DEFAULT_SETTINGS.get(key, False)))


def all_settings() -> Dict[str, bool]:
    out = dict(_DEFAULT_SETTINGS)
    out.update(_read_json(SETTINGS_PATH, {}))
    return out


def set_setting(key: str, value: bool) -> None:
    with _LOCK:
        settings = _read_json(SETTINGS_PATH, {})
        settings[key] = bool(value)
        _write_json(SETTINGS_PATH, settings)
