"""Access-link codes and their lifecycle checks."""
from __future__ import annotations

import secrets
import string
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from . import config
from .errors import LinkError

_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_ts(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def generate_link_code(length: int | None = None) -> str:
    n = config.LINK_CODE_LENGTH if length is None else length
    return "".join(secrets.choice(_ALPHABET) for _ in range(n))


def new_link(
    show_results: Optional[bool] = None,
    expires_at: Optional[str] = None,
    single_use: Optional[bool] = None,
    *,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    created = now or utcnow()
    # Unparseable expiries raise ValueError here.
    expires = parse_ts(expires_at)
    return {
        "id": str(uuid.uuid4()),
        "link_code": generate_link_code(),
        "is_used": False,
        "created_at": created.isoformat(),
        "used_at": None,
        "show_results_immediately": show_results,
        "expires_at": expires.isoformat() if expires else None,
        "single_use": config.LINK_SINGLE_USE_DEFAULT if single_use is None else bool(single_use),
    }


def new_links(count: int, show_results=None, expires_at=None, single_use=None, *, now=None) -> List[Dict[str, Any]]:
    n = max(0, min(int(count), config.BATCH_LINKS_MAX))
    return [new_link(show_results, expires_at, single_use, now=now) for _ in range(n)]


def link_status(link: Dict[str, Any], now: Optional[datetime] = None) -> str:
    """Return ``"valid"``, ``"expired"`` or ``"used"``.

    Multi-use links stay valid after use; only expiry retires them.
    """
    expires = parse_ts(link.get("expires_at"))
    if expires is not None and (now or utcnow()) > expires:
        return "expired"
    if link.get("single_use") and link.get("is_used"):
        return "used"
    return "valid"


def is_link_valid(link: Optional[Dict[str, Any]], now: Optional[datetime] = None) -> bool:
    return link is not None and link_status(link, now) == "valid"


def require_valid(link: Optional[Dict[str, Any]], code: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    if link is None:
        raise LinkError(code, "unknown")
    status = link_status(link, now)
    if status != "valid":
        raise LinkError(code, status)
    return link


def effective_show_results(link: Optional[Dict[str, Any]], global_setting: bool) -> bool:
    if link is None:
        return False
    per_link = link.get("show_results_immediately")
    if per_link is not None:
        return bool(per_link)
    return bool(global_setting)


def mark_used(link: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    out = dict(link)
    out["is_used"] = True
    out["used_at"] = (now or utcnow()).isoformat()
    return out
