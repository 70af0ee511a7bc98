from __future__ import annotations
import os, json, pathlib


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


SCALE_MIN: int = 1
SCALE_MAX: int = 7

EI_NEUTRAL: float = 3.5
EI_STRONG_THRESHOLD: float = 1.5

DOMINANT_TRAITS_MAX: int = 5

SELF_SUM_TOLERANCE: float = 0.1
SELF_DEFAULTS: dict[str, float] = {
    "vision": 33.33,
    "people": 33.33,
    "execution": 33.34,
    "extraversion": 50.0,
}

LINK_CODE_LENGTH: int = 16
BATCH_LINKS_MAX: int = 100
LINK_SINGLE_USE_DEFAULT: bool = True

SHOW_RESULTS_IMMEDIATELY: bool = True

STATS_RECENT_DAYS: int = 7
ANALYTICS_RECENT_DAYS: int = 30
TOP_TYPES_MAX: int = 5

REQUIRE_ADMIN_SESSION: bool = True

# // env overrides for staging/ops; defaults remain conservative.
EI_STRONG_THRESHOLD = _env_float("EI_STRONG_THRESHOLD", EI_STRONG_THRESHOLD)
DOMINANT_TRAITS_MAX = _env_int("DOMINANT_TRAITS_MAX", DOMINANT_TRAITS_MAX)
SELF_SUM_TOLERANCE = _env_float("SELF_SUM_TOLERANCE", SELF_SUM_TOLERANCE)
LINK_CODE_LENGTH = _env_int("LINK_CODE_LENGTH", LINK_CODE_LENGTH)
BATCH_LINKS_MAX = _env_int("BATCH_LINKS_MAX", BATCH_LINKS_MAX)
LINK_SINGLE_USE_DEFAULT = _env_bool("LINK_SINGLE_USE_DEFAULT", LINK_SINGLE_USE_DEFAULT)
SHOW_RESULTS_IMMEDIATELY = _env_bool("SHOW_RESULTS_IMMEDIATELY", SHOW_RESULTS_IMMEDIATELY)
STATS_RECENT_DAYS = _env_int("STATS_RECENT_DAYS", STATS_RECENT_DAYS)
ANALYTICS_RECENT_DAYS = _env_int("ANALYTICS_RECENT_DAYS", ANALYTICS_RECENT_DAYS)
REQUIRE_ADMIN_SESSION = _env_bool("REQUIRE_ADMIN_SESSION", REQUIRE_ADMIN_SESSION)


def load_config() -> dict:
    cfg = {}
    p = pathlib.Path("config.json")
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError): cfg = {}
    e = os.environ
    if e.get("QUESTIONS_PATH"): cfg["QUESTIONS_PATH"] = e.get("QUESTIONS_PATH")
    if e.get("PROFILES_PATH"): cfg["PROFILES_PATH"] = e.get("PROFILES_PATH")
    if e.get("SHOW_RESULTS_IMMEDIATELY"):
        cfg["SHOW_RESULTS_IMMEDIATELY"] = _env_bool("SHOW_RESULTS_IMMEDIATELY", SHOW_RESULTS_IMMEDIATELY)
    cfg.setdefault("SHOW_RESULTS_IMMEDIATELY", SHOW_RESULTS_IMMEDIATELY)
    return cfg
