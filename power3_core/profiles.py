from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .types import Domain, ExtraversionIntroversionScore, SCORED_DOMAINS

log = logging.getLogger(__name__)

DEFAULT_PROFILES_PATH = Path(__file__).with_name("data") / "profiles.json"

_LETTER_TO_DOMAIN = {d.letter: d for d in SCORED_DOMAINS}


@dataclass(frozen=True)
class Profile:
    code: str
    title: str
    style_name: str
    dominant_orientation: str
    supporting_orientation: str
    blind_spot: str
    description: str
    strengths: List[str] = field(default_factory=list)
    development_areas: List[str] = field(default_factory=list)
    pitfalls: List[str] = field(default_factory=list)


_PROFILES_CACHE: Optional[Dict[str, object]] = None


def _load_profile_data(path: Path | None = None) -> Dict[str, object]:
    """Lazy-load the profile description table."""

    global _PROFILES_CACHE
    if path is not None:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    if _PROFILES_CACHE is None:
        _PROFILES_CACHE = json.loads(DEFAULT_PROFILES_PATH.read_text(encoding="utf-8"))
    return _PROFILES_CACHE


def _build(code: str, data: Dict[str, object]) -> Optional[Profile]:
    if len(code) != 4:
        return None
    prefix, ei = code[:3], code[3]
    styles: Dict[str, Dict[str, object]] = data.get("styles", {})  # type: ignore[assignment]
    orientations: Dict[str, str] = data.get("orientations", {})  # type: ignore[assignment]
    base = styles.get(prefix)
    if base is None or ei not in orientations:
        return None

    order: List[Domain] = [_LETTER_TO_DOMAIN[ch] for ch in prefix]
    suffix = "Extraverted" if ei == "E" else "Introverted"
    return Profile(
        code=code,
        title=f"{base['title']} ({suffix})",
        style_name=str(base["style_name"]),
        dominant_orientation=order[0].value,
        supporting_orientation=order[1].value,
        blind_spot=order[2].value,
        description=f"{base['description']} {orientations[ei]}",
        strengths=list(base.get("strengths", [])),  # type: ignore[arg-type]
        development_areas=list(base.get("development_areas", [])),  # type: ignore[arg-type]
        pitfalls=list(base.get("pitfalls", [])),  # type: ignore[arg-type]
    )


def get_profile(code: str | None, path: Path | None = None) -> Optional[Profile]:
    if not code:
        return None
    profile = _build(code.upper(), _load_profile_data(path))
    if profile is None:
        log.warning("no profile for personality type %r", code)
    return profile


def all_profiles(path: Path | None = None) -> List[Profile]:
    data = _load_profile_data(path)
    styles: Dict[str, object] = data.get("styles", {})  # type: ignore[assignment]
    out: List[Profile] = []
    for prefix in sorted(styles):
        for ei in ("E", "I"):
            prof = _build(prefix + ei, data)
            if prof:
                out.append(prof)
    return out


def ei_interpretation(score: ExtraversionIntroversionScore) -> str:
    texts: Dict[str, str] = _load_profile_data().get("interpretations", {})  # type: ignore[assignment]
    return texts.get(score.orientation.value, "")
