"""Question catalog loading and consistency checks.

The catalog is static reference data: each entry maps a question id to its
domain, component and display tag.  Consistency (one domain per component,
E/I entries restricted to the two orientation components) is enforced once,
when the catalog is built, so the scoring engine can treat it as trusted.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from .errors import InconsistentCatalogError
from .types import Domain, EIComponent, Question, SCORED_DOMAINS

log = logging.getLogger(__name__)

DEFAULT_QUESTIONS_PATH = Path(__file__).with_name("data") / "questions.json"

_EI_COMPONENTS = {c.value for c in EIComponent}


class Catalog:
    """Validated, read-only view over the question catalog."""

    def __init__(self, questions: Iterable[Question]):
        self._questions: tuple[Question, ...] = tuple(questions)
        self._by_id: Dict[str, Question] = {q.id: q for q in self._questions}

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    def __len__(self) -> int:
        return len(self._questions)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._by_id

    def get(self, question_id: str) -> Optional[Question]:
        return self._by_id.get(question_id)

    def by_domain(self) -> Dict[Domain, List[Question]]:
        out: Dict[Domain, List[Question]] = {d: [] for d in Domain}
        for q in self._questions:
            out[q.domain].append(q)
        return out

    def components(self) -> Dict[str, Domain]:
        return {q.component: q.domain for q in self._questions}


def _check_consistency(questions: List[Question]) -> None:
    seen_ids: set[str] = set()
    owner: Dict[str, Domain] = {}
    for q in questions:
        if q.id in seen_ids:
            raise InconsistentCatalogError(f"duplicate question id {q.id!r}")
        seen_ids.add(q.id)

        if q.domain == Domain.EI and q.component not in _EI_COMPONENTS:
            raise InconsistentCatalogError(
                f"question {q.id!r}: E/I component must be Extraversion or Introversion, got {q.component!r}"
            )

        prev = owner.setdefault(q.component, q.domain)
        if prev != q.domain:
            raise InconsistentCatalogError(
                f"component {q.component!r} is mapped to both {prev.value} and {q.domain.value}"
            )


def build_catalog(entries: Iterable[Question | Mapping[str, Any]]) -> Catalog:
    questions: List[Question] = []
    for raw in entries:
        if isinstance(raw, Question):
            questions.append(raw)
            continue
        try:
            questions.append(Question.from_dict(dict(raw)))
        except (KeyError, ValueError) as exc:
            raise InconsistentCatalogError(f"malformed catalog entry {raw!r}: {exc}") from exc
    _check_consistency(questions)
    return Catalog(questions)


def load_catalog(path: str | Path | None = None) -> Catalog:
    p = Path(path) if path else DEFAULT_QUESTIONS_PATH
    raw = json.loads(p.read_text(encoding="utf-8"))
    catalog = build_catalog(sorted(raw, key=lambda r: str(r.get("id", ""))))
    log.debug("loaded %d questions from %s", len(catalog), p)
    return catalog


def catalog_coverage(catalog: Catalog) -> dict[str, object]:
    coverage: dict[str, dict[str, object]] = {}
    for domain, questions in catalog.by_domain().items():
        comps: dict[str, int] = {}
        for q in questions:
            comps[q.component] = comps.get(q.component, 0) + 1
        coverage[domain.value] = {"questions": len(questions), "components": comps}

    warnings: list[str] = []
    for domain in SCORED_DOMAINS:
        data = coverage[domain.value]
        if not data["questions"]:
            warnings.append(f"{domain.value} has no questions")
        for comp, n in data["components"].items():  # type: ignore[union-attr]
            if n < 2:
                warnings.append(f"{domain.value} component {comp!r} has only {n} question")
    ei = coverage[Domain.EI.value]["components"]
    for side in EIComponent:
        if not ei.get(side.value):  # type: ignore[union-attr]
            warnings.append(f"E/I has no {side.value} questions")

    return {"coverage": coverage, "warnings": warnings, "total": len(catalog)}
