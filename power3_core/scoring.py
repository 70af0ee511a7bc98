"""Scoring engine: raw Likert answers to a POWER3 personality code.

Responses are averaged per component, component means are averaged per
domain (mean of means, so a domain with many questions on one component
does not outweigh one with fewer), the three domains are ranked into a
three-letter prefix and the E/I axis adds the fourth letter.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from . import config
from .catalog import Catalog
from .errors import InvalidResponseError, SelfAssessmentError
from .types import (
    AssessmentResults,
    CategoryScore,
    ComponentScore,
    Domain,
    EIComponent,
    ExtraversionIntroversionScore,
    Orientation,
    Question,
    Response,
    SCORED_DOMAINS,
    SelfAssessment,
)

log = logging.getLogger(__name__)


def _as_catalog(catalog: Catalog | Iterable[Question]) -> Catalog:
    # Plain question lists are accepted as-is; consistency is the caller's contract.
    return catalog if isinstance(catalog, Catalog) else Catalog(catalog)


def component_scores(catalog: Catalog, responses: Iterable[Response]) -> List[ComponentScore]:
    """Mean raw score per answered non-E/I component, in first-answered order."""
    totals: Dict[Tuple[Domain, str], List[float]] = {}
    tags: Dict[Tuple[Domain, str], str] = {}
    for resp in responses:
        q = catalog.get(resp.question_id)
        if q is None:
            log.debug("ignoring response to unknown question %r", resp.question_id)
            continue
        if q.domain == Domain.EI:
            continue
        key = (q.domain, q.component)
        totals.setdefault(key, []).append(float(resp.score))
        tags.setdefault(key, q.tag)

    return [
        ComponentScore(component=comp, domain=dom, tag=tags[(dom, comp)], average=sum(vals) / len(vals))
        for (dom, comp), vals in totals.items()
    ]


def rank_categories(components: Iterable[ComponentScore]) -> List[CategoryScore]:
    grouped: Dict[Domain, List[float]] = {d: [] for d in SCORED_DOMAINS}
    for cs in components:
        if cs.domain in grouped:
            grouped[cs.domain].append(cs.average)

    averages = [(d, (sum(v) / len(v)) if v else 0.0) for d, v in grouped.items()]
    # sorted() is stable with reverse=True, so ties keep Vision, People, Execution order.
    ordered = sorted(averages, key=lambda pair: pair[1], reverse=True)
    return [CategoryScore(category=d, average=avg, rank=i) for i, (d, avg) in enumerate(ordered, start=1)]


def personality_prefix(categories: Iterable[CategoryScore]) -> str:
    return "".join(c.category.letter for c in sorted(categories, key=lambda c: c.rank))


def classify_orientation(difference: float, threshold: float | None = None) -> Orientation:
    """Map an extraversion-minus-introversion difference onto one of four labels.

    A difference of exactly zero resolves to Leaning Extraverted; there is no
    neutral class.
    """
    t = config.EI_STRONG_THRESHOLD if threshold is None else threshold
    if difference > t:
        return Orientation.STRONGLY_EXTRAVERTED
    if difference < -t:
        return Orientation.STRONGLY_INTROVERTED
    if difference >= 0:
        return Orientation.LEANING_EXTRAVERTED
    return Orientation.LEANING_INTROVERTED


def ei_score(catalog: Catalog, responses: Iterable[Response]) -> ExtraversionIntroversionScore:
    sides: Dict[str, List[float]] = {c.value: [] for c in EIComponent}
    for resp in responses:
        q = catalog.get(resp.question_id)
        if q is None or q.domain != Domain.EI:
            continue
        if q.component in sides:
            sides[q.component].append(float(resp.score))

    def _mean(vals: List[float]) -> float:
        return sum(vals) / len(vals) if vals else config.EI_NEUTRAL

    e_avg = _mean(sides[EIComponent.EXTRAVERSION.value])
    i_avg = _mean(sides[EIComponent.INTROVERSION.value])
    return ExtraversionIntroversionScore(
        extraversion_average=e_avg,
        introversion_average=i_avg,
        orientation=classify_orientation(e_avg - i_avg),
    )


def dominant_traits(components: Iterable[ComponentScore], limit: int | None = None) -> List[str]:
    cap = config.DOMINANT_TRAITS_MAX if limit is None else limit
    ordered = sorted(components, key=lambda c: c.average, reverse=True)
    return [c.tag for c in ordered[:cap]]


def compute_results(
    catalog: Catalog | Iterable[Question],
    responses: Iterable[Response],
    self_assessment: SelfAssessment,
) -> AssessmentResults:
    """Score one respondent.

    Pure function of its inputs.  Responses to unknown questions are dropped,
    unanswered components are omitted and an empty E/I side defaults to the
    scale midpoint; nothing here raises on sparse data.
    """
    cat = _as_catalog(catalog)
    resp_list = list(responses)

    # Highest average first; ties keep first-answered order.
    components = sorted(component_scores(cat, resp_list), key=lambda c: c.average, reverse=True)
    categories = rank_categories(components)
    ei = ei_score(cat, resp_list)
    code = personality_prefix(categories) + ei.orientation_code

    scored = sum(1 for r in resp_list if r.question_id in cat)
    log.debug("computed %s from %d/%d responses", code, scored, len(resp_list))

    return AssessmentResults(
        personality_type=code,
        category_scores=categories,
        component_scores=components,
        self_assessment=replace(
            self_assessment, extraversion=ei.extraversion_average * (100 / config.SCALE_MAX)
        ),
        dominant_traits=dominant_traits(components),
        ei_score=ei,
        meta={"responses": len(resp_list), "scored": scored},
    )


# ---- helpers used around the engine ----

def validate_self_assessment(sa: SelfAssessment, tolerance: float | None = None) -> bool:
    tol = config.SELF_SUM_TOLERANCE if tolerance is None else tolerance
    return abs((sa.vision + sa.people + sa.execution) - 100.0) < tol


def require_valid_self_assessment(sa: SelfAssessment) -> None:
    if not validate_self_assessment(sa):
        total = sa.vision + sa.people + sa.execution
        raise SelfAssessmentError(f"self-assessment must sum to 100, got {total:.2f}")


def check_responses(catalog: Catalog, responses: Iterable[Response]) -> None:
    """Raise for scores off the Likert scale; unknown ids are left to the engine to drop."""
    for resp in responses:
        if isinstance(resp.score, bool) or not isinstance(resp.score, int):
            raise InvalidResponseError(f"score for {resp.question_id!r} must be an integer")
        if not config.SCALE_MIN <= resp.score <= config.SCALE_MAX:
            raise InvalidResponseError(
                f"score for {resp.question_id!r} must be within "
                f"{config.SCALE_MIN}..{config.SCALE_MAX}, got {resp.score}"
            )
        if resp.question_id not in catalog:
            log.info("response references unknown question %r", resp.question_id)


def responses_from_answers(answers: Mapping[str, int]) -> List[Response]:
    return [Response(question_id=str(qid), score=int(score)) for qid, score in answers.items()]


def default_self_assessment(partial: Optional[Mapping[str, float]] = None) -> SelfAssessment:
    # Missing or zero values fall back to an even split.
    vals = dict(config.SELF_DEFAULTS)
    for key, val in (partial or {}).items():
        if key in vals and val:
            vals[key] = float(val)
    return SelfAssessment(**vals)


def results_from_answers(
    catalog: Catalog | Iterable[Question],
    answers: Mapping[str, int],
    self_assessment: Optional[Mapping[str, float]] = None,
) -> AssessmentResults:
    """Recompute results from a stored ``{question_id: score}`` answer map."""
    return compute_results(catalog, responses_from_answers(answers), default_self_assessment(self_assessment))


def flat_scores(results: AssessmentResults) -> Dict[str, object]:
    """Flat numeric fields persisted next to each assessment."""

    def _avg(domain: Domain) -> float:
        cs = results.category(domain)
        return cs.average if cs else 0.0

    return {
        "vision_score": _avg(Domain.VISION),
        "people_score": _avg(Domain.PEOPLE),
        "execution_score": _avg(Domain.EXECUTION),
        "extraversion_score": results.ei_score.extraversion_average,
        "introversion_score": results.ei_score.introversion_average,
        "personality_type": results.personality_type,
    }


def domain_percentages(results: AssessmentResults) -> Dict[str, float]:
    """Each domain's share of the summed domain averages, as a 0-100 percentage."""
    total = sum(c.average for c in results.category_scores)
    out: Dict[str, float] = {}
    for domain in SCORED_DOMAINS:
        cs = results.category(domain)
        avg = cs.average if cs else 0.0
        out[domain.value] = (avg / total * 100.0) if total > 0 else 0.0
    return out


def self_vs_actual(results: AssessmentResults) -> List[Dict[str, object]]:
    actual = domain_percentages(results)
    rows: List[Dict[str, object]] = []
    for domain in SCORED_DOMAINS:
        self_pct = float(results.self_assessment.domain_value(domain))
        rows.append({
            "domain": domain.value,
            "self": self_pct,
            "actual": actual[domain.value],
            "gap": actual[domain.value] - self_pct,
        })
    return rows


__all__ = [
    "compute_results",
    "component_scores",
    "rank_categories",
    "personality_prefix",
    "classify_orientation",
    "ei_score",
    "dominant_traits",
    "validate_self_assessment",
    "require_valid_self_assessment",
    "check_responses",
    "responses_from_answers",
    "default_self_assessment",
    "results_from_answers",
    "flat_scores",
    "domain_percentages",
    "self_vs_actual",
]
