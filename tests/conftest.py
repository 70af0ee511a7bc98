from __future__ import annotations

import pytest

from power3_core.catalog import Catalog, build_catalog
from power3_core.types import Domain, EIComponent, Question, SCORED_DOMAINS


def build_synthetic_catalog(
    *,
    domains: list[Domain] | None = None,
    components_per_domain: int = 3,
    questions_per_component: int = 3,
    ei_per_side: int = 4,
) -> list[Question]:
    """Create a deterministic synthetic question list for tests and smoke runs."""

    questions: list[Question] = []
    target_domains = domains or list(SCORED_DOMAINS)
    for domain in target_domains:
        for c in range(components_per_domain):
            component = f"{domain.value} C{c}"
            for idx in range(questions_per_component):
                questions.append(
                    Question(
                        id=f"{domain.letter}{c}{idx}",
                        domain=domain,
                        component=component,
                        tag=f"{domain.value} Tag {c}",
                        text=f"{component} statement #{idx}",
                    )
                )

    for side in EIComponent:
        for idx in range(ei_per_side):
            questions.append(
                Question(
                    id=f"{side.value[0]}I{idx}",
                    domain=Domain.EI,
                    component=side.value,
                    tag=side.value,
                    text=f"{side.value} statement #{idx}",
                )
            )

    return questions


def answers_for(questions: list[Question], scores: dict[str, int], default: int = 4) -> dict[str, int]:
    """Answer every question, using per-component scores where given."""

    return {q.id: scores.get(q.component, default) for q in questions}


@pytest.fixture
def synthetic_catalog() -> Catalog:
    return build_catalog(build_synthetic_catalog())
