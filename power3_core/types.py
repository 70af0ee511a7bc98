from __future__ import annotations
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List


class Domain(str, Enum):
    VISION = "Vision"
    PEOPLE = "People"
    EXECUTION = "Execution"
    EI = "E/I"

    @property
    def letter(self) -> str:
        return _DOMAIN_LETTERS[self]


_DOMAIN_LETTERS = {
    Domain.VISION: "V",
    Domain.PEOPLE: "P",
    Domain.EXECUTION: "E",
    Domain.EI: "",
}

# Ranked domains, in the fixed order used to break ties.
SCORED_DOMAINS: tuple[Domain, ...] = (Domain.VISION, Domain.PEOPLE, Domain.EXECUTION)


class EIComponent(str, Enum):
    EXTRAVERSION = "Extraversion"
    INTROVERSION = "Introversion"


class Orientation(str, Enum):
    LEANING_EXTRAVERTED = "Leaning Extraverted"
    LEANING_INTROVERTED = "Leaning Introverted"
    STRONGLY_EXTRAVERTED = "Strongly Extraverted"
    STRONGLY_INTROVERTED = "Strongly Introverted"

    @property
    def code(self) -> str:
        return "E" if self.value.endswith("Extraverted") else "I"


@dataclass(frozen=True)
class Question:
    id: str
    domain: Domain
    component: str
    tag: str
    text: str = ""

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "Question":
        return Question(
            id=str(raw["id"]),
            domain=Domain(raw["domain"]),
            component=str(raw["component"]),
            tag=str(raw.get("tag") or ""),
            text=str(raw.get("text") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "domain": self.domain.value,
            "component": self.component,
            "tag": self.tag,
            "text": self.text,
        }


@dataclass(frozen=True)
class Response:
    question_id: str
    score: int


@dataclass(frozen=True)
class SelfAssessment:
    vision: float
    people: float
    execution: float
    extraversion: float = 50.0

    def domain_value(self, domain: Domain) -> float:
        return {
            Domain.VISION: self.vision,
            Domain.PEOPLE: self.people,
            Domain.EXECUTION: self.execution,
        }[domain]


@dataclass(frozen=True)
class ComponentScore:
    component: str
    domain: Domain
    tag: str
    average: float


@dataclass(frozen=True)
class CategoryScore:
    category: Domain
    average: float
    rank: int


@dataclass(frozen=True)
class ExtraversionIntroversionScore:
    extraversion_average: float
    introversion_average: float
    orientation: Orientation

    @property
    def orientation_code(self) -> str:
        return self.orientation.code


@dataclass(frozen=True)
class AssessmentResults:
    personality_type: str
    category_scores: List[CategoryScore]
    component_scores: List[ComponentScore]
    self_assessment: SelfAssessment
    dominant_traits: List[str]
    ei_score: ExtraversionIntroversionScore
    meta: Dict[str, Any] = field(default_factory=dict)

    def category(self, domain: Domain) -> CategoryScore | None:
        return next((c for c in self.category_scores if c.category == domain), None)

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["category_scores"] = [
            {"category": c.category.value, "average": c.average, "rank": c.rank}
            for c in self.category_scores
        ]
        out["component_scores"] = [
            {"component": c.component, "domain": c.domain.value, "tag": c.tag, "average": c.average}
            for c in self.component_scores
        ]
        out["ei_score"] = {
            "extraversion_average": self.ei_score.extraversion_average,
            "introversion_average": self.ei_score.introversion_average,
            "orientation": self.ei_score.orientation.value,
            "orientation_code": self.ei_score.orientation_code,
        }
        return out

    @staticmethod
    def from_dict(raw: Dict[str, Any]) -> "AssessmentResults":
        """Rebuild results persisted with ``to_dict``."""
        ei = raw["ei_score"]
        return AssessmentResults(
            personality_type=raw["personality_type"],
            category_scores=[
                CategoryScore(category=Domain(c["category"]), average=c["average"], rank=c["rank"])
                for c in raw.get("category_scores", [])
            ],
            component_scores=[
                ComponentScore(component=c["component"], domain=Domain(c["domain"]), tag=c["tag"], average=c["average"])
                for c in raw.get("component_scores", [])
            ],
            self_assessment=SelfAssessment(**raw["self_assessment"]),
            dominant_traits=list(raw.get("dominant_traits", [])),
            ei_score=ExtraversionIntroversionScore(
                extraversion_average=ei["extraversion_average"],
                introversion_average=ei["introversion_average"],
                orientation=Orientation(ei["orientation"]),
            ),
            meta=dict(raw.get("meta") or {}),
        )
