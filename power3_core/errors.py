from __future__ import annotations


class AssessmentError(ValueError):
    """Base class for assessment domain errors."""


class InconsistentCatalogError(AssessmentError):
    """A component is mapped to more than one domain, or an E/I entry is malformed."""


class InvalidResponseError(AssessmentError):
    """A response score falls outside the Likert scale."""


class SelfAssessmentError(AssessmentError):
    """Self-reported domain split does not add up to 100."""


class LinkError(AssessmentError):
    """Access link is unknown, expired or already used."""

    def __init__(self, code: str, reason: str):
        super().__init__(f"link {code!r} is {reason}")
        self.code = code
        self.reason = reason
