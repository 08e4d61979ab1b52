"""Result types shared by every classifier, and the Classifier capability."""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, replace
from typing import Tuple

from .. import config

LOW, MEDIUM, HIGH = "Low", "Medium", "High"


def certainty_for(confidence, high=config.HIGH_CERTAINTY, medium=config.MEDIUM_CERTAINTY):
    if confidence >= high:
        return HIGH
    if confidence >= medium:
        return MEDIUM
    return LOW


@dataclass(frozen=True)
class BreedCandidate:
    name: str
    native_name: str
    region: str
    confidence: float
    characteristics: Tuple[str, ...] = ()
    cultural_score: float = 0.0
    audio_score: float = 0.0
    biometric_score: float = 0.0


@dataclass(frozen=True)
class Explanation:
    primary_factors: Tuple[str, ...]
    confidence: float
    certainty: str


@dataclass(frozen=True)
class Recommendations:
    breeding: str
    nutrition: str
    health: str


@dataclass(frozen=True)
class ClassificationResult:
    top_breeds: Tuple[BreedCandidate, ...]
    explanation: Explanation
    recommendations: Recommendations

    @property
    def primary(self):
        return self.top_breeds[0]

    def sorted(self):
        """Same result with top_breeds ordered by descending confidence."""
        ordered = tuple(sorted(self.top_breeds, key=lambda b: b.confidence, reverse=True))
        return replace(self, top_breeds=ordered)

    def to_dict(self):
        return asdict(self)


class Classifier(ABC):
    """Turns a (possibly partial) Submission into one ClassificationResult."""

    name = "classifier"

    @abstractmethod
    def classify(self, submission):
        raise NotImplementedError
