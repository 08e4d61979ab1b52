"""
placeholder.py

Stand-in classifier that returns a fixed, well-formed result until a trained
model is configured. Evidence the operator skipped scores 0.0.
"""

from dataclasses import replace

from .base import (BreedCandidate, ClassificationResult, Classifier, Explanation,
                   Recommendations, certainty_for)

FIXED_BREEDS = (
    BreedCandidate("Gir", "ગીર", "Gujarat", 0.92,
                   ("Distinctive forehead", "Drooping ears", "White/red coat"), 0.85, 0.88, 0.94),
    BreedCandidate("Sahiwal", "साहीवाल", "Punjab/Haryana", 0.76,
                   ("Large size", "Reddish-brown coat", "Long ears"), 0.65, 0.72, 0.81),
    BreedCandidate("Red Sindhi", "रेड सिंधी", "Sindh/Rajasthan", 0.68,
                   ("Deep red coat", "Compact body", "Heat tolerance"), 0.58, 0.69, 0.77),
)

FIXED_FACTORS = (
    "Horn shape matches Gir pattern",
    "Ear configuration typical of Zebu breeds",
    "Cultural markers indicate Gujarat region",
)

FIXED_RECOMMENDATIONS = Recommendations(
    breeding="Excellent for milk production in hot climates",
    nutrition="High protein feed recommended",
    health="Regular vaccination schedule advised",
)


class PlaceholderClassifier(Classifier):
    name = "placeholder"

    def __init__(self, rng=None, jitter=0.05):
        # rng: optional random.Random; when given, confidences are perturbed
        self.rng = rng
        self.jitter = jitter

    def _confidence(self, base):
        if self.rng is None:
            return base
        return round(min(1.0, max(0.0, base + self.rng.uniform(-self.jitter, self.jitter))), 4)

    def classify(self, submission):
        has_markers = bool(submission.cultural_markers)
        has_audio = submission.audio is not None
        has_bio = submission.has_complete_biometrics

        breeds = []
        for b in FIXED_BREEDS:
            breeds.append(replace(
                b,
                confidence=self._confidence(b.confidence),
                cultural_score=b.cultural_score if has_markers else 0.0,
                audio_score=b.audio_score if has_audio else 0.0,
                biometric_score=b.biometric_score if has_bio else 0.0,
            ))
        breeds.sort(key=lambda b: b.confidence, reverse=True)

        factors = [f for f in FIXED_FACTORS if has_markers or "Cultural" not in f]
        top = breeds[0].confidence
        return ClassificationResult(
            top_breeds=tuple(breeds),
            explanation=Explanation(tuple(factors), top, certainty_for(top)),
            recommendations=FIXED_RECOMMENDATIONS,
        )
