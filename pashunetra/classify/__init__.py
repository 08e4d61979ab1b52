"""Breed classifiers and the staged result pipeline.

The CNN classifier lives in `pashunetra.classify.cnn` and is imported on
demand so the station runs without torch installed."""

from .aggregator import ResultAggregator
from .base import (BreedCandidate, ClassificationResult, Classifier, Explanation,
                   Recommendations, certainty_for)
from .placeholder import PlaceholderClassifier

from .. import config


def make_classifier(kind=None, weights=None):
    kind = kind or config.CLASSIFIER
    if kind == "placeholder":
        return PlaceholderClassifier()
    if kind == "cnn":
        from .cnn import CnnBreedClassifier
        return CnnBreedClassifier(weights or config.WEIGHTS)
    raise ValueError(f"unknown classifier: {kind}")


__all__ = [
    "BreedCandidate",
    "ClassificationResult",
    "Classifier",
    "Explanation",
    "Recommendations",
    "PlaceholderClassifier",
    "ResultAggregator",
    "certainty_for",
    "make_classifier",
]
