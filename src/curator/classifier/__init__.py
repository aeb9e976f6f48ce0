"""Study-methodology classification."""

from curator.classifier.methodology import ClassificationSignals, MethodologyClassifier


__all__ = ["ClassificationSignals", "MethodologyClassifier"]
