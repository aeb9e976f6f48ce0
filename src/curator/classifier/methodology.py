"""Methodology classification for ingested items.

Assigns exactly one label from the closed ``Methodology`` set. The rule
order is fixed:

1. Declared publication types (e.g. PubMed) mapped through a table,
   strongest design first when several are declared.
2. Preprint flag.
3. Community sources (reddit, youtube, podcast) are NA.
4. Keyword patterns over title and excerpt.
5. NA.
"""

import re
from dataclasses import dataclass
from typing import Final

from curator.config.schemas.base import SOCIAL_SOURCE_TYPES, Methodology, SourceType


PUBLICATION_TYPE_MAP: Final[dict[str, Methodology]] = {
    "meta-analysis": Methodology.META,
    "randomized controlled trial": Methodology.RCT,
    "controlled clinical trial": Methodology.RCT,
    "cohort study": Methodology.COHORT,
    "observational study": Methodology.COHORT,
    "longitudinal study": Methodology.COHORT,
    "case report": Methodology.CASE,
    "case reports": Methodology.CASE,
    "systematic review": Methodology.REVIEW,
    "review": Methodology.REVIEW,
    "preprint": Methodology.PREPRINT,
}

# Strongest design first; used when several publication types are declared.
DECLARED_PRECEDENCE: Final[tuple[Methodology, ...]] = (
    Methodology.META,
    Methodology.RCT,
    Methodology.COHORT,
    Methodology.CASE,
    Methodology.REVIEW,
    Methodology.PREPRINT,
)

TEXT_PATTERNS: Final[tuple[tuple[re.Pattern[str], Methodology], ...]] = (
    (re.compile(r"randomi[sz]ed|\brct\b", re.IGNORECASE), Methodology.RCT),
    (re.compile(r"cohort", re.IGNORECASE), Methodology.COHORT),
    (re.compile(r"meta[- ]analys[ie]s", re.IGNORECASE), Methodology.META),
    (re.compile(r"case (?:study|report)", re.IGNORECASE), Methodology.CASE),
    (re.compile(r"review", re.IGNORECASE), Methodology.REVIEW),
)


@dataclass(frozen=True)
class ClassificationSignals:
    """Everything the classifier looks at.

    Attributes:
        source_type: Feed kind the item came from.
        publication_types: Declared publication types, if the source has them.
        is_preprint: Whether the source marks the item as a preprint.
        text: Title and excerpt.
    """

    source_type: SourceType
    publication_types: tuple[str, ...] = ()
    is_preprint: bool = False
    text: str = ""


class MethodologyClassifier:
    """Total, side-effect-free methodology classifier."""

    def classify(self, signals: ClassificationSignals) -> Methodology:
        """Classify an item.

        Args:
            signals: Normalized classification inputs.

        Returns:
            A methodology label; never None.
        """
        declared = self._from_publication_types(signals.publication_types)
        if declared is not None:
            return declared

        if signals.is_preprint:
            return Methodology.PREPRINT

        if signals.source_type in SOCIAL_SOURCE_TYPES:
            return Methodology.NA

        for pattern, methodology in TEXT_PATTERNS:
            if pattern.search(signals.text):
                return methodology

        return Methodology.NA

    def _from_publication_types(self, publication_types: tuple[str, ...]) -> Methodology | None:
        mapped = {
            PUBLICATION_TYPE_MAP[key]
            for key in (value.strip().lower() for value in publication_types)
            if key in PUBLICATION_TYPE_MAP
        }
        for methodology in DECLARED_PRECEDENCE:
            if methodology in mapped:
                return methodology
        return None
