"""Keyword-based topic tagging.

Suggests taxonomy topics for an item from its title and excerpt. Only
topics that declare keywords take part; every suggestion is a taxonomy
name, so tagger output always validates.
"""

import re
from dataclasses import dataclass

from curator.taxonomy.vocabulary import Taxonomy


DEFAULT_MAX_TOPICS = 5

# Short keywords like "IV" or "RCT" would match inside longer words.
_SHORT_KEYWORD_THRESHOLD = 4
_WORD_CHARS_ONLY = re.compile(r"^\w+$")


def _compile_keyword(keyword: str) -> re.Pattern[str]:
    """Compile a keyword, anchoring short word-only keywords at word boundaries."""
    escaped = re.escape(keyword.strip())
    if len(keyword) <= _SHORT_KEYWORD_THRESHOLD and _WORD_CHARS_ONLY.match(keyword):
        return re.compile(rf"\b{escaped}\b", re.IGNORECASE)
    return re.compile(escaped, re.IGNORECASE)


@dataclass(frozen=True)
class _TopicPatterns:
    name: str
    patterns: tuple[re.Pattern[str], ...]


class TopicTagger:
    """Matches text against per-topic keyword patterns compiled once."""

    def __init__(self, taxonomy: Taxonomy, max_topics: int = DEFAULT_MAX_TOPICS) -> None:
        """Initialize the tagger.

        Args:
            taxonomy: Vocabulary whose keywords drive matching.
            max_topics: Cap on the number of suggested topics.
        """
        self._max_topics = max_topics
        self._topics = tuple(
            _TopicPatterns(name=name, patterns=tuple(_compile_keyword(kw) for kw in keywords))
            for name, keywords in taxonomy.keywords
        )

    @property
    def topic_count(self) -> int:
        """Number of topics with keywords."""
        return len(self._topics)

    def tag(self, *texts: str | None) -> tuple[str, ...]:
        """Suggest topics for the given texts.

        Topics are returned in taxonomy order, each at most once, capped at
        ``max_topics``.

        Args:
            texts: Title, excerpt or other text fragments; ``None`` is skipped.

        Returns:
            Matching topic names.
        """
        haystack = " ".join(text for text in texts if text)
        if not haystack or self._max_topics == 0:
            return ()

        matched: list[str] = []
        for topic in self._topics:
            if any(pattern.search(haystack) for pattern in topic.patterns):
                matched.append(topic.name)
                if len(matched) >= self._max_topics:
                    break
        return tuple(matched)
