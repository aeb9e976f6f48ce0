"""Ingestion gate: the only path by which items enter the corpus."""

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Protocol

import structlog
from pydantic import ValidationError

from curator.classifier.methodology import ClassificationSignals, MethodologyClassifier
from curator.config.effective import EffectiveConfig
from curator.config.schemas.base import TopicPolicy
from curator.config.schemas.catalog import CatalogFeed
from curator.data_model.scores import Engagement, ScoreBreakdown
from curator.ingest.hash import compute_dedupe_hash, extract_doi, item_id_from_hash
from curator.ingest.models import (
    Accepted,
    IngestOutcome,
    NormalizedItem,
    RawItem,
    Rejected,
    RejectionReason,
)
from curator.ingest.normalizer import normalize, parse_raw_item
from curator.ranker.engagement import EngagementAggregator
from curator.ranker.scorer import ScoreEngine
from curator.store.errors import ItemNotFoundError
from curator.store.models import Item
from curator.taxonomy.errors import InvalidTopicError
from curator.taxonomy.tagger import TopicTagger
from curator.taxonomy.validator import TaxonomyValidator


logger = structlog.get_logger()


class ItemSink(Protocol):
    """Where accepted items are written."""

    def add_item(self, item: Item) -> bool:
        """Persist an item; False if it was a duplicate."""
        ...


class EngagementStore(Protocol):
    """Storage operations used when engagement counters change."""

    def merge_engagement(self, item_id: str, delta: Engagement) -> Engagement:
        """Add a delta to an item's counters."""
        ...

    def get_item(self, item_id: str) -> Item | None:
        """Fetch an item by id."""
        ...

    def set_score_breakdown(self, item_id: str, breakdown: ScoreBreakdown) -> None:
        """Replace an item's score breakdown."""
        ...


def _utcnow() -> datetime:
    return datetime.now(UTC)


class IngestionGate:
    """Validates, classifies and scores raw items from approved feeds."""

    def __init__(
        self,
        validator: TaxonomyValidator,
        *,
        tagger: TopicTagger | None = None,
        classifier: MethodologyClassifier | None = None,
        score_engine: ScoreEngine | None = None,
        topic_policy: TopicPolicy = TopicPolicy.REJECT,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the gate.

        Args:
            validator: Taxonomy validator.
            tagger: Keyword tagger adding topics from title and excerpt.
            classifier: Methodology classifier.
            score_engine: Engine computing scores at ingestion and after
                engagement changes.
            topic_policy: Reject items with unknown tags, or strip the tags.
            clock: Source of the current time for recency.
        """
        self._validator = validator
        self._tagger = tagger
        self._classifier = classifier or MethodologyClassifier()
        self._score_engine = score_engine or ScoreEngine()
        self._topic_policy = topic_policy
        self._clock = clock
        self._log = logger.bind(component="ingest")

    @classmethod
    def from_config(
        cls,
        config: EffectiveConfig,
        clock: Callable[[], datetime] = _utcnow,
    ) -> "IngestionGate":
        """Build a gate wired from an effective configuration."""
        taxonomy = config.build_taxonomy()
        policy = config.policy
        return cls(
            TaxonomyValidator(taxonomy),
            tagger=TopicTagger(taxonomy, max_topics=policy.ingestion.max_auto_topics),
            score_engine=ScoreEngine(policy.scoring, EngagementAggregator(policy.engagement)),
            topic_policy=policy.ingestion.topic_policy,
            clock=clock,
        )

    def process(
        self,
        feed: CatalogFeed,
        raw: RawItem | Mapping[str, object],
    ) -> IngestOutcome:
        """Run a raw item through the gate without persisting it.

        Args:
            feed: Catalog entry the item came from.
            raw: Payload, parsed or as a raw mapping.

        Returns:
            Accepted with the built item, or Rejected with a reason.
        """
        if not feed.is_approved:
            return self._reject(RejectionReason.FEED_NOT_APPROVED, {"feed": feed.name})

        if isinstance(raw, Mapping):
            try:
                raw = parse_raw_item(raw)
            except ValidationError as e:
                errors = [
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
                ]
                return self._reject(
                    RejectionReason.MALFORMED_PAYLOAD,
                    {"feed": feed.name, "errors": errors},
                )

        normalized = normalize(raw)
        candidates = list(normalized.declared_topics)
        if self._tagger is not None:
            candidates.extend(self._tagger.tag(normalized.title, normalized.excerpt))

        stripped: dict[str, int] = {}
        if self._topic_policy is TopicPolicy.REJECT:
            try:
                topics = self._validator.validate(candidates)
            except InvalidTopicError as e:
                return self._reject(
                    RejectionReason.INVALID_TOPICS,
                    {"feed": feed.name, "source_id": normalized.source_id, **e.to_dict()},
                )
        else:
            topics, error = self._validator.strip_invalid(candidates)
            if error is not None:
                stripped = error.invalid_topics

        item = self._build_item(feed, normalized, topics)
        self._log.info(
            "item_accepted",
            item_id=item.id,
            feed=feed.name,
            methodology=item.methodology.value,
            topics=list(item.topics),
            total_score=item.total_score,
        )
        return Accepted(item=item, stripped_topics=stripped)

    def ingest(
        self,
        feed: CatalogFeed,
        raw: RawItem | Mapping[str, object],
        sink: ItemSink,
    ) -> IngestOutcome:
        """Process an item and persist it when accepted.

        Returns:
            The gate outcome; an accepted item already in the corpus comes
            back as Rejected(duplicate).
        """
        outcome = self.process(feed, raw)
        if isinstance(outcome, Rejected):
            return outcome
        if not sink.add_item(outcome.item):
            return self._reject(
                RejectionReason.DUPLICATE,
                {"item_id": outcome.item.id, "dedupe_hash": outcome.item.dedupe_hash},
            )
        return outcome

    def record_engagement(
        self,
        item_id: str,
        delta: Engagement,
        store: EngagementStore,
    ) -> Item:
        """Merge new engagement into an item and recompute its score.

        Archived items take the counters but keep their score.

        Args:
            item_id: Item to update.
            delta: Non-negative counter increments.
            store: Storage holding the item.

        Returns:
            The item as stored after the update.

        Raises:
            ItemNotFoundError: If the item does not exist.
        """
        store.merge_engagement(item_id, delta)
        item = store.get_item(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        if item.archived:
            self._log.debug("archived_item_not_rescored", item_id=item_id)
            return item

        breakdown = self._score_engine.rescore_item(item, self._clock())
        store.set_score_breakdown(item_id, breakdown)
        self._log.info(
            "engagement_rescored",
            item_id=item_id,
            previous_score=item.total_score,
            total_score=breakdown.total_score,
        )
        return item.model_copy(update={"score_breakdown": breakdown})

    def _build_item(
        self,
        feed: CatalogFeed,
        normalized: NormalizedItem,
        topics: tuple[str, ...],
    ) -> Item:
        methodology = self._classifier.classify(
            ClassificationSignals(
                source_type=normalized.source_type,
                publication_types=normalized.publication_types,
                is_preprint=normalized.is_preprint,
                text=f"{normalized.title} {normalized.excerpt}",
            )
        )
        doi = extract_doi(normalized.doi, normalized.url)
        dedupe_hash = compute_dedupe_hash(normalized.url, normalized.title, doi)
        now = self._clock()
        item = Item(
            id=item_id_from_hash(dedupe_hash),
            dedupe_hash=dedupe_hash,
            title=normalized.title,
            url=normalized.url,
            source_type=normalized.source_type,
            published_at=normalized.published_at,
            topics=topics,
            methodology=methodology,
            engagement=normalized.engagement,
            community_rating=normalized.community_rating,
            community_vote_count=normalized.community_vote_count,
            excerpt=normalized.excerpt,
            source_id=normalized.source_id,
            feed_id=feed.feed_id,
            author_or_channel=normalized.author_or_channel,
            journal_name=normalized.journal_name,
            doi=doi,
            ingested_at=now,
        )
        return item.model_copy(
            update={"score_breakdown": self._score_engine.rescore_item(item, now)}
        )

    def _reject(self, reason: RejectionReason, detail: dict[str, object]) -> Rejected:
        self._log.info("item_rejected", reason=reason.value, **detail)
        return Rejected(reason=reason, detail=detail)
