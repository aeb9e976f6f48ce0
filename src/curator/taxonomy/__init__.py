"""Topic taxonomy: validation, tagging and catalog audit."""

from curator.taxonomy.errors import InvalidTopicError
from curator.taxonomy.tagger import TopicTagger
from curator.taxonomy.validator import TaxonomyValidator
from curator.taxonomy.vocabulary import Taxonomy


__all__ = ["InvalidTopicError", "Taxonomy", "TaxonomyValidator", "TopicTagger"]
