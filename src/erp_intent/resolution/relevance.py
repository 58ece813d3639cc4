"""
Topical relevance scoring - decides whether a message is about ERP business data at all.

Meta-conversation ("tell me a joke", "who are you", "call the endpoint for
me") shares words with business requests often enough to fool structural
matching; this signal catches it.
"""
import logging
from typing import FrozenSet, List

from ..interaction.intent_types import CrudAction
from ..vocabulary import VocabularyIndex, tokenize
from .similarity import MIN_WORD_LENGTH, words_related

logger = logging.getLogger(__name__)


class TopicalRelevanceScorer:
    """
    Scores the share of a message's content words that belong to the
    module + action vocabulary.

    Only decides relevance, does not act on it.
    """

    def __init__(self, index: VocabularyIndex):
        self._index = index

    def has_irrelevant_terms(self, text: str) -> bool:
        """Check if the message contains a configured irrelevant term."""
        for pattern in self._index.irrelevant_patterns:
            if pattern.search(text):
                logger.debug(f"Irrelevant term '{pattern.pattern}' found in '{text}'")
                return True
        return False

    def score(self, text: str, module: str, action: CrudAction) -> float:
        """
        Relevance of the message to (module, action).

        :param text: Normalized message
        :param module: Classified module
        :param action: Classified action
        :return: Fraction in [0, 1]; forced to the configured floor when an
                 irrelevant term is present
        """
        if self.has_irrelevant_terms(text):
            return self._index.endpoint_scoring.irrelevant_relevance

        words = self._content_words(text)
        if not words:
            return 0.0

        vocabulary = self._index.topic_words(module, action)
        hits = sum(1 for word in words if self._in_vocabulary(word, vocabulary))
        return hits / len(words)

    @staticmethod
    def _content_words(text: str) -> List[str]:
        return [w for w in tokenize(text) if len(w) >= MIN_WORD_LENGTH and not w.isdigit()]

    @staticmethod
    def _in_vocabulary(word: str, vocabulary: FrozenSet[str]) -> bool:
        if word in vocabulary:
            return True
        return any(words_related(word, term) for term in vocabulary)
