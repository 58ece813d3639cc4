"""
Endpoint matching for a classified (module, action) pair.

Combines five lexical signals into a single [0, 1] score per candidate
endpoint and picks the best one, or rejects the whole set below threshold.
"""
import logging
import re
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..exceptions import LowConfidenceMatch, NoEndpointCandidate
from ..interaction.intent_types import CrudAction
from ..models import EndpointDescriptor
from ..vocabulary import VocabularyIndex, tokenize
from .relevance import TopicalRelevanceScorer
from .similarity import MIN_WORD_LENGTH, jaccard_similarity, keyword_overlap, words_related

logger = logging.getLogger(__name__)

_ROUTE_SPLIT_RE = re.compile(r"[/\-_.?=&{}:\s]+")


@dataclass(frozen=True)
class EndpointScore:
    """Per-signal breakdown of one endpoint's score, for explainability."""
    endpoint: EndpointDescriptor
    intent: float
    description: float
    keywords: float
    path: float
    relevance: float
    total: float

    def to_dict(self) -> dict:
        return {
            "route": self.endpoint.route,
            "intent": round(self.intent, 4),
            "description": round(self.description, 4),
            "keywords": round(self.keywords, 4),
            "path": round(self.path, 4),
            "relevance": round(self.relevance, 4),
            "total": round(self.total, 4),
        }


class EndpointMatcher:
    """
    Selects the single best endpoint for a message.

    Signals:
    1. Jaccard(message, endpoint intent text)
    2. Jaccard(message, endpoint description)
    3. Keyword overlap with the description
    4. Route-token match against the message and the module/action vocabulary
    5. Topical relevance (dominant by default)

    Deterministic: identical inputs always yield the same endpoint and score;
    ties go to the first candidate.
    """

    def __init__(self, index: VocabularyIndex, normalizer=None):
        """
        :param index: Vocabulary index
        :param normalizer: Optional TextNormalizer applied to endpoint texts
        """
        self._index = index
        self._normalizer = normalizer
        self._relevance = TopicalRelevanceScorer(index)

    @property
    def threshold(self) -> float:
        return self._index.endpoint_scoring.threshold

    def score_endpoint(
        self,
        text: str,
        module: str,
        action: CrudAction,
        endpoint: EndpointDescriptor,
    ) -> EndpointScore:
        """
        Score one endpoint against the normalized message.

        :return: EndpointScore with all five signals and the clamped total
        """
        weights = self._index.endpoint_scoring
        intent_text = self._normalize(endpoint.intent_text)
        description = self._normalize(endpoint.description)

        intent = jaccard_similarity(text, intent_text)
        desc = jaccard_similarity(text, description)
        keywords = keyword_overlap(text, description)
        path = self.path_score(text, endpoint.route, module, action)
        relevance = self._relevance.score(text, module, action)

        total = (
            intent * weights.intent_weight
            + desc * weights.description_weight
            + keywords * weights.keyword_weight
            + path * weights.path_weight
            + relevance * weights.relevance_weight
        )
        total = max(0.0, min(1.0, total))

        return EndpointScore(endpoint, intent, desc, keywords, path, relevance, total)

    def path_score(self, text: str, route: str, module: str, action: CrudAction) -> float:
        """
        Route-token match.

        Route tokens that appear in the message and in the module/action
        vocabulary get full credit; tokens that only appear in the message
        get minor credit. Technical tokens (api, v1, json, ...) are ignored.
        """
        tokens = self.route_tokens(route)
        if not tokens:
            return 0.0

        text_words = tokenize(text)
        vocabulary = self._index.topic_words(module, action)
        minor = self._index.endpoint_scoring.path_minor_credit

        credit = 0.0
        for token in tokens:
            if not any(words_related(token, word) for word in text_words):
                continue
            in_vocabulary = token in vocabulary or any(words_related(token, term) for term in vocabulary)
            credit += 1.0 if in_vocabulary else minor

        return min(credit / len(tokens), 1.0)

    def route_tokens(self, route: str) -> List[str]:
        """Meaningful tokens of a route, technical tokens and numbers removed."""
        tokens = []
        for token in _ROUTE_SPLIT_RE.split((route or "").lower()):
            if len(token) < MIN_WORD_LENGTH or token.isdigit():
                continue
            if token in self._index.technical_tokens:
                continue
            if token not in tokens:
                tokens.append(token)
        return tokens

    def rank(
        self,
        text: str,
        module: str,
        action: CrudAction,
        candidates: Sequence[EndpointDescriptor],
    ) -> List[EndpointScore]:
        """Score all candidates, best first (stable for ties)."""
        scores = [self.score_endpoint(text, module, action, ep) for ep in candidates]
        return sorted(scores, key=lambda s: s.total, reverse=True)

    def select_endpoint(
        self,
        text: str,
        module: str,
        action: CrudAction,
        candidates: Sequence[EndpointDescriptor],
    ) -> Tuple[EndpointDescriptor, float]:
        """
        Select the best endpoint.

        :param text: Normalized message
        :param module: Classified module
        :param action: Classified action
        :param candidates: Endpoints from the catalog for (module, action)
        :return: (endpoint, score)
        :raises NoEndpointCandidate: if candidates is empty
        :raises LowConfidenceMatch: if the best score is below threshold
        """
        if not candidates:
            raise NoEndpointCandidate(module, action.value)

        ranked = self.rank(text, module, action, candidates)
        best = ranked[0]
        logger.debug(f"Endpoint scores for '{text}': {[s.to_dict() for s in ranked]}")

        if best.total < self.threshold:
            raise LowConfidenceMatch(best.total, module, action.value)

        return best.endpoint, best.total

    def _normalize(self, text: str) -> str:
        if self._normalizer is None:
            return (text or "").lower()
        return self._normalizer.normalize(text or "")
