"""
Deterministic intent classifier.

Scores every candidate module and action against the normalized message using
the vocabulary weights. No LLM, no learned models: fast, safe, predictable.
"""
import logging
from typing import Iterable, List, Pattern, Sequence, Tuple

from ..vocabulary import VocabularyIndex, whole_word_regex
from .intent_types import CrudAction, IntentResult

logger = logging.getLogger(__name__)

NOMINAL_FALLBACK_SCORE = 0.0


def score_terms(
    text: str,
    terms: Iterable[str],
    exact: float,
    whole_word: float,
    partial: float,
) -> float:
    """
    Score vocabulary terms against text.

    Each term earns the best tier it reaches: exact (whole text equals the
    term), whole word (delimited occurrence), or partial (substring).
    """
    score = 0.0
    for term in terms:
        if not term:
            continue
        if text == term:
            score += exact
        elif whole_word_regex(term).search(text):
            score += whole_word
        elif term in text:
            score += partial
    return score


def score_whole_words(text: str, terms: Iterable[str], weight: float) -> float:
    """Award ``weight`` for each term that appears as a delimited word."""
    return sum(weight for term in terms if term and whole_word_regex(term).search(text))


def score_patterns(text: str, patterns: Sequence[Pattern], weight: float) -> float:
    """Award ``weight`` for each regex that matches."""
    return sum(weight for pattern in patterns if pattern.search(text))


def _best(candidates: List[Tuple[object, float]]) -> Tuple[object, float]:
    # Strict comparison keeps the first configured candidate on ties
    best_name, best_score = candidates[0]
    for name, score in candidates[1:]:
        if score > best_score:
            best_name, best_score = name, score
    return best_name, best_score


class IntentClassifier:
    """
    Classifies a normalized message into a (module, action) pair.

    Module and action scoring share the same shape with different weight
    tables. Ties go to the first candidate in configuration order; that rule
    is deterministic but carries no business meaning.
    """

    def __init__(self, index: VocabularyIndex):
        self._index = index

    def score_module(self, text: str, module: str) -> float:
        """
        Raw score of one module.

        :param text: Normalized message
        :param module: Module name
        :return: Sum of keyword, related-word and pattern weights (0.0 if unknown)
        """
        entry = self._index.module(module)
        if entry is None:
            return 0.0
        weights = self._index.module_scoring
        return (
            score_terms(text, entry.terms, weights.exact_match, weights.whole_word_match, weights.partial_match)
            + score_whole_words(text, entry.related, weights.related_word)
            + score_patterns(text, entry.patterns, weights.pattern_bonus)
        )

    def score_action(self, text: str, action: CrudAction) -> float:
        """
        Raw score of one action.

        :param text: Normalized message
        :param action: CRUD action
        :return: Sum of keyword, typical-expression and pattern weights
        """
        entry = self._index.action(action)
        if entry is None:
            return 0.0
        weights = self._index.action_scoring
        return (
            score_terms(text, entry.terms, weights.exact_match, weights.whole_word_match, weights.partial_match)
            + score_patterns(text, entry.expressions, weights.typical_expression)
            + score_patterns(text, entry.patterns, weights.pattern_bonus)
        )

    def classify_action(self, text: str) -> Tuple[CrudAction, float]:
        """
        Pick the best action for the message.

        :param text: Normalized message
        :return: (action, score); the configured default with a nominal
                 score when nothing reaches the action threshold
        """
        candidates = [(action, self.score_action(text, action)) for action in self._index.actions]
        if not candidates:
            return self._index.default_action, NOMINAL_FALLBACK_SCORE

        action, score = _best(candidates)
        if score < self._index.action_scoring.threshold:
            logger.debug(f"Action score {score:.2f} below threshold, using default {self._index.default_action.value}")
            return self._index.default_action, NOMINAL_FALLBACK_SCORE
        return action, score

    def classify_module(self, text: str, allowed_modules: Sequence[str]) -> Tuple[str, float]:
        """
        Pick the best allowed module for the message.

        :param text: Normalized message
        :param allowed_modules: Modules the caller may use
        :return: (module, score); the configured default with a nominal
                 score when no module is allowed or none reaches the threshold
        """
        candidates = [(module, self.score_module(text, module)) for module in self._candidate_modules(allowed_modules)]
        if not candidates:
            return self._index.default_module, NOMINAL_FALLBACK_SCORE

        module, score = _best(candidates)
        if score < self._index.module_scoring.threshold:
            logger.debug(f"Module score {score:.2f} below threshold, using default {self._index.default_module}")
            return self._index.default_module, NOMINAL_FALLBACK_SCORE
        return module, score

    def classify(self, text: str, allowed_modules: Sequence[str]) -> IntentResult:
        """
        Classify the message into a (module, action) pair.

        The combined score per module is module score + action score, with
        sub-threshold module scores forced to zero first so that a strong
        action keyword cannot carry an irrelevant module.

        :param text: Normalized message
        :param allowed_modules: Modules the caller may use
        :return: IntentResult
        """
        action, action_score = self.classify_action(text)

        threshold = self._index.module_scoring.threshold
        combined = []
        for module in self._candidate_modules(allowed_modules):
            module_score = self.score_module(text, module)
            if module_score < threshold:
                module_score = 0.0
            combined.append((module, module_score, module_score + action_score))

        best = None
        for candidate in combined:
            if best is None or candidate[2] > best[2]:
                best = candidate

        if best is None or best[1] == 0.0:
            result = IntentResult(
                module=self._index.default_module,
                action=action,
                score=action_score + NOMINAL_FALLBACK_SCORE,
                provisional=True,
            )
        else:
            result = IntentResult(
                module=best[0],
                action=action,
                score=best[2],
                provisional=False,
            )

        logger.debug(
            f"Classified '{text}' as {result.module}/{result.action.value} "
            f"(score={result.score:.2f}, provisional={result.provisional})"
        )
        return result

    def _candidate_modules(self, allowed_modules: Sequence[str]) -> List[str]:
        """Allowed modules in configuration order, then unconfigured allowed modules."""
        allowed = list(dict.fromkeys(allowed_modules or []))
        configured = [m for m in self._index.module_names if m in allowed]
        return configured + [m for m in allowed if m not in configured]
