"""
Lexical similarity measures used by endpoint matching.

All measures return a value in [0, 1].
"""
from typing import Set
from ..vocabulary import tokenize

MIN_WORD_LENGTH = 3


def content_words(text: str) -> Set[str]:
    """Words long enough to carry meaning (short particles are ignored)."""
    return {w for w in tokenize(text) if len(w) >= MIN_WORD_LENGTH}


def jaccard_similarity(text1: str, text2: str) -> float:
    """
    Jaccard similarity of the two texts' word sets.

    :return: |intersection| / |union|, or 0.0 if either side is empty
    """
    words1 = content_words(text1)
    words2 = content_words(text2)
    if not words1 or not words2:
        return 0.0
    return len(words1 & words2) / len(words1 | words2)


def keyword_overlap(text: str, description: str) -> float:
    """
    Keyword overlap between a message and an endpoint description.

    Exact word matches earn a full point, substring matches in either
    direction ("paciente" / "pacientes") earn half a point. The total is
    normalized by the description length.
    """
    text_words = sorted(content_words(text))
    desc_words = sorted(content_words(description))
    if not desc_words:
        return 0.0

    hits = 0.0
    for word in text_words:
        if word in desc_words:
            hits += 1.0
            continue
        if any(word in desc_word or desc_word in word for desc_word in desc_words):
            hits += 0.5

    return min(hits / len(desc_words), 1.0)


def words_related(word: str, other: str) -> bool:
    """True when two words are equal or one is an inflection-like prefix of the other."""
    if word == other:
        return True
    shorter, longer = sorted((word, other), key=len)
    return len(shorter) >= 4 and longer.startswith(shorter)
