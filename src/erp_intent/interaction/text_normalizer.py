"""
Text normalizer for incoming messages.

Canonicalizes raw input before scoring: lower-case, spelling fixes, filler
removal, stop-word collapsing, whitespace cleanup. Pure and idempotent.
"""
import re
from ..vocabulary import VocabularyIndex

_WHITESPACE_RE = re.compile(r"\s+")


class TextNormalizer:
    """
    Canonicalizes messages using the configured normalization tables.

    Usage:
        normalizer = TextNormalizer(index)
        normalizer.normalize("Porfa lsitar los  pacientes")  # "listar pacientes"
    """

    def __init__(self, index: VocabularyIndex):
        self._index = index

    def normalize(self, text: str) -> str:
        """
        Normalize text.

        Passes are repeated until the output is stable, so that
        normalize(normalize(x)) == normalize(x) for every input.

        :param text: Raw user message
        :return: Normalized text ("" for empty input)
        """
        if not text:
            return ""

        # Only the first pass can apply corrections; later passes only remove words
        current = self._single_pass(text)
        while True:
            normalized = self._single_pass(current)
            if normalized == current:
                return normalized
            current = normalized

    def _single_pass(self, text: str) -> str:
        normalized = text.lower()

        for pattern, replacement in self._index.spelling_corrections:
            normalized = pattern.sub(replacement, normalized)

        for pattern in self._index.filler_patterns:
            normalized = pattern.sub(" ", normalized)

        normalized = _WHITESPACE_RE.sub(" ", normalized).strip()

        for pattern in self._index.stop_word_patterns:
            normalized = pattern.sub("", normalized)

        return _WHITESPACE_RE.sub(" ", normalized).strip()
