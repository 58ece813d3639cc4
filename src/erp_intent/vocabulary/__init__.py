"""
Vocabulary layer: authored keywords, synonyms, patterns and scoring weights.

The configuration is validated once at startup (pydantic) and compiled into
an immutable VocabularyIndex shared by every request.
"""
from .vocabulary_config import VocabularyConfig
from .vocabulary_index import VocabularyIndex, tokenize, whole_word_regex
from .vocabulary_loader import (
    DEFAULT_VOCABULARY_PATH,
    load_vocabulary_config,
    parse_vocabulary_config,
)

__all__ = [
    "VocabularyConfig",
    "VocabularyIndex",
    "tokenize",
    "whole_word_regex",
    "DEFAULT_VOCABULARY_PATH",
    "load_vocabulary_config",
    "parse_vocabulary_config",
]
