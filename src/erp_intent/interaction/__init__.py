"""
Interaction layer for message normalization and intent classification.

Sits between the API surface and the resolution layer, providing
deterministic (module, action) classification without LLM calls.
"""
from .intent_types import CrudAction, IntentResult
from .text_normalizer import TextNormalizer
from .intent_classifier import IntentClassifier

__all__ = ["CrudAction", "IntentResult", "TextNormalizer", "IntentClassifier"]
