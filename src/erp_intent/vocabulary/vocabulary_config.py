"""
Vocabulary configuration schema.

Authored data (keywords, synonyms, patterns, weights, thresholds) that drives
all scoring. Validated once at startup; immutable afterwards.
"""
import re
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..interaction.intent_types import CrudAction


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class Settings(_Frozen):
    """Global settings. ``min_confidence`` is the default resolution gate."""
    min_confidence: float = Field(gt=0.0, le=1.0)


class Normalization(_Frozen):
    spelling_corrections: Dict[str, str] = Field(default_factory=dict)
    filler_words: List[str] = Field(default_factory=list)
    stop_words: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _corrections_do_not_chain(self) -> "Normalization":
        # A replacement that is itself a correction key would make normalization non-idempotent
        keys = {k.lower() for k in self.spelling_corrections}
        for wrong in keys:
            if len(wrong.split()) != 1:
                raise ValueError(f"Spelling correction key '{wrong}' must be a single word")
        for wrong, right in self.spelling_corrections.items():
            for word in right.lower().split():
                if word in keys:
                    raise ValueError(
                        f"Spelling correction '{wrong}' -> '{right}' produces another "
                        f"correction key '{word}'"
                    )
        return self


class ModuleVocabulary(_Frozen):
    keywords: List[str] = Field(default_factory=list)
    related_words: List[str] = Field(default_factory=list)
    direct_synonyms: Dict[str, List[str]] = Field(default_factory=dict)


class ActionVocabulary(_Frozen):
    keywords: List[str] = Field(default_factory=list)
    synonyms: List[str] = Field(default_factory=list)
    typical_expressions: List[str] = Field(default_factory=list)


class Vocabulary(_Frozen):
    modules: Dict[str, ModuleVocabulary]
    actions: Dict[str, ActionVocabulary]

    @field_validator("modules")
    @classmethod
    def _modules_not_empty(cls, value):
        if not value:
            raise ValueError("at least one module must be configured")
        return value

    @field_validator("actions")
    @classmethod
    def _actions_are_crud(cls, value):
        if not value:
            raise ValueError("at least one action must be configured")
        for name in value:
            if CrudAction.parse(name) is None:
                raise ValueError(f"unknown action '{name}', expected one of CREATE/READ/UPDATE/DELETE")
        return value


class Patterns(_Frozen):
    detect_action: Dict[str, List[str]] = Field(default_factory=dict)
    detect_module: Dict[str, List[str]] = Field(default_factory=dict)
    extract_parameters: Dict[str, List[str]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _patterns_compile(self) -> "Patterns":
        for section in (self.detect_action, self.detect_module, self.extract_parameters):
            for key, patterns in section.items():
                for pattern in patterns:
                    try:
                        re.compile(pattern.replace("{field}", "x").replace("[algo]", "x"))
                    except re.error as e:
                        raise ValueError(f"invalid pattern for '{key}': {pattern!r} ({e})")
        return self


class ModuleScoring(_Frozen):
    exact_match: float = Field(ge=0.0)
    whole_word_match: float = Field(ge=0.0)
    partial_match: float = Field(ge=0.0)
    related_word: float = Field(ge=0.0)
    pattern_bonus: float = Field(default=1.0, ge=0.0)
    threshold: float = Field(ge=0.0)


class ActionScoring(_Frozen):
    exact_match: float = Field(ge=0.0)
    whole_word_match: float = Field(ge=0.0)
    partial_match: float = Field(ge=0.0)
    typical_expression: float = Field(ge=0.0)
    pattern_bonus: float = Field(default=0.5, ge=0.0)
    threshold: float = Field(ge=0.0)


class EndpointScoring(_Frozen):
    """Weights of the five endpoint signals. Relevance dominates by default."""
    intent_weight: float = Field(default=0.1, ge=0.0)
    description_weight: float = Field(default=0.1, ge=0.0)
    keyword_weight: float = Field(default=0.1, ge=0.0)
    path_weight: float = Field(default=0.1, ge=0.0)
    relevance_weight: float = Field(default=0.6, ge=0.0)
    threshold: float = Field(default=0.2, ge=0.0, le=1.0)
    path_minor_credit: float = Field(default=0.3, ge=0.0, le=1.0)
    irrelevant_relevance: float = Field(default=0.02, ge=0.0, le=1.0)


class Scoring(_Frozen):
    module: ModuleScoring
    action: ActionScoring
    endpoint: EndpointScoring = Field(default_factory=EndpointScoring)


class Relevance(_Frozen):
    irrelevant_terms: List[str] = Field(default_factory=list)
    technical_tokens: List[str] = Field(
        default_factory=lambda: ["api", "v1", "v2", "v3", "json", "http", "https", "www", "rest"]
    )


class Defaults(_Frozen):
    module: str = "VENTAS"
    action: str = "READ"

    @field_validator("action")
    @classmethod
    def _action_is_crud(cls, value):
        if CrudAction.parse(value) is None:
            raise ValueError(f"unknown default action '{value}'")
        return value


class VocabularyConfig(_Frozen):
    version: str = "1.0.0"
    description: str = ""
    settings: Settings
    normalization: Normalization = Field(default_factory=Normalization)
    vocabulary: Vocabulary
    patterns: Patterns
    scoring: Scoring
    relevance: Relevance = Field(default_factory=Relevance)
    defaults: Defaults = Field(default_factory=Defaults)


REQUIRED_SECTIONS = ("settings", "vocabulary", "patterns", "scoring")
