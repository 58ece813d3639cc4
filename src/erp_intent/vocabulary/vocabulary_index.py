"""
Vocabulary index built once from VocabularyConfig.

Holds precompiled regexes and flattened term lists so scoring never touches
raw configuration. Process-wide and read-only: safe to share across workers.
"""
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, List, Mapping, Optional, Pattern, Tuple

from ..interaction.intent_types import CrudAction
from .vocabulary_config import (
    ActionScoring,
    EndpointScoring,
    ModuleScoring,
    VocabularyConfig,
)

_WORD_RE = re.compile(r"\w+", re.UNICODE)


def whole_word_regex(term: str) -> Pattern:
    """Compile a case-insensitive, delimited match for a literal term."""
    return re.compile(rf"(?<!\w){re.escape(term.lower())}(?!\w)", re.IGNORECASE)


def tokenize(text: str) -> List[str]:
    """Split text into lower-cased word tokens."""
    return _WORD_RE.findall((text or "").lower())


def _unique(items) -> Tuple[str, ...]:
    seen = []
    for item in items:
        item = item.strip().lower()
        if item and item not in seen:
            seen.append(item)
    return tuple(seen)


@dataclass(frozen=True)
class ModuleEntry:
    name: str
    terms: Tuple[str, ...]
    related: Tuple[str, ...]
    patterns: Tuple[Pattern, ...]
    words: FrozenSet[str]


@dataclass(frozen=True)
class ActionEntry:
    action: CrudAction
    terms: Tuple[str, ...]
    expressions: Tuple[Pattern, ...]
    patterns: Tuple[Pattern, ...]
    words: FrozenSet[str]


class VocabularyIndex:
    """
    Immutable lookup structure over the authored vocabulary.

    Candidate order (modules, actions) follows the configuration order; the
    classifier relies on it for deterministic tie-breaks.
    """

    def __init__(self, config: VocabularyConfig):
        self._config = config

        norm = config.normalization
        self.spelling_corrections: Tuple[Tuple[Pattern, str], ...] = tuple(
            (whole_word_regex(wrong), right.lower())
            for wrong, right in norm.spelling_corrections.items()
        )
        self.filler_patterns: Tuple[Pattern, ...] = tuple(
            whole_word_regex(word) for word in _unique(norm.filler_words)
        )
        self.stop_word_patterns: Tuple[Pattern, ...] = tuple(
            re.compile(rf"\s+{re.escape(word)}(?=\s+)", re.IGNORECASE)
            for word in _unique(norm.stop_words)
        )

        modules = {}
        for name, vocab in config.vocabulary.modules.items():
            synonyms = [s for key, values in vocab.direct_synonyms.items() for s in [key, *values]]
            terms = _unique([*vocab.keywords, *synonyms])
            related = _unique(vocab.related_words)
            patterns = tuple(
                re.compile(p, re.IGNORECASE) for p in config.patterns.detect_module.get(name, [])
            )
            words = frozenset(w for term in (*terms, *related) for w in tokenize(term))
            modules[name] = ModuleEntry(name, terms, related, patterns, words)
        self._modules: Mapping[str, ModuleEntry] = MappingProxyType(modules)

        actions = {}
        for name, vocab in config.vocabulary.actions.items():
            action = CrudAction.parse(name)
            terms = _unique([*vocab.keywords, *vocab.synonyms])
            expressions = tuple(
                re.compile(expr.replace("[algo]", r"\w+"), re.IGNORECASE)
                for expr in vocab.typical_expressions
            )
            patterns = tuple(
                re.compile(p, re.IGNORECASE) for p in config.patterns.detect_action.get(name, [])
            )
            words = frozenset(w for term in terms for w in tokenize(term))
            actions[action] = ActionEntry(action, terms, expressions, patterns, words)
        self._actions: Mapping[CrudAction, ActionEntry] = MappingProxyType(actions)

        self._extraction: Mapping[str, Tuple[str, ...]] = MappingProxyType({
            kind.lower(): tuple(templates)
            for kind, templates in config.patterns.extract_parameters.items()
        })

        self.irrelevant_patterns: Tuple[Pattern, ...] = tuple(
            whole_word_regex(term) for term in _unique(config.relevance.irrelevant_terms)
        )
        self.technical_tokens: FrozenSet[str] = frozenset(_unique(config.relevance.technical_tokens))

        self.default_module: str = config.defaults.module
        self.default_action: CrudAction = CrudAction.parse(config.defaults.action)

    # --- Accessors ---
    @property
    def config(self) -> VocabularyConfig:
        return self._config

    @property
    def version(self) -> str:
        return self._config.version

    @property
    def min_confidence(self) -> float:
        return self._config.settings.min_confidence

    @property
    def module_scoring(self) -> ModuleScoring:
        return self._config.scoring.module

    @property
    def action_scoring(self) -> ActionScoring:
        return self._config.scoring.action

    @property
    def endpoint_scoring(self) -> EndpointScoring:
        return self._config.scoring.endpoint

    @property
    def module_names(self) -> List[str]:
        """Configured modules in configuration order."""
        return list(self._modules.keys())

    @property
    def actions(self) -> List[CrudAction]:
        """Configured actions in configuration order."""
        return list(self._actions.keys())

    def module(self, name: str) -> Optional[ModuleEntry]:
        return self._modules.get(name)

    def action(self, action: CrudAction) -> Optional[ActionEntry]:
        return self._actions.get(action)

    def module_words(self, name: str) -> FrozenSet[str]:
        entry = self._modules.get(name)
        return entry.words if entry else frozenset()

    def action_words(self, action: CrudAction) -> FrozenSet[str]:
        entry = self._actions.get(action)
        return entry.words if entry else frozenset()

    def topic_words(self, module: str, action: CrudAction) -> FrozenSet[str]:
        """Combined module + action vocabulary used for relevance scoring."""
        return self.module_words(module) | self.action_words(action)

    def extraction_templates(self, kind: str) -> Tuple[str, ...]:
        return self._extraction.get(kind.lower(), ())

    def has_extraction_kind(self, kind: str) -> bool:
        return kind.lower() in self._extraction
