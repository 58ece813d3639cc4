"""
Module-name resolution for explicit module references.

Handles "modulo clinico", "módulo de ventas" or an explicit ``module`` field in
the request. Escalates exact → fuzzy (rapidfuzz) over module names and their
keywords, so "clinico", "Clínico" and "pacientes" all land on CLINICO.
"""
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from rapidfuzz import fuzz, process, utils

from ..vocabulary import VocabularyIndex

logger = logging.getLogger(__name__)

_MODULE_MENTION_RE = re.compile(
    r"\bm[oó]dulo\s+(?:de\s+|del\s+)?[\"“]?([\wáéíóúñÁÉÍÓÚÑ]+)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ModuleResolution:
    """
    Result of resolving a module reference.

    Attributes:
        module: Canonical module name, or None if nothing matched
        confidence: 0.0-1.0
        strategy_used: "exact", "fuzzy" or "none"
        original_query: The text that was resolved
    """
    module: Optional[str]
    confidence: float
    strategy_used: str
    original_query: str

    def is_resolved(self) -> bool:
        return self.module is not None


class ModuleNameResolver:
    """
    Resolves free-text module references to configured module names.

    Usage:
        resolver = ModuleNameResolver(index)
        resolver.resolve("clinico").module  # "CLINICO"
    """

    def __init__(self, index: VocabularyIndex, fuzzy_threshold: float = 0.8):
        if not 0.0 <= fuzzy_threshold <= 1.0:
            raise ValueError(f"Threshold must be between 0.0 and 1.0, got {fuzzy_threshold}")

        self._index = index
        self.fuzzy_threshold = fuzzy_threshold
        self._aliases: Dict[str, str] = {}
        for name in index.module_names:
            self._aliases.setdefault(utils.default_process(name), name)
            entry = index.module(name)
            for term in entry.terms:
                self._aliases.setdefault(utils.default_process(term), name)

    def extract_mention(self, message: str) -> Optional[str]:
        """
        Find an explicit "modulo X" reference in a message.

        :return: The referenced text, or None
        """
        match = _MODULE_MENTION_RE.search(message or "")
        return match.group(1) if match else None

    def resolve(self, query: str, candidates: Optional[List[str]] = None) -> ModuleResolution:
        """
        Resolve a module reference.

        :param query: Module text ("clinico", "Ventas", "pacientes")
        :param candidates: Restrict results to these module names
        :return: ModuleResolution
        """
        processed = utils.default_process(query or "")
        if not processed:
            return ModuleResolution(None, 0.0, "none", query)

        aliases = self._aliases
        if candidates is not None:
            allowed = set(candidates)
            aliases = {alias: module for alias, module in aliases.items() if module in allowed}
            # Modules the caller has but the vocabulary does not know still resolve by name
            for module in candidates:
                aliases.setdefault(utils.default_process(module), module)

        if processed in aliases:
            return ModuleResolution(aliases[processed], 1.0, "exact", query)

        if aliases:
            match = process.extractOne(
                processed,
                list(aliases.keys()),
                scorer=fuzz.ratio,
                processor=None,
            )
            if match:
                alias, score, _ = match
                confidence = score / 100.0
                if confidence >= self.fuzzy_threshold:
                    logger.debug(f"Fuzzy module match '{query}' -> {aliases[alias]} ({confidence:.2f})")
                    return ModuleResolution(aliases[alias], confidence, "fuzzy", query)

        return ModuleResolution(None, 0.0, "none", query)
