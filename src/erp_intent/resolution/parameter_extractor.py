"""
Parameter extraction from free text.

Fills an endpoint's declared payload shape by running each field's ordered
regex templates against the original message (case preserved, so names
survive). The first template that captures wins.
"""
import logging
import re
from typing import Any, Dict, List, Optional, Pattern, Sequence

from ..models import EndpointDescriptor, ParamType
from ..vocabulary import VocabularyIndex
from .payload import Payload, coerce_value, is_empty, parse_int

logger = logging.getLogger(__name__)

DEFAULT_KIND = "_default"

_FIELD_PREFIXES = ("t_", "str_", "int_", "b_")


def parameter_kind(name: str) -> str:
    """
    Extraction kind for a field name.

    "t_nombre" -> "nombre", "str_Descripcion" -> "descripcion",
    "fecha_inicio" -> "fechainicio".
    """
    kind = name.lower()
    for prefix in _FIELD_PREFIXES:
        if kind.startswith(prefix):
            kind = kind[len(prefix):]
            break
    return kind.replace("_", "")


class ParameterExtractor:
    """
    Extracts parameter values for an endpoint from a message.

    Unmatched fields get type defaults ("" / 0 / False). String properties
    nested in object parameters (search filters) are upper-cased, since the
    search endpoints expect normalized search terms.
    """

    def __init__(self, index: VocabularyIndex):
        self._index = index

    def patterns_for(self, name: str) -> List[Pattern]:
        """Ordered patterns for a field: its kind's templates, then the defaults."""
        kind = parameter_kind(name)
        alias = re.escape(kind if kind else name)
        templates: List[str] = []
        if kind != DEFAULT_KIND:
            templates.extend(self._index.extraction_templates(kind))
        templates.extend(self._index.extraction_templates(DEFAULT_KIND))

        patterns = []
        for template in templates:
            source = template.replace("{field}", alias)
            try:
                patterns.append(re.compile(source, re.IGNORECASE))
            except re.error as e:
                # Templates are validated at load time; only a bad substitution lands here
                logger.warning(f"Skipping extraction template for '{name}': {e}")
        return patterns

    def extract_value(
        self,
        message: str,
        name: str,
        param_type: ParamType,
        upper: bool = False,
    ) -> Optional[Any]:
        """
        Extract a single value.

        :param message: Original message text
        :param name: Field name (determines the template kind)
        :param param_type: Declared primitive type
        :param upper: Upper-case string captures
        :return: Typed value, or None when no template captured anything usable
        """
        for pattern in self.patterns_for(name):
            match = pattern.search(message or "")
            if not match or not match.groups():
                continue
            captured = next((g for g in match.groups() if g), None)
            if captured is None:
                continue
            captured = captured.strip()

            if param_type is ParamType.INT:
                number = parse_int(captured)
                if number is None:
                    continue
                return number
            if param_type is ParamType.BOOLEAN:
                return coerce_value(ParamType.BOOLEAN, captured)
            if not captured:
                continue
            return captured.upper() if upper else captured
        return None

    def build_payload(self, endpoint: EndpointDescriptor, message: str) -> Payload:
        """
        Build the full payload for an endpoint.

        :param endpoint: Selected endpoint
        :param message: Original (not normalized) message
        :return: Payload with every declared field present
        """
        values: Dict[str, Any] = {}
        for param in endpoint.parameters:
            if param.is_object:
                for prop in param.properties:
                    value = self.extract_value(message, prop.name, prop.type, upper=prop.type is ParamType.STRING)
                    if value is not None:
                        values[f"{param.name}.{prop.name}"] = value
            else:
                value = self.extract_value(message, param.name, param.type)
                if value is not None:
                    values[param.name] = value

        logger.debug(f"Extracted for {endpoint.route}: {values}")
        return Payload.empty_for(endpoint).with_values(endpoint, values)

    def extract_missing(
        self,
        message: str,
        missing_paths: Sequence[str],
        endpoint: EndpointDescriptor,
    ) -> Dict[str, Any]:
        """
        Single-pass extraction restricted to the given fields.

        :param message: The follow-up message only
        :param missing_paths: Paths still empty ("nombre", "filtro.descripcion")
        :param endpoint: Endpoint the pending payload belongs to
        :return: Mapping of path to extracted non-empty value
        """
        found: Dict[str, Any] = {}
        for path in missing_paths:
            head, _, tail = path.partition(".")
            param = next((p for p in endpoint.parameters if p.name == head), None)
            if param is None:
                continue
            if tail:
                prop = next((p for p in param.properties if p.name == tail), None)
                if prop is None:
                    continue
                value = self.extract_value(message, prop.name, prop.type, upper=prop.type is ParamType.STRING)
                param_type = prop.type
            else:
                value = self.extract_value(message, param.name, param.type)
                param_type = param.type

            if value is not None and not is_empty(param_type, value):
                found[path] = value
        return found
