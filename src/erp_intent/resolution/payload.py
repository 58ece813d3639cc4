"""
Typed request payloads.

A payload is a tagged variant: every top-level field is either a
``Primitive`` (string, int or boolean) or an ``ObjectValue`` holding named
primitives one level deep. Payloads are immutable; merging values returns a
new payload, so a pending session never sees a half-applied update.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from ..models import EndpointDescriptor, EndpointParameter, ParamType

PLACEHOLDER_VALUES = ("", "?")

_TRUTHY = {"true", "1", "si", "sí", "yes", "verdadero", "activo"}
_NUMBER_RE = re.compile(r"-?\d+(?:[.,]\d+)*")


def parse_int(text: str, strict: bool = False) -> Optional[int]:
    """
    Parse an integer written with optional thousands separators.

    "1.500" and "1,500" are 1500; "1.500,75" is 1500; "10,5" is 10.

    :param text: Text containing the number
    :param strict: Require the whole text to be the number
    :return: The integer, or None if no number is found
    """
    text = (text or "").strip()
    match = _NUMBER_RE.fullmatch(text) if strict else _NUMBER_RE.search(text)
    if match is None:
        return None
    number = match.group(0)
    sign = -1 if number.startswith("-") else 1
    digits = number.lstrip("-")

    # With both separators present the last one marks the decimals
    if "." in digits and "," in digits:
        digits = digits[:max(digits.rfind("."), digits.rfind(","))]

    groups = re.split(r"[.,]", digits)
    if len(groups) > 1 and len(groups[0]) <= 3 and all(len(g) == 3 for g in groups[1:]):
        return sign * int("".join(groups))
    return sign * int(groups[0])


def default_value(param_type: ParamType) -> Any:
    """Type-appropriate value for a field nothing was extracted for."""
    if param_type is ParamType.INT:
        return 0
    if param_type is ParamType.BOOLEAN:
        return False
    return ""


def coerce_value(param_type: ParamType, value: Any) -> Any:
    """
    Coerce a raw value to the declared primitive type.

    :raises ValueError: if the value cannot be represented as the type
    """
    if value is None:
        return default_value(param_type)
    if param_type is ParamType.INT:
        if isinstance(value, bool):
            raise ValueError(f"Expected int, got boolean {value!r}")
        if isinstance(value, (int, float)):
            return int(value)
        text = str(value).strip()
        if not text:
            return 0
        number = parse_int(text, strict=True)
        if number is None:
            raise ValueError(f"Expected int, got {value!r}")
        return number
    if param_type is ParamType.BOOLEAN:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUTHY
    return str(value)


def is_empty(param_type: ParamType, value: Any) -> bool:
    """
    Whether a value counts as not supplied.

    Booleans are never empty; ints are empty at 0.
    """
    if param_type is ParamType.BOOLEAN:
        return value is None
    if value is None:
        return True
    if param_type is ParamType.INT:
        return value == 0
    return isinstance(value, str) and value.strip() in PLACEHOLDER_VALUES


@dataclass(frozen=True)
class Primitive:
    type: ParamType
    value: Any

    def to_plain(self) -> Any:
        return self.value


@dataclass(frozen=True)
class ObjectValue:
    fields: Tuple[Tuple[str, Primitive], ...] = ()

    def get(self, name: str) -> Optional[Primitive]:
        for key, value in self.fields:
            if key == name:
                return value
        return None

    def with_field(self, name: str, value: Primitive) -> "ObjectValue":
        if self.get(name) is None:
            return ObjectValue(self.fields + ((name, value),))
        return ObjectValue(tuple((k, value if k == name else v) for k, v in self.fields))

    def to_plain(self) -> Dict[str, Any]:
        return {key: value.to_plain() for key, value in self.fields}


Value = Union[Primitive, ObjectValue]


@dataclass(frozen=True)
class Payload:
    """Ordered, immutable mapping of field name to typed value."""

    fields: Tuple[Tuple[str, Value], ...] = field(default_factory=tuple)

    @classmethod
    def empty_for(cls, endpoint: EndpointDescriptor) -> "Payload":
        """Payload with every declared field at its default value."""
        fields = []
        for param in endpoint.parameters:
            if param.is_object:
                fields.append((param.name, ObjectValue(tuple(
                    (prop.name, Primitive(prop.type, default_value(prop.type)))
                    for prop in param.properties
                ))))
            else:
                fields.append((param.name, Primitive(param.type, default_value(param.type))))
        return cls(tuple(fields))

    @classmethod
    def from_plain(cls, endpoint: EndpointDescriptor, data: Mapping[str, Any]) -> "Payload":
        """
        Build a typed payload from a plain dict, shaped by the endpoint.

        Keys the endpoint does not declare are dropped.

        :raises ValueError: if a value cannot be coerced to its declared type
        """
        payload = cls.empty_for(endpoint)
        values = {}
        for param in endpoint.parameters:
            if param.name not in data:
                continue
            raw = data[param.name]
            if param.is_object:
                for prop in param.properties:
                    if isinstance(raw, Mapping) and prop.name in raw:
                        values[f"{param.name}.{prop.name}"] = raw[prop.name]
            else:
                values[param.name] = raw
        return payload.with_values(endpoint, values)

    def get(self, path: str) -> Optional[Value]:
        """Look up a field by path ("nombre" or "filtro.descripcion")."""
        head, _, tail = path.partition(".")
        for key, value in self.fields:
            if key != head:
                continue
            if not tail:
                return value
            if isinstance(value, ObjectValue):
                return value.get(tail)
            return None
        return None

    def with_values(self, endpoint: EndpointDescriptor, values: Mapping[str, Any]) -> "Payload":
        """
        Return a new payload with the given paths set.

        :param endpoint: Descriptor used to type the values
        :param values: Mapping of path to raw value
        :raises ValueError: for unknown paths or values of the wrong type
        """
        fields = dict(self.fields)
        for path, raw in values.items():
            head, _, tail = path.partition(".")
            param = _find_parameter(endpoint, head)
            if param is None:
                raise ValueError(f"Unknown field '{path}' for {endpoint.route}")

            if tail:
                prop = next((p for p in param.properties if p.name == tail), None)
                if not param.is_object or prop is None:
                    raise ValueError(f"Unknown field '{path}' for {endpoint.route}")
                current = fields.get(head)
                if not isinstance(current, ObjectValue):
                    current = ObjectValue()
                fields[head] = current.with_field(tail, Primitive(prop.type, coerce_value(prop.type, raw)))
            else:
                if param.is_object:
                    raise ValueError(f"Field '{path}' is an object; set its properties instead")
                fields[head] = Primitive(param.type, coerce_value(param.type, raw))

        ordered = [(p.name, fields.pop(p.name)) for p in endpoint.parameters if p.name in fields]
        ordered.extend(fields.items())
        return Payload(tuple(ordered))

    def missing_fields(self, endpoint: EndpointDescriptor) -> List[str]:
        """
        Paths of required fields that are still empty, in declaration order.

        Required properties of an object are only checked when the object
        parameter itself is required.
        """
        return self._empty_paths(endpoint, required_only=True)

    def empty_fields(self, endpoint: EndpointDescriptor) -> List[str]:
        """Paths of every empty field, required or optional, in declaration order."""
        return self._empty_paths(endpoint, required_only=False)

    def _empty_paths(self, endpoint: EndpointDescriptor, required_only: bool) -> List[str]:
        empty = []
        for param in endpoint.parameters:
            if required_only and not param.required:
                continue
            if param.is_object:
                for prop in param.properties:
                    if required_only and not prop.required:
                        continue
                    path = f"{param.name}.{prop.name}"
                    inner = self.get(path)
                    if inner is None or is_empty(prop.type, inner.value):
                        empty.append(path)
                continue
            value = self.get(param.name)
            if value is None or is_empty(param.type, getattr(value, "value", None)):
                empty.append(param.name)
        return empty

    def validate(self, endpoint: EndpointDescriptor) -> List[str]:
        """
        Recursively check the payload against the endpoint descriptor.

        :return: List of error messages (empty when valid)
        """
        errors = []
        declared = {p.name for p in endpoint.parameters}
        for key, _ in self.fields:
            if key not in declared:
                errors.append(f"undeclared field '{key}'")

        for param in endpoint.parameters:
            value = self.get(param.name)
            if value is None:
                if param.required:
                    errors.append(f"missing field '{param.name}'")
                continue
            if param.is_object:
                if not isinstance(value, ObjectValue):
                    errors.append(f"field '{param.name}' must be an object")
                    continue
                props = {p.name: p for p in param.properties}
                for name, inner in value.fields:
                    prop = props.get(name)
                    if prop is None:
                        errors.append(f"undeclared field '{param.name}.{name}'")
                    elif inner.type is not prop.type:
                        errors.append(f"field '{param.name}.{name}' must be {prop.type.value}")
            elif not isinstance(value, Primitive) or value.type is not param.type:
                errors.append(f"field '{param.name}' must be {param.type.value}")

        errors.extend(f"required field '{path}' is empty" for path in self.missing_fields(endpoint))
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {key: value.to_plain() for key, value in self.fields}


def _find_parameter(endpoint: EndpointDescriptor, name: str) -> Optional[EndpointParameter]:
    for param in endpoint.parameters:
        if param.name == name:
            return param
    return None
