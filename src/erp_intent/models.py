from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ParamType(Enum):
    STRING = "string"
    INT = "int"
    BOOLEAN = "boolean"
    OBJECT = "object"

    @classmethod
    def parse(cls, value: str) -> "ParamType":
        key = (value or "string").strip().lower()
        aliases = {"str": "string", "integer": "int", "number": "int", "bool": "boolean"}
        return cls(aliases.get(key, key))


@dataclass(frozen=True)
class EndpointProperty:
    name: str
    type: ParamType
    required: bool = False


@dataclass(frozen=True)
class EndpointParameter:
    name: str
    type: ParamType
    required: bool = False
    properties: List[EndpointProperty] = field(default_factory=list)

    @property
    def is_object(self) -> bool:
        return self.type is ParamType.OBJECT


@dataclass(frozen=True)
class EndpointDescriptor:
    id: int
    route: str
    http_method: str
    human_name: str
    description: str
    parameters: List[EndpointParameter] = field(default_factory=list)
    intent: Optional[str] = None
    output_type: Optional[str] = None

    @property
    def intent_text(self) -> str:
        """Declared intent text, falling back to the human-readable name."""
        return self.intent or self.human_name or ""


@dataclass(frozen=True)
class MissingParameter:
    param: str
    type: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {"param": self.param, "type": self.type, "description": self.description}


@dataclass(frozen=True)
class ResolvedAction:
    module: str
    action: str
    endpoint_route: str
    http_method: str
    payload: Dict[str, Any]
    confidence: float
    endpoint_id: Optional[int] = None
    url: Optional[str] = None
    preview: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module": self.module,
            "action": self.action,
            "endpointRoute": self.endpoint_route,
            "httpMethod": self.http_method,
            "payload": self.payload,
            "confidence": self.confidence,
            "endpointId": self.endpoint_id,
            "url": self.url,
            "preview": self.preview,
        }


_PARAMETER_HINTS = (
    (("id",), "ID", "the unique identifier"),
    (("fecha", "date"), "FECHA", "the date (YYYY-MM-DD)"),
    (("cliente", "customer"), "CLIENTE", "the customer name or code"),
    (("cantidad", "quantity"), "NÚMERO", "the quantity"),
    (("monto", "amount", "total"), "MONTO", "the amount"),
)


def describe_parameter(path: str) -> MissingParameter:
    """
    Infer a display type and human description for a missing field.

    :param path: Field path ("nombre", "filtro.descripcion")
    :return: MissingParameter for prompts and responses
    """
    name = path.rsplit(".", 1)[-1].lower()
    for keys, type_name, description in _PARAMETER_HINTS:
        if name in keys or any(name.startswith(key + "_") or name.endswith("_" + key) for key in keys):
            return MissingParameter(param=path, type=type_name, description=description)
    return MissingParameter(param=path, type="TEXTO", description=path.rsplit(".", 1)[-1])
