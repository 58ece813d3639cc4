from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import InvalidRequestError
from .memory.session_store import SESSION_ID_PREFIX
from .models import MissingParameter, ResolvedAction

MAX_MESSAGE_LENGTH = 1000


class Permissions(BaseModel):
    model_config = ConfigDict(frozen=True)

    modules: List[str] = Field(default_factory=list)
    actions: List[str] = Field(default_factory=list)


class CallerContext(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    erp_id: str = Field(alias="erpId", min_length=1)
    permissions: Permissions = Field(default_factory=Permissions)


class InterpretRequest(BaseModel):
    """Incoming interpretation request (camelCase on the wire)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    module: Optional[str] = None
    context: CallerContext

    @field_validator("message")
    @classmethod
    def _clean_message(cls, value: str) -> str:
        value = value.replace("\x00", "").strip()
        if not value:
            raise ValueError("message cannot be blank")
        return value

    @field_validator("session_id")
    @classmethod
    def _check_session_id(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        if not value.startswith(SESSION_ID_PREFIX):
            raise ValueError(f"sessionId must start with '{SESSION_ID_PREFIX}'")
        return value

    @field_validator("module")
    @classmethod
    def _blank_module_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    @classmethod
    def parse(cls, data: Any) -> "InterpretRequest":
        """
        Validate a raw request body.

        :raises InvalidRequestError: with the first offending field
        """
        if not isinstance(data, dict):
            raise InvalidRequestError("Request body must be a JSON object")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            raise InvalidRequestError(f"{location}: {first.get('msg')}", field=location or None) from e


@dataclass
class Resolved:
    action: ResolvedAction

    def to_dict(self) -> Dict[str, Any]:
        return self.action.to_dict()


@dataclass
class AwaitingParameters:
    needs_parameters: List[MissingParameter]
    message: str
    session_id: str
    module: str = ""
    action: str = ""
    endpoint_route: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "needsParameters": [p.to_dict() for p in self.needs_parameters],
            "message": self.message,
            "sessionId": self.session_id,
            "module": self.module,
            "action": self.action,
            "endpointRoute": self.endpoint_route,
        }


InterpretResponse = Union[Resolved, AwaitingParameters]


@dataclass
class FormattedOutput:
    preview: Dict[str, Any] = field(default_factory=dict)
    curl: str = ""
    url: Optional[str] = None
