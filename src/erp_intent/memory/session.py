"""
Session domain objects.

Pure domain models - no Flask, no locking. The store owns synchronization.
"""
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Tuple

from ..interaction.intent_types import CrudAction
from ..models import EndpointDescriptor, MissingParameter, describe_parameter
from ..resolution.payload import Payload


@dataclass(frozen=True)
class PendingResolution:
    """A resolved action still waiting for required parameters."""
    module: str
    action: CrudAction
    endpoint: EndpointDescriptor
    payload: Payload
    confidence: float
    erp_id: str = ""
    url: Optional[str] = None
    messages: Tuple[str, ...] = ()

    @property
    def missing_paths(self) -> List[str]:
        return self.payload.missing_fields(self.endpoint)


@dataclass
class Session:
    """
    An in-flight multi-turn exchange.

    ``missing_parameters`` is always derived from the pending payload;
    mutate through ``update_payload`` only. ``pending.messages`` holds the
    original text of every turn, oldest first.
    """
    id: str
    pending: PendingResolution
    caller_context: Any
    created_at: float
    missing_parameters: List[MissingParameter] = field(default_factory=list)

    def __post_init__(self):
        self._refresh_missing()

    def update_payload(self, payload: Payload) -> None:
        """Replace the pending payload and recompute the missing parameters."""
        self.pending = replace(self.pending, payload=payload)
        self._refresh_missing()

    def record_message(self, message: str) -> None:
        self.pending = replace(self.pending, messages=self.pending.messages + (message,))

    def is_complete(self) -> bool:
        return not self.missing_parameters

    def _refresh_missing(self) -> None:
        self.missing_parameters = [describe_parameter(path) for path in self.pending.missing_paths]
