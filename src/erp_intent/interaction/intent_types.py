"""
Intent types for message classification.

Defines the CRUD actions a business message can map to, and the
classification result produced per request.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CrudAction(Enum):
    """CRUD verbs governing which endpoint subset is eligible."""
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, value: str) -> Optional["CrudAction"]:
        """
        Parse an action name, accepting the Spanish catalog aliases.

        :param value: "READ", "read", "leer", ...
        :return: CrudAction or None if unknown
        """
        if isinstance(value, CrudAction):
            return value
        key = (value or "").strip().upper()
        if key in cls.__members__:
            return cls[key]
        return _ALIASES.get(key)


_ALIASES = {
    "CREAR": CrudAction.CREATE,
    "LEER": CrudAction.READ,
    "ACTUALIZAR": CrudAction.UPDATE,
    "ELIMINAR": CrudAction.DELETE,
}


@dataclass(frozen=True)
class IntentResult:
    """
    Classification of a message into a (module, action) pair.

    ``provisional`` is True when no module scored above its threshold and
    the configured default module was used. An action fallback alone is
    not provisional.
    """
    module: str
    action: CrudAction
    score: float
    provisional: bool = False
