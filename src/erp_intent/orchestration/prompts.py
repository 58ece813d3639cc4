"""
Prompt text for missing-parameter requests.

Purely presentational; nothing in resolution depends on the wording.
"""
from typing import Sequence

from ..interaction.intent_types import CrudAction
from ..models import MissingParameter

ACTION_VERBS = {
    CrudAction.CREATE: "create",
    CrudAction.READ: "read",
    CrudAction.UPDATE: "update",
    CrudAction.DELETE: "delete",
}


def missing_parameters_prompt(
    action: CrudAction,
    module: str,
    missing: Sequence[MissingParameter],
) -> str:
    """
    Build the prompt asking for missing parameters.

    One parameter:  "To create VENTAS, I need the amount."
    Several:        "To create VENTAS, I need: nombre, the amount."
    """
    verb = ACTION_VERBS.get(action, action.value.lower())
    descriptions = [p.description for p in missing]
    if len(descriptions) == 1:
        return f"To {verb} {module}, I need {descriptions[0]}."
    return f"To {verb} {module}, I need: {', '.join(descriptions)}."
