"""
Module/action permission policy based on the caller's context.

Only enforces; never substitutes a permitted module for a forbidden one.
"""
from typing import List, Optional, Sequence, Set

from ..exceptions import ActionNotPermitted, ModuleNotPermitted
from ..interaction.intent_types import CrudAction


class PermissionPolicy:
    """
    Defines which modules and actions a caller may resolve to.

    Action permissions accept CRUD names ("READ") or the catalog's Spanish
    aliases ("leer"); module permissions are case-insensitive.
    """

    @staticmethod
    def allowed_modules(modules: Optional[Sequence[str]]) -> List[str]:
        """Normalized, de-duplicated allowed modules in caller order."""
        return list(dict.fromkeys(m.strip().upper() for m in (modules or []) if m and m.strip()))

    @staticmethod
    def allowed_actions(actions: Optional[Sequence[str]]) -> Set[CrudAction]:
        """Parsed allowed actions; unknown names are ignored."""
        parsed = (CrudAction.parse(a) for a in (actions or []))
        return {a for a in parsed if a is not None}

    @staticmethod
    def is_module_allowed(module: str, modules: Optional[Sequence[str]]) -> bool:
        return (module or "").upper() in PermissionPolicy.allowed_modules(modules)

    @staticmethod
    def is_action_allowed(action: CrudAction, actions: Optional[Sequence[str]]) -> bool:
        return action in PermissionPolicy.allowed_actions(actions)

    @staticmethod
    def validate_module(module: str, modules: Optional[Sequence[str]]) -> None:
        """
        :raises ModuleNotPermitted: if module is outside the allowed set
        """
        if not PermissionPolicy.is_module_allowed(module, modules):
            raise ModuleNotPermitted(module, PermissionPolicy.allowed_modules(modules))

    @staticmethod
    def validate_action(
        action: CrudAction,
        actions: Optional[Sequence[str]],
        modules: Optional[Sequence[str]] = None,
    ) -> None:
        """
        :raises ActionNotPermitted: if action is outside the allowed set
        """
        if not PermissionPolicy.is_action_allowed(action, actions):
            allowed = [a.value for a in CrudAction if a in PermissionPolicy.allowed_actions(actions)]
            raise ActionNotPermitted(
                action.value,
                allowed,
                available_modules=PermissionPolicy.allowed_modules(modules),
            )

    @staticmethod
    def validate(
        module: str,
        action: CrudAction,
        modules: Optional[Sequence[str]],
        actions: Optional[Sequence[str]],
    ) -> None:
        """
        Validate a produced (module, action) pair.

        :raises ModuleNotPermitted: module outside the allowed set
        :raises ActionNotPermitted: action outside the allowed set
        """
        PermissionPolicy.validate_module(module, modules)
        PermissionPolicy.validate_action(action, actions, modules)
