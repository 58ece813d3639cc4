"""Security: permission policy for produced module/action pairs."""
from .permission_policy import PermissionPolicy

__all__ = ["PermissionPolicy"]
