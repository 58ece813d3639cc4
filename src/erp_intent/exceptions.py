"""
Exceptions for the ERP intent service.

Configuration errors are fatal and only raised at startup. Every other error is
recoverable: it carries the score and the options the caller can offer the user
so a conversational client can re-prompt without inspecting internals.
"""
from typing import Any, Dict, List, Optional


class ErpIntentError(Exception):
    """Base exception for the ERP intent service."""

    code = "ERP_INTENT_ERROR"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {"error": self.code, "details": str(self)}


class ConfigurationError(ErpIntentError):
    """Raised when service configuration (env, paths) is missing or invalid."""

    code = "CONFIGURATION_ERROR"


class ConfigValidationError(ConfigurationError):
    """Raised when the vocabulary configuration lacks a required section."""

    code = "CONFIG_VALIDATION_ERROR"


class EngineNotInitializedError(ErpIntentError):
    """Raised when the engine is used before initialization."""

    code = "ENGINE_NOT_INITIALIZED"


class InvalidRequestError(ErpIntentError):
    """Raised when an incoming request does not match the expected shape."""

    code = "INVALID_REQUEST"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class ResolutionError(ErpIntentError):
    """
    Base for recoverable resolution failures.

    Carries the modules and actions the caller is allowed to use so the
    caller can offer them back to the user.
    """

    code = "RESOLUTION_ERROR"

    def __init__(
        self,
        message: str,
        available_modules: Optional[List[str]] = None,
        available_actions: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.available_modules = list(available_modules or [])
        self.available_actions = list(available_actions or [])

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["available_modules"] = self.available_modules
        result["available_actions"] = self.available_actions
        return result


class InsufficientConfidence(ResolutionError):
    """Raised when the overall resolution confidence is below the gate."""

    code = "INSUFFICIENT_CONFIDENCE"

    def __init__(self, score: float, **kwargs):
        super().__init__(f"Insufficient confidence: {score:.2f}", **kwargs)
        self.score = score

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["score"] = self.score
        return result


class NoEndpointCandidate(ResolutionError):
    """Raised when the catalog has no endpoint for a (module, action) pair."""

    code = "NO_ENDPOINT_CANDIDATE"

    def __init__(self, module: str, action: str, **kwargs):
        super().__init__(f"No endpoints available for {module}/{action}", **kwargs)
        self.module = module
        self.action = action

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["module"] = self.module
        result["action"] = self.action
        return result


class LowConfidenceMatch(ResolutionError):
    """Raised when the best endpoint scores below the acceptance threshold."""

    code = "LOW_CONFIDENCE_MATCH"

    def __init__(self, score: float, module: str, action: str, **kwargs):
        super().__init__(
            f"No endpoint for {module}/{action} matched with enough confidence "
            f"(best score {score:.2f})",
            **kwargs,
        )
        self.score = score
        self.module = module
        self.action = action

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({"score": self.score, "module": self.module, "action": self.action})
        return result


class PermissionDenied(ResolutionError):
    """Base for permission policy violations."""

    code = "PERMISSION_DENIED"


class ModuleNotPermitted(PermissionDenied):
    """Raised when the classified or requested module is not in the allowed set."""

    code = "MODULE_NOT_PERMITTED"

    def __init__(self, module: str, allowed_modules: List[str], **kwargs):
        allowed = ", ".join(allowed_modules) if allowed_modules else "none"
        super().__init__(
            f"Module '{module}' is not available. Allowed modules: {allowed}",
            available_modules=allowed_modules,
            **kwargs,
        )
        self.module = module

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["module"] = self.module
        return result


class ActionNotPermitted(PermissionDenied):
    """Raised when the classified action is not in the allowed set."""

    code = "ACTION_NOT_PERMITTED"

    def __init__(self, action: str, allowed_actions: List[str], **kwargs):
        allowed = ", ".join(allowed_actions) if allowed_actions else "none"
        super().__init__(
            f"Action '{action}' is not permitted. Allowed actions: {allowed}",
            available_actions=allowed_actions,
            **kwargs,
        )
        self.action = action

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["action"] = self.action
        return result


class PayloadValidationError(ErpIntentError):
    """Raised when a payload does not match its endpoint descriptor."""

    code = "PAYLOAD_VALIDATION_ERROR"

    def __init__(self, endpoint_route: str, errors: List[str]):
        super().__init__(f"Invalid payload for {endpoint_route}: {'; '.join(errors)}")
        self.endpoint_route = endpoint_route
        self.errors = list(errors)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["errors"] = self.errors
        return result
