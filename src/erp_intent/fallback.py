"""
Fallback interpreter hook.

When local resolution reports InsufficientConfidence or LowConfidenceMatch,
the service may hand the message to an external (LLM-backed) interpreter.
That call is network-bound, so it always runs under a caller-supplied
timeout; when it times out or fails, the original local error is re-raised.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import List, Optional, Protocol, runtime_checkable

from .exceptions import InsufficientConfidence, LowConfidenceMatch, ResolutionError
from .interaction import CrudAction
from .models import ResolvedAction
from .schemas import CallerContext
from .security import PermissionPolicy

logger = logging.getLogger(__name__)

FALLBACK_ERRORS = (InsufficientConfidence, LowConfidenceMatch)


@runtime_checkable
class FallbackInterpreter(Protocol):
    """Same contract as the local engine: message in, resolved action out."""

    def interpret(
        self,
        message: str,
        allowed_modules: List[str],
        context: CallerContext,
    ) -> Optional[ResolvedAction]:
        ...


class TimedFallback:
    """
    Runs a FallbackInterpreter with a timeout.

    Usage:
        fallback = TimedFallback(interpreter, timeout_seconds=10)
        resolved = fallback.resolve(message, context, error)
    """

    def __init__(self, interpreter: FallbackInterpreter, timeout_seconds: float = 10.0):
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        self._interpreter = interpreter
        self.timeout_seconds = timeout_seconds
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="fallback")

    @staticmethod
    def applies_to(error: Exception) -> bool:
        return isinstance(error, FALLBACK_ERRORS)

    def resolve(self, message: str, context: CallerContext, error: ResolutionError) -> ResolvedAction:
        """
        Ask the fallback interpreter to resolve a message.

        :param message: Original message
        :param context: Caller context
        :param error: The local error that triggered the fallback
        :return: ResolvedAction from the fallback
        :raises ResolutionError: the original error on timeout, failure or an empty answer
        :raises PermissionDenied: if the fallback produced a forbidden module/action
        """
        allowed = PermissionPolicy.allowed_modules(context.permissions.modules)
        future = self._executor.submit(self._interpreter.interpret, message, allowed, context)
        try:
            resolved = future.result(timeout=self.timeout_seconds)
        except FutureTimeoutError:
            future.cancel()
            logger.warning(f"Fallback interpreter timed out after {self.timeout_seconds}s")
            raise error
        except Exception as e:
            logger.error(f"Fallback interpreter failed: {e}", exc_info=True)
            raise error from e

        if resolved is None:
            raise error

        action = CrudAction.parse(resolved.action)
        if action is None:
            logger.warning(f"Fallback returned unknown action '{resolved.action}'")
            raise error
        PermissionPolicy.validate(resolved.module, action, context.permissions.modules, context.permissions.actions)

        logger.info(f"Fallback resolved '{message}' -> {resolved.endpoint_route}")
        return resolved

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
