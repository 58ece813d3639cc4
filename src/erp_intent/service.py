import logging
import time
from typing import Any, Callable, Dict, Optional

from .catalog import CatalogRegistry, load_catalog_dir
from .config import EngineConfig
from .exceptions import EngineNotInitializedError, ResolutionError
from .fallback import FallbackInterpreter, TimedFallback
from .memory import SessionStore
from .orchestration import SessionOrchestrator
from .output_formatter import format_output
from .schemas import AwaitingParameters, InterpretRequest, InterpretResponse, Resolved
from .vocabulary import VocabularyConfig, VocabularyIndex, load_vocabulary_config

logger = logging.getLogger(__name__)


class ErpIntentService:
    """
    Facade over the local resolution engine.
    The ONLY entry point for the HTTP and CLI layers.
    """

    def __init__(
        self,
        config: EngineConfig,
        vocabulary: Optional[VocabularyConfig] = None,
        catalogs: Optional[CatalogRegistry] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Composition root.
        All engine components are created and wired in warmup().
        """
        self.config = config
        self._vocabulary = vocabulary
        self._catalogs = catalogs
        self._clock = clock

        self._index: Optional[VocabularyIndex] = None
        self._orchestrator: Optional[SessionOrchestrator] = None
        self._fallback: Optional[TimedFallback] = None

    # ----------------------------
    # Startup / Shutdown
    # ----------------------------
    def warmup(self) -> None:
        """
        Load configuration, build the vocabulary index and start the sweeper.

        :raises ConfigValidationError: if the vocabulary is incomplete (fatal)
        :raises ConfigurationError: if catalogs cannot be loaded (fatal)
        """
        if self._orchestrator is not None:
            return

        vocabulary = self._vocabulary or load_vocabulary_config(self.config.vocabulary_path)
        self._index = VocabularyIndex(vocabulary)

        if self._catalogs is None:
            self._catalogs = CatalogRegistry(load_catalog_dir(self.config.catalog_dir))

        store = SessionStore(ttl_seconds=self.config.session_ttl_seconds, clock=self._clock)
        self._orchestrator = SessionOrchestrator(
            self._index,
            self._catalogs,
            store=store,
            confidence_gate=self.config.confidence_gate,
            sweep_interval_seconds=self.config.sweep_interval_seconds if self.config.enable_sweeper else None,
        )
        self._orchestrator.start()
        logger.info(
            f"Engine ready: vocabulary v{self._index.version}, "
            f"modules={self._index.module_names}, catalogs={self._catalogs.erp_ids}"
        )

    def shutdown(self) -> None:
        if self._orchestrator is not None:
            self._orchestrator.shutdown()
        if self._fallback is not None:
            self._fallback.shutdown()

    # ----------------------------
    # Interpretation
    # ----------------------------
    def interpret(self, request: InterpretRequest) -> InterpretResponse:
        """
        Resolve a request locally, consulting the fallback interpreter when
        local confidence is too low.

        :raises EngineNotInitializedError: if warmup() has not run
        :raises ResolutionError: recoverable resolution failures
        """
        orchestrator = self._require_orchestrator()
        try:
            return orchestrator.handle(request)
        except ResolutionError as e:
            if self._fallback is None or not TimedFallback.applies_to(e):
                raise
            logger.info(f"Local resolution failed ({e.code}), consulting fallback interpreter")
            return Resolved(self._fallback.resolve(request.message, request.context, e))

    def interpret_payload(self, data: Any) -> Dict[str, Any]:
        """
        Validate a raw request body and return the response body.

        :raises InvalidRequestError: if the body is malformed
        :raises ResolutionError: recoverable resolution failures
        """
        request = InterpretRequest.parse(data)
        response = self.interpret(request)

        if isinstance(response, AwaitingParameters):
            return {"success": True, "status": "awaiting_parameters", **response.to_dict()}

        output = format_output(response.action)
        return {
            "success": True,
            "status": "resolved",
            **response.to_dict(),
            "preview": output.preview,
            "curl": output.curl,
        }

    # ----------------------------
    # Introspection
    # ----------------------------
    def debug_info(self) -> Dict[str, Any]:
        orchestrator = self._require_orchestrator()
        return {
            "vocabulary_version": self._index.version,
            "modules": self._index.module_names,
            "actions": [a.value for a in self._index.actions],
            "catalogs": self._catalogs.erp_ids,
            "confidence_gate": orchestrator.confidence_gate,
            "endpoint_threshold": orchestrator.matcher.threshold,
            "active_sessions": len(orchestrator.store),
            "session_ttl_seconds": orchestrator.store.ttl_seconds,
            "sweeper_running": orchestrator.sweeper_running,
            "fallback_enabled": self._fallback is not None,
        }

    @property
    def orchestrator(self) -> SessionOrchestrator:
        return self._require_orchestrator()

    # ----------------------------
    # Dependency injection setters
    # ----------------------------
    def set_fallback_interpreter(self, interpreter: Optional[FallbackInterpreter]) -> None:
        """Inject (or remove) the external fallback interpreter."""
        if self._fallback is not None:
            self._fallback.shutdown()
        self._fallback = (
            TimedFallback(interpreter, self.config.fallback_timeout_seconds)
            if interpreter is not None
            else None
        )

    def _require_orchestrator(self) -> SessionOrchestrator:
        if self._orchestrator is None:
            raise EngineNotInitializedError("Engine is not initialized. Call warmup() first.")
        return self._orchestrator
