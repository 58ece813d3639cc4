"""
Public application facade for the ERP Intent Service.

This is the single stable entry point for the library.
All internal structure can change freely, but this API remains stable.
"""
import os
from pathlib import Path
from typing import Any, Dict, Optional

from .config import EngineConfig
from .fallback import FallbackInterpreter
from .service import ErpIntentService


class ErpIntentApp:
    """
    Public application facade for the ERP Intent Service.

    All dependency wiring is encapsulated here.

    Usage:
        config = EngineConfig()
        app = ErpIntentApp(config)
        app.initialize()
        body = app.interpret({"message": "listar pacientes", "context": {...}})
    """

    def __init__(self, config: EngineConfig, fallback: Optional[FallbackInterpreter] = None):
        """
        :param config: EngineConfig instance
        :param fallback: Optional external interpreter for low-confidence messages
        """
        self._config = config
        self._fallback = fallback
        self._service: Optional[ErpIntentService] = None

    def initialize(self) -> None:
        """
        Load vocabulary and catalogs, wire the engine and start the sweeper.

        Relative paths are resolved against the service directory, not the
        caller's working directory. Call once before interpret().
        """
        if self._service:
            return

        service_dir = Path(__file__).parent.parent.parent
        for attr in ("vocabulary_path", "catalog_dir"):
            value = getattr(self._config, attr)
            if value and not os.path.isabs(value):
                setattr(self._config, attr, str(service_dir / value))

        service = ErpIntentService(self._config)
        service.warmup()
        if self._fallback is not None:
            service.set_fallback_interpreter(self._fallback)
        self._service = service

    def interpret(self, body: Any) -> Dict[str, Any]:
        """
        Interpret a raw request body.

        :param body: Request dict ({message, sessionId?, module?, context})
        :return: Response dict (resolved or awaiting parameters)
        :raises RuntimeError: if initialize() has not been called
        :raises ErpIntentError: for invalid requests and recoverable failures
        """
        return self._require_service().interpret_payload(body)

    def debug_info(self) -> Dict[str, Any]:
        return self._require_service().debug_info()

    def shutdown(self) -> None:
        if self._service:
            self._service.shutdown()
            self._service = None

    @property
    def is_initialized(self) -> bool:
        return self._service is not None

    def _require_service(self) -> ErpIntentService:
        if not self._service:
            raise RuntimeError("App not initialized. Call initialize() first.")
        return self._service
