#!/usr/bin/env python3
"""
Flask REST API for the ERP Intent Service.

POST /ia/interpret  - resolve a message (or continue a pending session)
GET  /ia/debug      - engine configuration and session stats
GET  /health        - liveness
"""
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from erp_intent.app import ErpIntentApp
from erp_intent.config_loader import load_config_from_env
from erp_intent.exceptions import (
    ConfigurationError,
    EngineNotInitializedError,
    ErpIntentError,
    InvalidRequestError,
    PayloadValidationError,
    PermissionDenied,
    ResolutionError,
)

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def _status_for(error: ErpIntentError) -> int:
    if isinstance(error, InvalidRequestError):
        return 400
    if isinstance(error, PermissionDenied):
        return 403
    if isinstance(error, (ResolutionError, PayloadValidationError)):
        return 422
    if isinstance(error, EngineNotInitializedError):
        return 503
    return 500


def _initialize_engine_from_env() -> Optional[ErpIntentApp]:
    """Initialize the engine from ERP_INTENT_* environment variables."""
    try:
        config = load_config_from_env(use_dotenv=False)
        logging.getLogger().setLevel(config.log_level)
        engine = ErpIntentApp(config)
        engine.initialize()
        logger.info("Engine initialized successfully from environment variables")
        return engine
    except ConfigurationError as e:
        logger.error(f"Failed to initialize engine: {e}", exc_info=True)
        return None


def create_app(engine: Optional[ErpIntentApp] = None, rate_limit_enabled: bool = True) -> Flask:
    """
    Build the Flask application.

    :param engine: Initialized ErpIntentApp; built from the environment if None
    :param rate_limit_enabled: Disable for tests
    """
    flask_app = Flask(__name__)
    flask_app.config["RATELIMIT_ENABLED"] = rate_limit_enabled

    limiter = Limiter(
        app=flask_app,
        key_func=get_remote_address,
        default_limits=["300 per hour", "30 per minute"],
        storage_uri=os.getenv("ERP_INTENT_RATELIMIT_STORAGE", "memory://"),
    )

    if engine is None:
        engine = _initialize_engine_from_env()
    flask_app.extensions["erp_intent"] = engine

    @flask_app.errorhandler(ErpIntentError)
    def handle_engine_error(error: ErpIntentError):
        status = _status_for(error)
        if status >= 500:
            logger.error(f"Engine error: {error}", exc_info=True)
        else:
            logger.info(f"Request rejected ({error.code}): {error}")
        return jsonify({"success": False, **error.to_dict()}), status

    @flask_app.route("/health", methods=["GET"])
    @limiter.exempt
    def health():
        """Liveness check."""
        return jsonify({"status": "ok", "engine_ready": engine is not None and engine.is_initialized})

    @flask_app.route("/ia/interpret", methods=["POST"])
    @limiter.limit("20 per minute")
    def interpret():
        """Interpretation endpoint."""
        if engine is None or not engine.is_initialized:
            raise EngineNotInitializedError("Engine not initialized. Please check configuration.")

        data = request.get_json(silent=True)
        if data is None:
            raise InvalidRequestError("Request body must be valid JSON")

        result = engine.interpret(data)
        logger.info(
            f"Interpret - status: {result.get('status')}, "
            f"session: {result.get('sessionId')}, route: {result.get('endpointRoute')}"
        )
        return jsonify(result)

    @flask_app.route("/ia/debug", methods=["GET"])
    def debug():
        """Engine configuration and session stats."""
        if engine is None or not engine.is_initialized:
            raise EngineNotInitializedError("Engine not initialized. Please check configuration.")
        return jsonify({"success": True, **engine.debug_info()})

    return flask_app


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )
    app = create_app()
    port = int(os.getenv("PORT", 8080))
    # Disable debug mode for production
    app.run(host="0.0.0.0", port=port, debug=False)
