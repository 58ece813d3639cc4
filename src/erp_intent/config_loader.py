"""
Configuration loader with validation.

Builds EngineConfig from ERP_INTENT_* environment variables.
"""
from dotenv import load_dotenv
from .config import EngineConfig
from .config_validator import (
    get_bool_env,
    get_float_env,
    get_optional_env,
    validate_path,
    validate_positive,
    validate_unit_interval,
)


def load_config_from_env(use_dotenv: bool = True) -> EngineConfig:
    """
    Load configuration from environment variables with validation.

    Usage:
        config = load_config_from_env()
        app = ErpIntentApp(config)
        app.initialize()

    :param use_dotenv: Load a local .env file first (disable in production)
    :return: Validated EngineConfig instance
    :raises: ConfigurationError if values are missing or invalid
    """
    if use_dotenv:
        load_dotenv()

    config = EngineConfig(
        vocabulary_path=get_optional_env("ERP_INTENT_VOCABULARY_PATH"),
        catalog_dir=get_optional_env("ERP_INTENT_CATALOG_DIR"),
        confidence_gate=get_float_env("ERP_INTENT_CONFIDENCE_GATE", None),
        session_ttl_seconds=get_float_env("ERP_INTENT_SESSION_TTL_SECONDS", 15 * 60),
        sweep_interval_seconds=get_float_env("ERP_INTENT_SWEEP_INTERVAL_SECONDS", 5 * 60),
        enable_sweeper=get_bool_env("ERP_INTENT_ENABLE_SWEEPER", True),
        fallback_timeout_seconds=get_float_env("ERP_INTENT_FALLBACK_TIMEOUT_SECONDS", 10.0),
        log_level=(get_optional_env("ERP_INTENT_LOG_LEVEL", "INFO") or "INFO").upper(),
    )

    if config.confidence_gate is not None:
        validate_unit_interval(config.confidence_gate, "ERP_INTENT_CONFIDENCE_GATE")
    validate_positive(config.session_ttl_seconds, "ERP_INTENT_SESSION_TTL_SECONDS")
    validate_positive(config.sweep_interval_seconds, "ERP_INTENT_SWEEP_INTERVAL_SECONDS")
    validate_positive(config.fallback_timeout_seconds, "ERP_INTENT_FALLBACK_TIMEOUT_SECONDS")

    if config.vocabulary_path:
        validate_path(config.vocabulary_path, "ERP_INTENT_VOCABULARY_PATH", must_exist=True)
    if config.catalog_dir:
        validate_path(config.catalog_dir, "ERP_INTENT_CATALOG_DIR", must_exist=True)

    return config
