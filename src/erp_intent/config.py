from dataclasses import dataclass
from typing import Optional


@dataclass
class EngineConfig:
    # Core paths (None uses the packaged defaults)
    vocabulary_path: Optional[str] = None
    catalog_dir: Optional[str] = None

    # Resolution gate (None uses the vocabulary's min_confidence)
    confidence_gate: Optional[float] = None

    # Sessions
    session_ttl_seconds: float = 15 * 60
    sweep_interval_seconds: float = 5 * 60
    enable_sweeper: bool = True

    # Fallback interpreter
    fallback_timeout_seconds: float = 10.0

    # Logging
    log_level: str = "INFO"
