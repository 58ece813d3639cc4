"""
ERP Intent Service.

Deterministic, rule-based resolution of free-text business instructions
into permission-checked ERP API calls.
"""
from .app import ErpIntentApp
from .config import EngineConfig
from .exceptions import ErpIntentError

__all__ = ["ErpIntentApp", "EngineConfig", "ErpIntentError"]
__version__ = "0.1.0"
