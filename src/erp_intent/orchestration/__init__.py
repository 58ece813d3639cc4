"""
Orchestration: the resolution state machine and its prompts.
"""
from .prompts import missing_parameters_prompt
from .session_orchestrator import SessionOrchestrator

__all__ = ["missing_parameters_prompt", "SessionOrchestrator"]
