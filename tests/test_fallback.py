"""
Tests for the timed fallback interpreter hook.
"""
import threading
from unittest.mock import Mock

import pytest

from erp_intent.exceptions import (
    ActionNotPermitted,
    InsufficientConfidence,
    LowConfidenceMatch,
    ModuleNotPermitted,
    NoEndpointCandidate,
)
from erp_intent.fallback import FallbackInterpreter, TimedFallback
from erp_intent.models import ResolvedAction
from erp_intent.schemas import CallerContext


@pytest.fixture
def context():
    return CallerContext.model_validate({
        "erpId": "demo",
        "permissions": {"modules": ["VENTAS"], "actions": ["READ"]},
    })


def _resolved(module="VENTAS", action="READ"):
    return ResolvedAction(
        module=module,
        action=action,
        endpoint_route="/api/v1/clientes/listar",
        http_method="GET",
        payload={},
        confidence=0.9,
    )


class TestTimedFallback:
    """Tests for TimedFallback."""

    def test_applies_only_to_low_confidence(self):
        """Test the fallback is only consulted for confidence failures."""
        assert TimedFallback.applies_to(InsufficientConfidence(0.1))
        assert TimedFallback.applies_to(LowConfidenceMatch(0.1, "VENTAS", "READ"))
        assert not TimedFallback.applies_to(NoEndpointCandidate("VENTAS", "READ"))
        assert not TimedFallback.applies_to(ModuleNotPermitted("CLINICO", ["VENTAS"]))

    def test_mock_satisfies_protocol(self):
        """Test any object with interpret() is a FallbackInterpreter."""
        assert isinstance(Mock(spec=["interpret"]), FallbackInterpreter)

    def test_returns_fallback_answer(self, context):
        """Test a permitted fallback answer is returned."""
        interpreter = Mock()
        interpreter.interpret.return_value = _resolved()
        fallback = TimedFallback(interpreter)
        try:
            result = fallback.resolve("dame los clientes", context, InsufficientConfidence(0.1))
        finally:
            fallback.shutdown()
        assert result.endpoint_route == "/api/v1/clientes/listar"
        interpreter.interpret.assert_called_once_with("dame los clientes", ["VENTAS"], context)

    def test_timeout_reraises_original_error(self, context):
        """Test a slow interpreter yields the original local error."""
        release = threading.Event()
        interpreter = Mock()
        interpreter.interpret.side_effect = lambda *args: release.wait(5)
        fallback = TimedFallback(interpreter, timeout_seconds=0.05)
        original = InsufficientConfidence(0.1)
        try:
            with pytest.raises(InsufficientConfidence) as exc:
                fallback.resolve("hola", context, original)
            assert exc.value is original
        finally:
            release.set()
            fallback.shutdown()

    def test_failure_reraises_original_error(self, context):
        """Test interpreter exceptions are chained onto the original error."""
        interpreter = Mock()
        interpreter.interpret.side_effect = ConnectionError("down")
        fallback = TimedFallback(interpreter)
        original = LowConfidenceMatch(0.1, "VENTAS", "READ")
        try:
            with pytest.raises(LowConfidenceMatch) as exc:
                fallback.resolve("hola", context, original)
        finally:
            fallback.shutdown()
        assert isinstance(exc.value.__cause__, ConnectionError)

    @pytest.mark.parametrize("answer", [None, _resolved(action="EXPORT")])
    def test_empty_or_unknown_answer_reraises(self, context, answer):
        """Test no answer or an unknown action yields the original error."""
        interpreter = Mock()
        interpreter.interpret.return_value = answer
        fallback = TimedFallback(interpreter)
        try:
            with pytest.raises(InsufficientConfidence):
                fallback.resolve("hola", context, InsufficientConfidence(0.1))
        finally:
            fallback.shutdown()

    def test_forbidden_answer_rejected(self, context):
        """Test the fallback cannot escape the caller's permissions."""
        interpreter = Mock()
        fallback = TimedFallback(interpreter)
        try:
            interpreter.interpret.return_value = _resolved(module="CLINICO")
            with pytest.raises(ModuleNotPermitted):
                fallback.resolve("hola", context, InsufficientConfidence(0.1))
            interpreter.interpret.return_value = _resolved(action="DELETE")
            with pytest.raises(ActionNotPermitted):
                fallback.resolve("hola", context, InsufficientConfidence(0.1))
        finally:
            fallback.shutdown()

    def test_invalid_timeout(self):
        """Test timeout must be positive."""
        with pytest.raises(ValueError):
            TimedFallback(Mock(), timeout_seconds=0)
