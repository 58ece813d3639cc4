"""
Tests for environment-based configuration.
"""
import pytest

from erp_intent.config import EngineConfig
from erp_intent.config_loader import load_config_from_env
from erp_intent.exceptions import ConfigurationError

ENV_VARS = [
    "ERP_INTENT_VOCABULARY_PATH",
    "ERP_INTENT_CATALOG_DIR",
    "ERP_INTENT_CONFIDENCE_GATE",
    "ERP_INTENT_SESSION_TTL_SECONDS",
    "ERP_INTENT_SWEEP_INTERVAL_SECONDS",
    "ERP_INTENT_ENABLE_SWEEPER",
    "ERP_INTENT_FALLBACK_TIMEOUT_SECONDS",
    "ERP_INTENT_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestConfigLoader:
    """Tests for load_config_from_env."""

    def test_defaults(self):
        """Test an empty environment yields the defaults."""
        config = load_config_from_env(use_dotenv=False)
        assert config == EngineConfig()
        assert config.confidence_gate is None

    def test_overrides(self, monkeypatch, tmp_path):
        """Test every variable is read and parsed."""
        monkeypatch.setenv("ERP_INTENT_CATALOG_DIR", str(tmp_path))
        monkeypatch.setenv("ERP_INTENT_CONFIDENCE_GATE", "0.3")
        monkeypatch.setenv("ERP_INTENT_SESSION_TTL_SECONDS", "60")
        monkeypatch.setenv("ERP_INTENT_ENABLE_SWEEPER", "false")
        monkeypatch.setenv("ERP_INTENT_LOG_LEVEL", "debug")
        config = load_config_from_env(use_dotenv=False)
        assert config.catalog_dir == str(tmp_path)
        assert config.confidence_gate == 0.3
        assert config.session_ttl_seconds == 60
        assert config.enable_sweeper is False
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize("name,value", [
        ("ERP_INTENT_CONFIDENCE_GATE", "1.5"),
        ("ERP_INTENT_CONFIDENCE_GATE", "high"),
        ("ERP_INTENT_SESSION_TTL_SECONDS", "0"),
        ("ERP_INTENT_FALLBACK_TIMEOUT_SECONDS", "-1"),
    ])
    def test_invalid_values(self, monkeypatch, name, value):
        """Test invalid numbers are configuration errors."""
        monkeypatch.setenv(name, value)
        with pytest.raises(ConfigurationError):
            load_config_from_env(use_dotenv=False)

    def test_missing_path(self, monkeypatch, tmp_path):
        """Test configured paths must exist."""
        monkeypatch.setenv("ERP_INTENT_VOCABULARY_PATH", str(tmp_path / "nope.json"))
        with pytest.raises(ConfigurationError):
            load_config_from_env(use_dotenv=False)

    def test_placeholder_ignored(self, monkeypatch):
        """Test placeholder values fall back to the default with a warning."""
        monkeypatch.setenv("ERP_INTENT_LOG_LEVEL", "your_level")
        with pytest.warns(UserWarning):
            config = load_config_from_env(use_dotenv=False)
        assert config.log_level == "INFO"
