"""
Tests for vocabulary loading, validation and indexing.
"""
import json

import pytest

from erp_intent.exceptions import ConfigValidationError
from erp_intent.interaction import CrudAction
from erp_intent.vocabulary import (
    DEFAULT_VOCABULARY_PATH,
    VocabularyIndex,
    load_vocabulary_config,
    parse_vocabulary_config,
)


@pytest.fixture
def raw_vocabulary():
    with open(DEFAULT_VOCABULARY_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


class TestVocabularyLoader:
    """Tests for loading the vocabulary configuration."""

    def test_default_vocabulary_loads(self, vocabulary_config):
        """Test the packaged vocabulary validates."""
        assert vocabulary_config.settings.min_confidence == 0.15
        assert list(vocabulary_config.vocabulary.modules) == ["CLINICO", "VENTAS", "INVENTARIO", "COMPRAS"]

    @pytest.mark.parametrize("section", ["settings", "vocabulary", "patterns", "scoring"])
    def test_missing_required_section_is_fatal(self, raw_vocabulary, section):
        """Test a missing required section raises ConfigValidationError."""
        del raw_vocabulary[section]
        with pytest.raises(ConfigValidationError, match=section):
            parse_vocabulary_config(raw_vocabulary)

    def test_invalid_regex_rejected(self, raw_vocabulary):
        """Test a detection pattern that does not compile is rejected."""
        raw_vocabulary["patterns"]["detect_action"]["READ"] = ["(unclosed"]
        with pytest.raises(ConfigValidationError):
            parse_vocabulary_config(raw_vocabulary)

    @pytest.mark.parametrize("corrections", [
        {"lsitar": "listar", "listar": "mostrar"},
        {"por fa": "favor"},
    ])
    def test_chaining_or_multi_word_corrections_rejected(self, raw_vocabulary, corrections):
        """Test corrections must be single words that never produce another key."""
        raw_vocabulary["normalization"]["spelling_corrections"] = corrections
        with pytest.raises(ConfigValidationError):
            parse_vocabulary_config(raw_vocabulary)

    def test_unknown_action_rejected(self, raw_vocabulary):
        """Test actions outside CRUD are rejected."""
        raw_vocabulary["vocabulary"]["actions"]["EXPORT"] = {"keywords": ["exportar"]}
        with pytest.raises(ConfigValidationError):
            parse_vocabulary_config(raw_vocabulary)

    def test_missing_file(self, tmp_path):
        """Test a missing file is a configuration error."""
        with pytest.raises(ConfigValidationError):
            load_vocabulary_config(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        """Test malformed JSON is a configuration error."""
        path = tmp_path / "vocabulary.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigValidationError):
            load_vocabulary_config(path)

    def test_config_is_immutable(self, vocabulary_config):
        """Test the loaded configuration cannot be mutated."""
        with pytest.raises(Exception):
            vocabulary_config.settings.min_confidence = 0.9


class TestVocabularyIndex:
    """Tests for the immutable vocabulary index."""

    def test_module_order_follows_config(self, index):
        """Test candidate order is the configuration order."""
        assert index.module_names == ["CLINICO", "VENTAS", "INVENTARIO", "COMPRAS"]

    def test_synonyms_are_terms(self, index):
        """Test direct synonyms are scored like keywords."""
        assert "enfermo" in index.module("CLINICO").terms
        assert "comprador" in index.module("VENTAS").terms

    def test_defaults(self, index):
        """Test configured defaults are exposed."""
        assert index.default_module == "VENTAS"
        assert index.default_action is CrudAction.READ

    def test_topic_words_combine_module_and_action(self, index):
        """Test topic words contain both module and action vocabulary."""
        words = index.topic_words("CLINICO", CrudAction.READ)
        assert "pacientes" in words
        assert "listar" in words

    def test_extraction_templates(self, index):
        """Test extraction templates are looked up case-insensitively."""
        assert index.extraction_templates("NOMBRE")
        assert index.has_extraction_kind("_default")
        assert index.extraction_templates("unknown") == ()
