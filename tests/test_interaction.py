"""
Tests for text normalization and intent classification.
"""
import pytest

from erp_intent.interaction import CrudAction, IntentClassifier, TextNormalizer


@pytest.fixture
def normalizer(index):
    return TextNormalizer(index)


@pytest.fixture
def classifier(index):
    return IntentClassifier(index)


class TestTextNormalizer:
    """Tests for TextNormalizer."""

    def test_lowercases_and_collapses_whitespace(self, normalizer):
        """Test case folding and whitespace cleanup."""
        assert normalizer.normalize("  LISTAR    Pacientes  ") == "listar pacientes"

    def test_spelling_corrections(self, normalizer):
        """Test whole-word spelling corrections."""
        assert normalizer.normalize("lsitar pasientes") == "listar pacientes"

    def test_filler_words_removed(self, normalizer):
        """Test filler words are removed."""
        assert normalizer.normalize("Hola por favor listar pacientes gracias") == "listar pacientes"

    def test_stop_words_between_tokens_removed(self, normalizer):
        """Test stop words between real tokens are collapsed."""
        assert normalizer.normalize("listar los pacientes de la clinica") == "listar pacientes clinica"

    def test_empty_input(self, normalizer):
        """Test empty input normalizes to empty string."""
        assert normalizer.normalize("") == ""
        assert normalizer.normalize(None) == ""

    @pytest.mark.parametrize("text", [
        "listar los pacientes de la clinica",
        "Porfa lsitar  los  de  la  el  pacientes",
        "de de de de",
        "hola hola por favor",
        "crear cliente nombre ACME monto 500",
        "q q q xq",
        "  la  a  al  y  que  ",
        "buscar el paciente Juan Pérez, por favor.",
        "listar de hola de la gracias de pacientes",
        "q de porfa y de gracias el xq",
    ])
    def test_idempotent(self, normalizer, text):
        """Test normalize(normalize(x)) == normalize(x)."""
        once = normalizer.normalize(text)
        assert normalizer.normalize(once) == once


class TestIntentClassifier:
    """Tests for IntentClassifier."""

    def test_classify_action_read(self, classifier):
        """Test READ keywords win."""
        action, score = classifier.classify_action("listar pacientes")
        assert action is CrudAction.READ
        assert score > 0

    def test_classify_action_create(self, classifier):
        """Test CREATE keywords and expressions win."""
        action, _ = classifier.classify_action("crear cliente")
        assert action is CrudAction.CREATE

    def test_classify_action_below_threshold_uses_default(self, classifier):
        """Test sub-threshold actions fall back to the default with score 0."""
        action, score = classifier.classify_action("pacientes")
        assert action is CrudAction.READ
        assert score == 0.0

    def test_classify_module(self, classifier):
        """Test module classification among allowed modules."""
        module, score = classifier.classify_module("listar pacientes", ["CLINICO", "VENTAS"])
        assert module == "CLINICO"
        assert score >= 0.5

    def test_classify_module_respects_allowed(self, classifier):
        """Test modules outside the allowed set never win."""
        module, score = classifier.classify_module("listar pacientes", ["VENTAS"])
        assert module == "VENTAS"
        assert score == 0.0

    def test_empty_allowed_modules_returns_default(self, classifier):
        """Test empty allowed modules returns the default and never raises."""
        module, score = classifier.classify_module("listar pacientes", [])
        assert module == "VENTAS"
        assert score == 0.0

        result = classifier.classify("listar pacientes", [])
        assert result.module == "VENTAS"
        assert result.provisional is True

    def test_classify_combines_module_and_action(self, classifier):
        """Test full classification of a clear message."""
        result = classifier.classify("crear cliente", ["CLINICO", "VENTAS"])
        assert result.module == "VENTAS"
        assert result.action is CrudAction.CREATE
        assert result.provisional is False
        assert result.score == classifier.score_module("crear cliente", "VENTAS") + classifier.score_action(
            "crear cliente", CrudAction.CREATE
        )

    def test_classify_unrelated_text_is_provisional(self, classifier):
        """Test nothing above threshold falls back to the default module, flagged provisional."""
        result = classifier.classify("el clima de hoy", ["CLINICO", "VENTAS"])
        assert result.module == "VENTAS"
        assert result.provisional is True

    def test_sub_threshold_module_cannot_win_on_action_score(self, classifier):
        """Test a related-word-only module is forced to zero before combination."""
        # "nombre" is only a related word of VENTAS (0.2 < threshold)
        result = classifier.classify("crear nombre", ["VENTAS"])
        assert result.provisional is True

    def test_tie_goes_to_first_configured_module(self, classifier):
        """Test ties resolve to configuration order, independent of caller order."""
        text = "pacientes clientes"
        assert classifier.score_module(text, "CLINICO") == classifier.score_module(text, "VENTAS")
        assert classifier.classify_module(text, ["VENTAS", "CLINICO"])[0] == "CLINICO"

    @pytest.mark.parametrize("module,base,extra", [
        ("CLINICO", "listar pacientes", "citas"),
        ("VENTAS", "crear cliente", "factura"),
        ("INVENTARIO", "ver stock", "productos"),
        ("COMPRAS", "listar proveedores", "compras"),
    ])
    def test_monotonic_module_scoring(self, classifier, module, base, extra):
        """Test adding a matching keyword never decreases the module score."""
        before = classifier.score_module(base, module)
        after = classifier.score_module(f"{base} {extra}", module)
        assert after >= before

    def test_unknown_module_scores_zero(self, classifier):
        """Test unconfigured modules score zero."""
        assert classifier.score_module("listar pacientes", "CONTABILIDAD") == 0.0
