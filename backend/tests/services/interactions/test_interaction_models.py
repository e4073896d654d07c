"""
Unit tests for interaction data models: severity ordering and pair identity.
"""

import pytest

from oncosafe.services.interactions.models import (
    ConfidenceLevel,
    DrugPair,
    InteractionRecord,
    InteractionRow,
    Severity,
    SourceTier,
    substance_key,
)


class TestSeverity:
    """Severity is totally ordered and parsed leniently from stored labels."""

    def test_total_order(self):
        assert Severity.MINOR < Severity.MODERATE < Severity.MAJOR < Severity.CONTRAINDICATED
        assert max([Severity.MODERATE, Severity.CONTRAINDICATED, Severity.MINOR]) == Severity.CONTRAINDICATED

    @pytest.mark.parametrize("label,expected", [
        ("major", Severity.MAJOR),
        ("  Major ", Severity.MAJOR),
        ("severe", Severity.MAJOR),
        ("high", Severity.MAJOR),
        ("medium", Severity.MODERATE),
        ("low", Severity.MINOR),
        ("critical", Severity.CONTRAINDICATED),
    ])
    def test_parse_synonyms(self, label, expected):
        assert Severity.parse(label) == expected

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            Severity.parse("catastrophic")

    def test_parse_passes_enum_through(self):
        assert Severity.parse(Severity.MINOR) is Severity.MINOR

    def test_comparison_with_other_types_is_unsupported(self):
        with pytest.raises(TypeError):
            Severity.MINOR < 3


class TestDrugPair:

    def test_pair_key_is_order_insensitive(self, drug):
        pair = DrugPair(drug_a=drug("warfarin"), drug_b=drug("aspirin"))
        assert pair.pair_key() == pair.reversed().pair_key() == ("aspirin", "warfarin")

    def test_label_keeps_input_order(self, drug):
        pair = DrugPair(drug_a=drug("warfarin"), drug_b=drug("aspirin"))
        assert pair.label() == "warfarin + aspirin"


class TestInteractionRecord:

    def test_from_row_uses_pair_order_and_tier(self, drug):
        row = InteractionRow(
            drugs=["aspirin", "warfarin"],
            severity="severe",
            mechanism="Additive bleeding risk",
            management="Avoid combination",
            evidence_level="A",
            sources=["FDA label"],
        )
        pair = DrugPair(drug_a=drug("warfarin"), drug_b=drug("aspirin"))

        record = InteractionRecord.from_row(row, pair, SourceTier.HEURISTIC, ConfidenceLevel.LOW)

        assert record.drug_a == "warfarin"
        assert record.drug_b == "aspirin"
        assert record.severity == Severity.MAJOR
        assert record.recommendation == "Avoid combination"
        assert record.effect is None
        assert record.is_heuristic
        assert record.citations == ["FDA label"]

    def test_row_requires_exactly_two_drugs(self):
        with pytest.raises(ValueError):
            InteractionRow(drugs=["warfarin"], severity="major")


def test_substance_key_ignores_case_and_punctuation():
    assert substance_key("Contrast Media") == substance_key("contrast-media") == "contrastmedia"
