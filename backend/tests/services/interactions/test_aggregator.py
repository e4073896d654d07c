"""
Unit tests for severity aggregation and the evidence summary.
"""

import pytest

from oncosafe.services.interactions.aggregator import aggregate, overall_risk_for
from oncosafe.services.interactions.config import TierConfidence
from oncosafe.services.interactions.evidence import summarize_evidence
from oncosafe.services.interactions.models import (
    ConfidenceLevel,
    DrugPair,
    InteractionRecord,
    RiskLevel,
    Severity,
    SourceTier,
)
from oncosafe.services.interactions.resolver import PairResolution


def record(severity, confidence=ConfidenceLevel.MEDIUM, tier=SourceTier.CURATED):
    return InteractionRecord(
        drug_a="a",
        drug_b="b",
        severity=severity,
        source_tier=tier,
        confidence=confidence,
        is_heuristic=tier == SourceTier.HEURISTIC,
        citations=["ref"],
        evidence_level="B",
    )


class TestAggregate:

    def test_empty_is_low_risk_low_confidence(self):
        result = aggregate([])

        assert result.overall_risk == RiskLevel.LOW
        assert result.worst_severity is None
        assert result.confidence == ConfidenceLevel.LOW

    @pytest.mark.parametrize("severity,risk", [
        (Severity.MINOR, RiskLevel.LOW),
        (Severity.MODERATE, RiskLevel.MODERATE),
        (Severity.MAJOR, RiskLevel.HIGH),
        (Severity.CONTRAINDICATED, RiskLevel.HIGH),
    ])
    def test_severity_to_risk(self, severity, risk):
        assert aggregate([record(severity)]).overall_risk == risk
        assert overall_risk_for(severity) == risk

    def test_worst_severity_dominates(self):
        result = aggregate([record(Severity.MINOR), record(Severity.CONTRAINDICATED), record(Severity.MODERATE)])
        assert result.worst_severity == Severity.CONTRAINDICATED
        assert result.overall_risk == RiskLevel.HIGH

    def test_adding_records_never_lowers_risk(self):
        records = []
        previous = aggregate(records).overall_risk
        for severity in [Severity.MODERATE, Severity.MINOR, Severity.MAJOR, Severity.MINOR]:
            records.append(record(severity))
            current = aggregate(records).overall_risk
            assert list(RiskLevel).index(current) >= list(RiskLevel).index(previous)
            previous = current

    def test_confidence_capped_at_medium(self):
        result = aggregate([record(Severity.MAJOR, ConfidenceLevel.HIGH, SourceTier.CACHE)])
        assert result.confidence == ConfidenceLevel.MEDIUM

    def test_weakest_confidence_wins(self):
        result = aggregate([
            record(Severity.MAJOR, ConfidenceLevel.HIGH, SourceTier.CACHE),
            record(Severity.MINOR, ConfidenceLevel.LOW, SourceTier.HEURISTIC),
        ])
        assert result.confidence == ConfidenceLevel.LOW

    def test_ceiling_is_configurable(self):
        tiers = TierConfidence(overall_ceiling=ConfidenceLevel.HIGH)
        result = aggregate([record(Severity.MAJOR, ConfidenceLevel.HIGH, SourceTier.CACHE)], tiers)
        assert result.confidence == ConfidenceLevel.HIGH


class TestEvidenceSummary:

    def test_distribution_and_unresolved(self, drug):
        resolved = PairResolution(
            pair=DrugPair(drug_a=drug("a"), drug_b=drug("b")),
            record=record(Severity.MAJOR, ConfidenceLevel.LOW, SourceTier.HEURISTIC),
        )
        unresolved = PairResolution(
            pair=DrugPair(drug_a=drug("c"), drug_b=drug("d")),
            failed_tiers=[SourceTier.CURATED],
        )

        summary = summarize_evidence([resolved, unresolved])

        assert summary.tier_distribution == {"cache": 0, "curated": 0, "heuristic": 1, "unresolved": 1}
        assert summary.unresolved_pairs == ["c + d"]
        assert summary.pairs[0].is_heuristic
        assert summary.pairs[0].evidence_level == "B"
        assert summary.pairs[1].failed_tiers == [SourceTier.CURATED]
        assert summary.pairs[1].source_tier is None

    def test_empty(self):
        summary = summarize_evidence([])
        assert sum(summary.tier_distribution.values()) == 0
        assert summary.pairs == []
