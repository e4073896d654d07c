"""
Severity Aggregator - reduce resolved interactions to an overall risk level.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from .config import TierConfidence, get_config
from .models import ConfidenceLevel, InteractionRecord, RiskLevel, Severity

SEVERITY_TO_RISK = {
    Severity.MINOR: RiskLevel.LOW,
    Severity.MODERATE: RiskLevel.MODERATE,
    Severity.MAJOR: RiskLevel.HIGH,
    Severity.CONTRAINDICATED: RiskLevel.HIGH,
}


@dataclass(frozen=True)
class AggregateResult:
    overall_risk: RiskLevel
    worst_severity: Optional[Severity]
    confidence: ConfidenceLevel


def overall_risk_for(severity: Optional[Severity]) -> RiskLevel:
    if severity is None:
        return RiskLevel.LOW
    return SEVERITY_TO_RISK[severity]


def aggregate(
    records: Iterable[InteractionRecord],
    tier_confidence: Optional[TierConfidence] = None,
) -> AggregateResult:
    """
    Worst severity dominates. Confidence is LOW without records; otherwise the
    weakest record confidence, never above the configured ceiling (MEDIUM).
    """
    tier_confidence = tier_confidence or get_config().tier_confidence
    records = list(records)

    if not records:
        return AggregateResult(
            overall_risk=RiskLevel.LOW,
            worst_severity=None,
            confidence=ConfidenceLevel.LOW,
        )

    worst = max(record.severity for record in records)
    weakest = min((record.confidence for record in records), key=lambda c: c.rank)
    ceiling = tier_confidence.overall_ceiling
    confidence = weakest if weakest.rank <= ceiling.rank else ceiling

    return AggregateResult(
        overall_risk=overall_risk_for(worst),
        worst_severity=worst,
        confidence=confidence,
    )
