"""
Evidence summary over resolved pairs: which tier answered each pair and with
what grade of evidence.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .models import SourceTier
from .resolver import PairResolution


class PairEvidence(BaseModel):
    drug_a: str
    drug_b: str
    resolved: bool
    source_tier: Optional[SourceTier] = None
    evidence_level: Optional[str] = None
    citations: List[str] = Field(default_factory=list)
    is_heuristic: bool = False
    failed_tiers: List[SourceTier] = Field(default_factory=list)


class EvidenceSummary(BaseModel):
    pairs: List[PairEvidence] = Field(default_factory=list)
    tier_distribution: Dict[str, int] = Field(default_factory=dict)
    unresolved_pairs: List[str] = Field(default_factory=list)


def summarize_evidence(resolutions: List[PairResolution]) -> EvidenceSummary:
    """Per-pair evidence plus counts per tier ('unresolved' for misses)."""
    summary = EvidenceSummary(
        tier_distribution={**{tier.value: 0 for tier in SourceTier}, "unresolved": 0}
    )

    for resolution in resolutions:
        pair = resolution.pair
        record = resolution.record
        if record is None:
            summary.tier_distribution["unresolved"] += 1
            summary.unresolved_pairs.append(pair.label())
            summary.pairs.append(PairEvidence(
                drug_a=pair.drug_a.canonical_name,
                drug_b=pair.drug_b.canonical_name,
                resolved=False,
                failed_tiers=list(resolution.failed_tiers),
            ))
            continue

        summary.tier_distribution[record.source_tier.value] += 1
        summary.pairs.append(PairEvidence(
            drug_a=record.drug_a,
            drug_b=record.drug_b,
            resolved=True,
            source_tier=record.source_tier,
            evidence_level=record.evidence_level or None,
            citations=list(record.citations),
            is_heuristic=record.is_heuristic,
            failed_tiers=list(resolution.failed_tiers),
        ))

    return summary
