"""
Data models for alternative therapy ranking.
"""

from typing import List, Optional

from pydantic import Field

from oncosafe.schemas.base import CamelModel
from ..interactions.models import Severity, SourceTier
from ..pharmacogenomics.models import PGxResult


class PatientContext(CamelModel):
    """Patient factors that can rule a candidate out or add dosing notes."""
    age: Optional[int] = Field(None, ge=0, le=130, description="Age in years")
    allergies: List[str] = Field(default_factory=list, description="Recorded allergy names")
    phenotypes: List[PGxResult] = Field(default_factory=list, description="Known or mapped PGx results")
    renal_function: Optional[str] = Field(None, description="'normal' or 'impaired'")
    hepatic_function: Optional[str] = Field(None, description="'normal' or 'impaired'")


class InteractionBurden(CamelModel):
    """One resolved interaction counted against a candidate."""
    with_drug: str
    severity: Severity
    risk_score: int
    mechanism: Optional[str] = None
    source_tier: SourceTier


class AlternativeSuggestion(CamelModel):
    """A scored substitute for `for_drug`."""
    for_drug: str = Field(..., description="Medication being replaced, as supplied")
    name: str = Field(..., description="Canonical name of the alternative")
    drug_class: str
    safety_score: float = Field(..., ge=0.0, le=100.0)
    efficacy_score: float = Field(..., ge=0.0, le=100.0)
    score: float = Field(..., description="safety_score + efficacy_score")
    best: bool = Field(False, description="Both component scores reach the high-confidence threshold")
    formulary_status: str = Field(..., description="likely-covered or check-coverage")
    rationale: str
    interaction_details: List[InteractionBurden] = Field(default_factory=list)
    unresolved_with: List[str] = Field(
        default_factory=list,
        description="Co-medications with no interaction data for this candidate"
    )
    dosage_adjustments: List[str] = Field(default_factory=list)


class ExcludedAlternative(CamelModel):
    """A class member removed before scoring, with the reason."""
    name: str
    reason: str


class AlternativeRanking(CamelModel):
    """Ranker output: visible suggestions plus what was excluded."""
    for_drug: str
    drug_class: Optional[str] = None
    suggestions: List[AlternativeSuggestion] = Field(default_factory=list)
    excluded: List[ExcludedAlternative] = Field(default_factory=list)
