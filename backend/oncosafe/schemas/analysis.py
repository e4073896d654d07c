"""
Wire schemas for the analysis dispatch contract.
Field names are snake_case in Python and camelCase on the wire.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from oncosafe.schemas.base import CamelModel
from oncosafe.services.interactions.models import (
    ConfidenceLevel,
    InteractionRecord,
    MedicationReference,
    RiskLevel,
    Severity,
    SourceTier,
)
from oncosafe.services.pharmacogenomics.models import (
    PerDrugPGxRecommendation,
    PGxResult,
    Phenotype,
    PhenotypeGap,
    RecommendationAction,
)
from oncosafe.services.quality.data_quality import AllergyRecord, Demographics, LabResult


# ============================================================================
# Request
# ============================================================================

class AnalysisRequest(CamelModel):
    """Dispatch request: {analysisType, patientId, payload}."""
    analysis_type: Optional[str] = Field(None, description="DDI, DATA_QUALITY, EVIDENCE or PGX")
    patient_id: Optional[str] = Field(None, description="Patient identifier")
    payload: Optional[Dict[str, Any]] = Field(None, description="Analysis-specific input")


class MedicationListPayload(CamelModel):
    """DDI and EVIDENCE input."""
    medications: List[MedicationReference] = Field(..., min_length=1)


class GenotypeInput(CamelModel):
    """Caller-reported genotype for one gene; inference fields are set by the mapper only."""
    gene: str = Field(..., description="Gene symbol (e.g., CYP2D6)")
    genotype: Optional[str] = Field(None, description="Diplotype, e.g. *4/*4")
    phenotype: Optional[str] = Field(None, description="Reported phenotype (PM, Poor Metabolizer, ...)")

    def to_result(self) -> PGxResult:
        return PGxResult(gene=self.gene, genotype=self.genotype, phenotype=self.phenotype)


class PGxPayload(CamelModel):
    genotypes: List[GenotypeInput] = Field(..., min_length=1, description="Genotype results per gene")
    medications: List[MedicationReference] = Field(..., min_length=1)


class DataQualityPayload(CamelModel):
    demographics: Demographics
    labs: List[LabResult] = Field(default_factory=list)
    allergies: List[AllergyRecord] = Field(default_factory=list)


# ============================================================================
# DDI
# ============================================================================

class InteractionOut(CamelModel):
    drug_a: str
    drug_b: str
    severity: Severity
    mechanism: Optional[str] = None
    effect: Optional[str] = None
    recommendation: Optional[str] = None
    evidence_level: str = ""
    citations: List[str] = Field(default_factory=list)
    source_tier: SourceTier
    confidence: ConfidenceLevel
    is_heuristic: bool = False

    @classmethod
    def from_record(cls, record: InteractionRecord) -> "InteractionOut":
        return cls(**record.model_dump())


class DDIAnalysisResult(CamelModel):
    analysis_type: Literal["DDI"] = "DDI"
    patient_id: str
    overall_risk_level: RiskLevel
    worst_severity: Optional[Severity] = None
    per_pair_interactions: List[InteractionOut] = Field(default_factory=list)
    confidence: ConfidenceLevel
    pairs_evaluated: int = 0
    notes: List[str] = Field(default_factory=list)


# ============================================================================
# PGx
# ============================================================================

class PhenotypeOut(CamelModel):
    gene: str
    genotype: Optional[str] = None
    phenotype: Optional[Phenotype] = None
    inferred: bool = False
    activity_score: Optional[float] = None

    @classmethod
    def from_result(cls, result: PGxResult) -> "PhenotypeOut":
        return cls(
            gene=result.gene,
            genotype=result.genotype,
            phenotype=result.phenotype,
            inferred=result.phenotype_inferred,
            activity_score=result.activity_score,
        )


class GapOut(CamelModel):
    gene: str
    genotype: Optional[str] = None
    reason: str

    @classmethod
    def from_gap(cls, gap: PhenotypeGap) -> "GapOut":
        return cls(**gap.model_dump())


class PGxOverview(CamelModel):
    genes_evaluated: List[str] = Field(default_factory=list)
    phenotypes: List[PhenotypeOut] = Field(default_factory=list)
    gaps: List[GapOut] = Field(default_factory=list)


class RecommendationOut(CamelModel):
    drug_name: str
    gene: str
    phenotype: Phenotype
    recommendation: RecommendationAction
    rationale: str
    citations: List[str]

    @classmethod
    def from_recommendation(cls, rec: PerDrugPGxRecommendation) -> "RecommendationOut":
        return cls(**rec.model_dump())


class PGxAnalysisResult(CamelModel):
    analysis_type: Literal["PGX"] = "PGX"
    patient_id: str
    pgx_overview: PGxOverview
    per_drug_recommendations: List[RecommendationOut] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)


# ============================================================================
# DATA_QUALITY
# ============================================================================

class DataQualityResult(CamelModel):
    analysis_type: Literal["DATA_QUALITY"] = "DATA_QUALITY"
    patient_id: str
    completeness_score: int
    quality: str
    missing_demographics: List[str] = Field(default_factory=list)
    incomplete_labs: List[str] = Field(default_factory=list)
    allergies_missing_reaction: List[str] = Field(default_factory=list)
    issues: List[str] = Field(default_factory=list)


# ============================================================================
# EVIDENCE
# ============================================================================

class PairEvidenceOut(CamelModel):
    drug_a: str
    drug_b: str
    resolved: bool
    source_tier: Optional[SourceTier] = None
    evidence_level: Optional[str] = None
    citations: List[str] = Field(default_factory=list)
    is_heuristic: bool = False


class EvidenceResult(CamelModel):
    analysis_type: Literal["EVIDENCE"] = "EVIDENCE"
    patient_id: str
    per_pair_evidence: List[PairEvidenceOut] = Field(default_factory=list)
    tier_distribution: Dict[str, int] = Field(default_factory=dict)
    unresolved_pairs: List[str] = Field(default_factory=list)
    confidence: ConfidenceLevel
    notes: List[str] = Field(default_factory=list)
