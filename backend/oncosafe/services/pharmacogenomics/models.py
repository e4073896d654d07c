"""
Data models for pharmacogenomic (PGx) analysis.
Genotype observations flow through phenotype mapping into per-drug
recommendations.
"""

import re
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class RuleAuthoringError(AssertionError):
    """A rule table produced output that violates a clinical invariant."""


class Phenotype(str, Enum):
    """CPIC phenotype classifications used by the rule tables."""
    POOR_METABOLIZER = "poor_metabolizer"
    INTERMEDIATE_METABOLIZER = "intermediate_metabolizer"
    NORMAL_METABOLIZER = "normal_metabolizer"
    RAPID_METABOLIZER = "rapid_metabolizer"
    ULTRARAPID_METABOLIZER = "ultrarapid_metabolizer"
    # Transporter genes (SLCO1B1)
    POOR_FUNCTION = "poor_function"
    DECREASED_FUNCTION = "decreased_function"
    NORMAL_FUNCTION = "normal_function"

    @classmethod
    def parse(cls, value) -> Optional["Phenotype"]:
        """
        Normalize a caller-supplied phenotype label.
        Accepts short codes (PM), CPIC long names (Poor Metabolizer) and
        slug forms (poor-metabolizer). Returns None for unrecognized labels.
        """
        if value is None:
            return None
        if isinstance(value, Phenotype):
            return value
        label = str(value).strip()
        if not label:
            return None
        if label.upper() in PHENOTYPE_SHORT_CODES:
            return PHENOTYPE_SHORT_CODES[label.upper()]
        slug = re.sub(r"[\s\-]+", "_", label.lower())
        slug = slug.replace("ultra_rapid", "ultrarapid").replace("extensive", "normal")
        try:
            return cls(slug)
        except ValueError:
            return None


PHENOTYPE_SHORT_CODES = {
    "PM": Phenotype.POOR_METABOLIZER,
    "IM": Phenotype.INTERMEDIATE_METABOLIZER,
    "NM": Phenotype.NORMAL_METABOLIZER,
    "EM": Phenotype.NORMAL_METABOLIZER,
    "RM": Phenotype.RAPID_METABOLIZER,
    "UM": Phenotype.ULTRARAPID_METABOLIZER,
}


class RecommendationAction(str, Enum):
    AVOID = "avoid"
    ADJUST_DOSE = "adjust_dose"
    USE_ALTERNATIVE = "use_alternative"
    MONITOR = "monitor"
    NO_ACTION = "no_action"


class PGxResult(BaseModel):
    """Genotype observation for one gene. Phenotype may be absent (a data gap)."""
    gene: str = Field(..., description="Gene symbol (e.g., CYP2D6)")
    genotype: Optional[str] = Field(None, description="Diplotype, e.g. *4/*4 or *1/*2x2")
    phenotype: Optional[Phenotype] = Field(None, description="Reported or inferred phenotype")
    phenotype_inferred: bool = Field(False, description="True when the mapper derived the phenotype")
    activity_score: Optional[float] = Field(None, description="Diplotype activity score when inferred")

    @field_validator("phenotype", mode="before")
    @classmethod
    def _normalize_phenotype(cls, value):
        return Phenotype.parse(value)


class PhenotypeGap(BaseModel):
    """A gene left without a phenotype after mapping."""
    gene: str
    genotype: Optional[str] = None
    reason: str


class PhenotypeMapping(BaseModel):
    """Mapper output: every input result (mapped where possible) plus the gaps."""
    results: List[PGxResult] = Field(default_factory=list)
    gaps: List[PhenotypeGap] = Field(default_factory=list)

    @property
    def genes_evaluated(self) -> List[str]:
        return [r.gene for r in self.results]


class PerDrugPGxRecommendation(BaseModel):
    """Actionable genotype-driven guidance for one medication."""
    drug_name: str = Field(..., description="Medication as supplied by the caller")
    gene: str
    phenotype: Phenotype
    recommendation: RecommendationAction
    rationale: str
    citations: List[str] = Field(..., description="Guideline references (at least one)")
