"""
Data models for drug-drug interaction analysis.
These models carry a medication list from caller input through normalization,
pairing and tiered resolution.
"""

import re
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


def substance_key(name: str) -> str:
    """Lookup key for substance-name tables: lowercase alphanumerics only."""
    return re.sub(r"[^a-z0-9]", "", (name or "").lower())


class Severity(str, Enum):
    """Clinical impact of an interaction. Totally ordered by `rank`."""
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"
    CONTRAINDICATED = "contraindicated"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value) -> "Severity":
        """Parse a severity label from stored data, accepting common synonyms."""
        if isinstance(value, Severity):
            return value
        label = str(value or "").strip().lower()
        if label in _SEVERITY_SYNONYMS:
            return _SEVERITY_SYNONYMS[label]
        raise ValueError(f"Unknown severity: {value!r}")


_SEVERITY_RANK = {
    Severity.MINOR: 0,
    Severity.MODERATE: 1,
    Severity.MAJOR: 2,
    Severity.CONTRAINDICATED: 3,
}

_SEVERITY_SYNONYMS = {
    "minor": Severity.MINOR,
    "low": Severity.MINOR,
    "moderate": Severity.MODERATE,
    "medium": Severity.MODERATE,
    "major": Severity.MAJOR,
    "high": Severity.MAJOR,
    "severe": Severity.MAJOR,
    "contraindicated": Severity.CONTRAINDICATED,
    "critical": Severity.CONTRAINDICATED,
}


class ConfidenceLevel(str, Enum):
    """Evidence availability behind an analysis."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {ConfidenceLevel.LOW: 0, ConfidenceLevel.MEDIUM: 1, ConfidenceLevel.HIGH: 2}[self]


class RiskLevel(str, Enum):
    """Overall risk reported for a medication list."""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class SourceTier(str, Enum):
    """Which lookup tier resolved an interaction."""
    CACHE = "cache"
    CURATED = "curated"
    HEURISTIC = "heuristic"


class MedicationReference(BaseModel):
    """Caller-supplied medication entry."""
    name: str = Field(..., description="Free-text or brand drug name")
    dose: Optional[str] = Field(None, description="Dose as written (e.g., 5 mg)")
    route: Optional[str] = Field(None, description="Route of administration")
    frequency: Optional[str] = Field(None, description="Dosing frequency")
    indication: Optional[str] = Field(None, description="Indication for use")


class NormalizedDrug(BaseModel):
    """A medication reference resolved to its canonical identity."""
    model_config = ConfigDict(frozen=True)

    original_reference: MedicationReference = Field(..., description="Reference as supplied")
    canonical_name: str = Field(..., description="Canonical substance name (lowercase)")
    canonical_code: Optional[str] = Field(None, description="Canonical code (e.g., RxCUI) when the directory matched")

    @property
    def display_name(self) -> str:
        return self.original_reference.name


class DrugPair(BaseModel):
    """Two normalized drugs. Identity is unordered."""
    model_config = ConfigDict(frozen=True)

    drug_a: NormalizedDrug
    drug_b: NormalizedDrug

    def pair_key(self) -> Tuple[str, str]:
        """Order-insensitive identity of the pair."""
        return tuple(sorted((self.drug_a.canonical_name, self.drug_b.canonical_name)))

    def reversed(self) -> "DrugPair":
        return DrugPair(drug_a=self.drug_b, drug_b=self.drug_a)

    def label(self) -> str:
        return f"{self.drug_a.canonical_name} + {self.drug_b.canonical_name}"


class AliasMatch(BaseModel):
    """Directory row for a matched alias or canonical name."""
    canonical_name: str
    canonical_code: Optional[str] = None


class InteractionRow(BaseModel):
    """
    Stored interaction row, shaped like the bundled static data:
    {drugs: [name, name], severity, mechanism, effect, management, evidence_level, sources[]}.
    """
    drugs: List[str] = Field(..., min_length=2, max_length=2)
    severity: str
    mechanism: str = ""
    effect: str = ""
    management: str = ""
    evidence_level: str = ""
    sources: List[str] = Field(default_factory=list)
    codes: Optional[List[str]] = Field(None, description="Canonical codes for the two drugs, same order as `drugs`")


class InteractionRecord(BaseModel):
    """Resolved interaction for one drug pair."""
    drug_a: str = Field(..., description="Canonical name of the pair's first drug")
    drug_b: str = Field(..., description="Canonical name of the pair's second drug")
    severity: Severity
    mechanism: Optional[str] = None
    effect: Optional[str] = None
    recommendation: Optional[str] = None
    evidence_level: str = Field("", description="Evidence grade as stored (A-D)")
    citations: List[str] = Field(default_factory=list)
    source_tier: SourceTier
    confidence: ConfidenceLevel
    is_heuristic: bool = Field(
        False,
        description="True when derived from the bundled literature table rather than a database"
    )

    @classmethod
    def from_row(
        cls,
        row: InteractionRow,
        pair: DrugPair,
        tier: SourceTier,
        confidence: ConfidenceLevel,
    ) -> "InteractionRecord":
        return cls(
            drug_a=pair.drug_a.canonical_name,
            drug_b=pair.drug_b.canonical_name,
            severity=Severity.parse(row.severity),
            mechanism=row.mechanism or None,
            effect=row.effect or None,
            recommendation=row.management or None,
            evidence_level=row.evidence_level,
            citations=list(row.sources),
            source_tier=tier,
            confidence=confidence,
            is_heuristic=tier == SourceTier.HEURISTIC,
        )
