"""
Data-quality assessment of a patient record snapshot.

Each expected field counts once toward completeness:
  demographics: age, sex, weight
  each lab:     value, unit
  each allergy: reaction
"""

from typing import List, Optional

from pydantic import BaseModel, Field

GOOD_THRESHOLD = 80
FAIR_THRESHOLD = 50

DEMOGRAPHIC_FIELDS = ("age", "sex", "weight")


class Demographics(BaseModel):
    age: Optional[int] = Field(None, ge=0, le=130)
    sex: Optional[str] = None
    weight: Optional[float] = Field(None, gt=0, description="Weight in kg")


class LabResult(BaseModel):
    name: str
    value: Optional[float] = None
    unit: Optional[str] = None


class AllergyRecord(BaseModel):
    substance: str
    reaction: Optional[str] = None


class DataQualityReport(BaseModel):
    completeness_score: int = Field(..., ge=0, le=100)
    quality: str = Field(..., description="good, fair or poor")
    missing_demographics: List[str] = Field(default_factory=list)
    incomplete_labs: List[str] = Field(default_factory=list)
    allergies_missing_reaction: List[str] = Field(default_factory=list)
    issues: List[str] = Field(default_factory=list)


def quality_label(score: int) -> str:
    if score >= GOOD_THRESHOLD:
        return "good"
    if score >= FAIR_THRESHOLD:
        return "fair"
    return "poor"


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def assess_data_quality(
    demographics: Demographics,
    labs: List[LabResult],
    allergies: List[AllergyRecord],
) -> DataQualityReport:
    expected = 0
    present = 0
    issues = []

    missing_demographics = []
    for name in DEMOGRAPHIC_FIELDS:
        expected += 1
        if _blank(getattr(demographics, name)):
            missing_demographics.append(name)
            issues.append(f"Demographics missing {name}")
        else:
            present += 1

    incomplete_labs = []
    for lab in labs:
        expected += 2
        missing = [f for f in ("value", "unit") if _blank(getattr(lab, f))]
        present += 2 - len(missing)
        if missing:
            incomplete_labs.append(lab.name)
            issues.append(f"Lab '{lab.name}' missing {' and '.join(missing)}")

    allergies_missing_reaction = []
    for allergy in allergies:
        expected += 1
        if _blank(allergy.reaction):
            allergies_missing_reaction.append(allergy.substance)
            issues.append(f"Allergy '{allergy.substance}' recorded without a reaction")
        else:
            present += 1

    score = round(100 * present / expected)
    return DataQualityReport(
        completeness_score=score,
        quality=quality_label(score),
        missing_demographics=missing_demographics,
        incomplete_labs=incomplete_labs,
        allergies_missing_reaction=allergies_missing_reaction,
        issues=issues,
    )
