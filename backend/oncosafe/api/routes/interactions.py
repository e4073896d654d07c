"""
Interaction API.

Endpoints:
- GET  /interactions/known      - Browse the curated interaction table
- POST /interactions/check-pair - Resolve one drug pair through every tier
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import Field

from oncosafe.schemas.analysis import InteractionOut
from oncosafe.schemas.base import CamelModel
from oncosafe.services.interactions.knowledge_base import filter_known_interactions, load_curated_interactions
from oncosafe.services.interactions.models import DrugPair, MedicationReference, Severity, SourceTier
from oncosafe.services.pipeline.dispatcher import NO_DATA_NOTICE, AnalysisDispatcher, get_dispatcher

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================

class KnownInteraction(CamelModel):
    drugs: List[str]
    severity: Severity
    mechanism: str = ""
    effect: str = ""
    management: str = ""
    evidence_level: str = ""
    sources: List[str] = Field(default_factory=list)


class DrugPairCheckRequest(CamelModel):
    drug_a: str = Field(..., min_length=1)
    drug_b: str = Field(..., min_length=1)


class DrugPairCheckResponse(CamelModel):
    drug_a: str
    drug_b: str
    resolved: bool = Field(..., description="False means unknown, not safe")
    interaction: Optional[InteractionOut] = None
    failed_tiers: List[SourceTier] = Field(default_factory=list)
    recommendation: str


# ============================================================================
# Endpoints
# ============================================================================

@router.get("/known", response_model=List[KnownInteraction])
async def get_known_interactions(
    drug: Optional[str] = Query(None, description="Substring match against either drug"),
    drug_a: Optional[str] = Query(None, alias="drugA"),
    drug_b: Optional[str] = Query(None, alias="drugB"),
    severity: Optional[str] = Query(None, description="minor/moderate/major/contraindicated (synonyms accepted)"),
    limit: Optional[int] = Query(None, ge=1, le=500),
):
    """
    Curated interactions, optionally filtered.

    - drug: rows naming this drug
    - drugA + drugB: rows for the pair, in either order
    - severity: exact severity after synonym parsing
    """
    sev = None
    if severity:
        try:
            sev = Severity.parse(severity)
        except ValueError:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid severity: {severity}. Use minor/moderate/major/contraindicated"
            )

    rows = filter_known_interactions(
        load_curated_interactions(),
        drug=drug,
        drug_a=drug_a,
        drug_b=drug_b,
        severity=sev,
        limit=limit,
    )
    return [
        KnownInteraction(
            drugs=row.drugs,
            severity=Severity.parse(row.severity),
            mechanism=row.mechanism,
            effect=row.effect,
            management=row.management,
            evidence_level=row.evidence_level,
            sources=row.sources,
        )
        for row in rows
    ]


@router.post("/check-pair", response_model=DrugPairCheckResponse)
async def check_drug_pair(
    request: DrugPairCheckRequest,
    dispatcher: AnalysisDispatcher = Depends(get_dispatcher),
):
    """Normalize both names and resolve the pair (cache → curated → heuristic)."""
    drug_a, drug_b = await dispatcher.normalizer.normalize([
        MedicationReference(name=request.drug_a),
        MedicationReference(name=request.drug_b),
    ])
    if drug_a.canonical_name == drug_b.canonical_name:
        raise HTTPException(
            status_code=400,
            detail=f"'{request.drug_a}' and '{request.drug_b}' name the same substance"
        )

    resolution = await dispatcher.resolver.resolve_detailed(DrugPair(drug_a=drug_a, drug_b=drug_b))
    record = resolution.record

    if record is None:
        recommendation = NO_DATA_NOTICE
    elif record.severity >= Severity.MAJOR:
        recommendation = f"AVOID or use with caution: {record.recommendation or record.mechanism or 'see citations'}"
    else:
        recommendation = f"Monitor: {record.recommendation or record.mechanism or 'see citations'}"

    return DrugPairCheckResponse(
        drug_a=request.drug_a,
        drug_b=request.drug_b,
        resolved=record is not None,
        interaction=InteractionOut.from_record(record) if record else None,
        failed_tiers=resolution.failed_tiers,
        recommendation=recommendation,
    )
