from typing import List

from fastapi import APIRouter, Depends
from pydantic import Field

from oncosafe.schemas.base import CamelModel
from oncosafe.services.alternatives.models import AlternativeRanking, PatientContext
from oncosafe.services.alternatives.ranker import AlternativeRanker
from oncosafe.services.pipeline.dispatcher import AnalysisDispatcher, get_dispatcher

router = APIRouter()


class AlternativeRequest(CamelModel):
    for_drug: str = Field(..., min_length=1, description="Medication to replace")
    with_drugs: List[str] = Field(default_factory=list, description="Co-medications to score against")
    patient_context: PatientContext = Field(default_factory=PatientContext)
    formulary_only: bool = Field(False, description="Only show likely-covered alternatives")


@router.post("/rank", response_model=AlternativeRanking)
async def rank_alternatives(
    request: AlternativeRequest,
    dispatcher: AnalysisDispatcher = Depends(get_dispatcher),
):
    """
    Same-class alternatives scored by safety (interaction burden with the
    co-medications) and efficacy. Candidates contraindicated by phenotype or
    allergy are listed under `excluded`.
    """
    ranker = AlternativeRanker(dispatcher.resolver, dispatcher.normalizer, dispatcher.engine)
    return await ranker.rank_detailed(
        request.for_drug,
        request.with_drugs,
        request.patient_context,
        formulary_only=request.formulary_only,
    )
