from fastapi import APIRouter, Depends, HTTPException, status
import logging

from oncosafe.schemas.analysis import AnalysisRequest
from oncosafe.services.pipeline.dispatcher import (
    AnalysisDispatcher,
    AnalysisResult,
    AnalysisValidationError,
    get_dispatcher,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/run",
    response_model=AnalysisResult,
    status_code=status.HTTP_200_OK,
    summary="Run an analysis",
    description="Dispatch a DDI, DATA_QUALITY, EVIDENCE or PGX analysis for a patient."
)
async def run_analysis(
    request: AnalysisRequest,
    dispatcher: AnalysisDispatcher = Depends(get_dispatcher),
) -> AnalysisResult:
    """
    - **analysisType**: DDI, DATA_QUALITY, EVIDENCE or PGX
    - **patientId**: patient identifier
    - **payload**: analysis-specific input
    """
    try:
        return await dispatcher.run(request.analysis_type, request.payload, request.patient_id)

    except AnalysisValidationError as ve:
        logger.warning(f"Rejected analysis request: {ve}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"field": ve.field, "message": ve.message}
        )
    except ValueError as ve:
        logger.warning(f"Validation error in analysis: {ve}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(ve)
        )
    except Exception as e:
        logger.exception(f"Unexpected error in analysis dispatch: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during the analysis."
        )
