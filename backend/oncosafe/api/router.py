from fastapi import APIRouter
from oncosafe.api.routes import alternatives, analysis, interactions, pharmacogenomics

api_router = APIRouter()

api_router.include_router(analysis.router, prefix="/analysis", tags=["Analysis"])
api_router.include_router(interactions.router, prefix="/interactions", tags=["Interactions"])
api_router.include_router(pharmacogenomics.router, prefix="/pharmacogenomics", tags=["Pharmacogenomics"])
api_router.include_router(alternatives.router, prefix="/alternatives", tags=["Alternatives"])
