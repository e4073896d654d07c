import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from oncosafe.api.router import api_router
from oncosafe.core import logging as _logging  # Initialize logging
from oncosafe.services.interactions.knowledge_base import (
    load_aliases,
    load_curated_interactions,
    load_heuristic_table,
)
from oncosafe.services.pipeline.dispatcher import get_dispatcher

logger = logging.getLogger(__name__)

app = FastAPI(
    title="OncoSafe API",
    description="Medication safety analysis: drug-drug interactions, pharmacogenomics and therapy alternatives",
    version="1.0.0"
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API Routers
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    # Preload bundled tables
    logger.info("Preloading interaction tables...")
    load_aliases()
    load_curated_interactions()
    table = load_heuristic_table()
    logger.info("Heuristic table %s loaded (%d entries)", table.version, len(table))
    get_dispatcher()


@app.on_event("shutdown")
async def shutdown_event():
    await get_dispatcher().store.aclose()


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "OncoSafe"}
