from typing import List, Optional

from fastapi import APIRouter, Query
from pydantic import Field

from oncosafe.schemas.analysis import GapOut, GenotypeInput, PGxOverview, PhenotypeOut
from oncosafe.schemas.base import CamelModel
from oncosafe.services.pharmacogenomics.models import Phenotype, RecommendationAction
from oncosafe.services.pharmacogenomics.phenotype_mapper import map_phenotypes
from oncosafe.services.pharmacogenomics.recommendation_engine import get_recommendation_engine

router = APIRouter()


class PhenotypeMappingRequest(CamelModel):
    genotypes: List[GenotypeInput] = Field(..., min_length=1)


class PGxRuleOut(CamelModel):
    drug: str
    gene: str
    phenotype: Phenotype
    action: RecommendationAction
    rationale: str
    citations: List[str]


@router.post("/phenotypes", response_model=PGxOverview)
async def map_genotypes(request: PhenotypeMappingRequest):
    """
    Infer phenotypes from star-allele diplotypes.
    Genes without a rule or with unknown alleles are returned as gaps.
    """
    mapping = map_phenotypes([g.to_result() for g in request.genotypes])
    return PGxOverview(
        genes_evaluated=mapping.genes_evaluated,
        phenotypes=[PhenotypeOut.from_result(r) for r in mapping.results if r.phenotype is not None],
        gaps=[GapOut.from_gap(g) for g in mapping.gaps],
    )


@router.get("/rules", response_model=List[PGxRuleOut])
async def list_rules(
    drug: Optional[str] = Query(None, description="Drug name (e.g., codeine)"),
    gene: Optional[str] = Query(None, description="Gene symbol (e.g., CYP2D6)"),
):
    """Actionable PGx rules, optionally filtered by drug and gene."""
    rules = get_recommendation_engine().rules.values()
    if drug:
        rules = [r for r in rules if r.drug == drug.strip().lower()]
    if gene:
        rules = [r for r in rules if r.gene == gene.strip().upper()]

    return [
        PGxRuleOut(
            drug=r.drug,
            gene=r.gene,
            phenotype=r.phenotype,
            action=r.action,
            rationale=r.rationale,
            citations=list(r.citations),
        )
        for r in rules
    ]
