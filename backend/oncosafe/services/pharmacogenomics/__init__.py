"""
Pharmacogenomics Service

CPIC activity-score phenotype mapping and rule-based per-drug recommendations.
"""

from .models import (
    PGxResult,
    Phenotype,
    PhenotypeGap,
    PhenotypeMapping,
    RecommendationAction,
    PerDrugPGxRecommendation,
    RuleAuthoringError,
)
from .phenotype_mapper import map_phenotypes, map_phenotype, parse_diplotype
from .recommendation_engine import RecommendationEngine, get_recommendation_engine, recommend

__all__ = [
    # Models
    'PGxResult',
    'Phenotype',
    'PhenotypeGap',
    'PhenotypeMapping',
    'RecommendationAction',
    'PerDrugPGxRecommendation',
    'RuleAuthoringError',

    # Phenotype Mapping
    'map_phenotypes',
    'map_phenotype',
    'parse_diplotype',

    # Recommendations
    'RecommendationEngine',
    'get_recommendation_engine',
    'recommend',
]
