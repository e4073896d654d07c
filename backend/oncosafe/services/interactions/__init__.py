"""
Interaction Service

Drug-drug interaction core: name normalization, pair enumeration, tiered
resolution (cache → curated → heuristic) and severity aggregation.
"""

from .models import (
    MedicationReference,
    NormalizedDrug,
    DrugPair,
    Severity,
    ConfidenceLevel,
    RiskLevel,
    SourceTier,
    InteractionRow,
    InteractionRecord,
)
from .store import (
    DrugLookupStore,
    InMemoryDrugStore,
    HttpDrugStore,
    DisabledDrugStore,
    StoreError,
    create_store,
)
from .normalizer import DrugNormalizer
from .pairs import consolidate, enumerate_pairs
from .resolver import TieredInteractionResolver, PairResolution
from .aggregator import aggregate, AggregateResult
from .config import (
    get_config,
    update_config,
    reset_config,
    load_config_from_file,
    save_config_to_file,
)

__all__ = [
    # Models
    'MedicationReference',
    'NormalizedDrug',
    'DrugPair',
    'Severity',
    'ConfidenceLevel',
    'RiskLevel',
    'SourceTier',
    'InteractionRow',
    'InteractionRecord',

    # Stores
    'DrugLookupStore',
    'InMemoryDrugStore',
    'HttpDrugStore',
    'DisabledDrugStore',
    'StoreError',
    'create_store',

    # Pipeline stages
    'DrugNormalizer',
    'consolidate',
    'enumerate_pairs',
    'TieredInteractionResolver',
    'PairResolution',
    'aggregate',
    'AggregateResult',
]
