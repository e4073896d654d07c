"""
Pair enumeration over a normalized medication list.
"""

from typing import List

from .models import DrugPair, NormalizedDrug


def consolidate(drugs: List[NormalizedDrug]) -> List[NormalizedDrug]:
    """One entry per canonical name; the first occurrence wins and keeps its original reference."""
    seen = set()
    consolidated = []
    for drug in drugs:
        if drug.canonical_name in seen:
            continue
        seen.add(drug.canonical_name)
        consolidated.append(drug)
    return consolidated


def enumerate_pairs(drugs: List[NormalizedDrug], consolidate_formulations: bool = False) -> List[DrugPair]:
    """
    All unordered pairs (i < j) in input order.

    Fewer than two drugs yields an empty list, which callers report as
    insufficient input rather than an error.
    """
    if consolidate_formulations:
        drugs = consolidate(drugs)

    pairs = []
    for i, drug_a in enumerate(drugs):
        for drug_b in drugs[i + 1:]:
            pairs.append(DrugPair(drug_a=drug_a, drug_b=drug_b))
    return pairs
