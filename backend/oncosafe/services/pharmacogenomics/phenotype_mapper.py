"""
Phenotype Mapper - infer missing phenotypes from star-allele diplotypes.

A supplied phenotype is kept as given (normalized, never overwritten). A
missing phenotype is inferred only when the gene has an activity-score rule
and every allele in the diplotype is known; otherwise the gene is reported as
a gap.
"""

import logging
import re
from typing import List, Optional, Tuple

from .cpic_tables import COPY_NUMBER_GENES, SUPPORTED_GENES, allele_activity, score_to_phenotype
from .models import PGxResult, PhenotypeGap, PhenotypeMapping

logger = logging.getLogger(__name__)

_ALLELE_RE = re.compile(r"^(\*?[0-9A-Za-z]+?)(?:x(\d+|N))?$")


class GenotypeParseError(ValueError):
    """Genotype string is not a `*A/*B` diplotype."""


def parse_diplotype(genotype: str) -> List[Tuple[str, int]]:
    """
    Split a diplotype into (allele, copies) tuples.

    '*4/*4'   -> [('*4', 1), ('*4', 1)]
    '*1/*2x2' -> [('*1', 1), ('*2', 2)]
    '*1/*1xN' -> [('*1', 1), ('*1', 2)]   (N counts as two copies)
    """
    text = re.sub(r"\s+", "", genotype or "")
    parts = text.split("/")
    if len(parts) != 2 or not all(parts):
        raise GenotypeParseError(f"Expected a diplotype like *1/*2, got {genotype!r}")

    alleles = []
    for part in parts:
        match = _ALLELE_RE.match(part)
        if not match:
            raise GenotypeParseError(f"Cannot parse allele {part!r} in {genotype!r}")
        copies = match.group(2)
        if copies is None:
            n = 1
        elif copies == "N":
            n = 2
        else:
            n = int(copies)
        alleles.append((match.group(1), n))
    return alleles


def activity_score(gene: str, genotype: str) -> Tuple[Optional[float], Optional[str]]:
    """
    Diplotype activity score for a gene.
    Returns (score, None) on success or (None, reason) when no rule applies.
    """
    gene = gene.upper()
    if gene not in SUPPORTED_GENES:
        return None, f"No phenotype rule for gene {gene}"

    try:
        alleles = parse_diplotype(genotype)
    except GenotypeParseError as e:
        return None, str(e)

    score = 0.0
    for allele, copies in alleles:
        if copies != 1 and gene not in COPY_NUMBER_GENES:
            return None, f"Copy number not defined for {gene} ({allele}x{copies})"
        value = allele_activity(gene, allele)
        if value is None:
            return None, f"Unknown {gene} allele {allele}"
        score += value * copies
    return score, None


def map_phenotype(result: PGxResult) -> Tuple[PGxResult, Optional[PhenotypeGap]]:
    """Map one result; returns the (possibly updated) result and its gap, if any."""
    if result.phenotype is not None:
        return result, None

    if not result.genotype:
        return result, PhenotypeGap(gene=result.gene, reason="No genotype or phenotype reported")

    score, reason = activity_score(result.gene, result.genotype)
    if score is None:
        logger.info("Phenotype gap for %s %s: %s", result.gene, result.genotype, reason)
        return result, PhenotypeGap(gene=result.gene, genotype=result.genotype, reason=reason)

    phenotype = score_to_phenotype(result.gene, score)
    mapped = result.model_copy(update={
        "phenotype": phenotype,
        "phenotype_inferred": True,
        "activity_score": score,
    })
    return mapped, None


def map_phenotypes(results: List[PGxResult]) -> PhenotypeMapping:
    """
    Infer phenotypes where a deterministic rule exists.

    Output results keep input order; every gene still lacking a phenotype is
    listed in `gaps`.
    """
    mapping = PhenotypeMapping()
    for result in results:
        mapped, gap = map_phenotype(result)
        mapping.results.append(mapped)
        if gap is not None:
            mapping.gaps.append(gap)
    return mapping
