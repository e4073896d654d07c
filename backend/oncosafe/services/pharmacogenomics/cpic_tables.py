"""
cpic_tables.py
==============
CPIC star-allele activity values and activity-score phenotype cutoffs.

Activity score model:
  Each allele carries an activity value. The diplotype activity score is the
  sum over both alleles (an allele with copy number xN counts N times). The
  score is then mapped to a phenotype per gene.

Sources: CPIC guidelines (https://cpicpgx.org/genes-drugs/)
"""
from typing import Callable, Dict, Optional

from .models import Phenotype

PM = Phenotype.POOR_METABOLIZER
IM = Phenotype.INTERMEDIATE_METABOLIZER
NM = Phenotype.NORMAL_METABOLIZER
RM = Phenotype.RAPID_METABOLIZER
UM = Phenotype.ULTRARAPID_METABOLIZER

# ---------------------------------------------------------------------------
# Activity values per star allele per gene
# ---------------------------------------------------------------------------
# Values: 0 = no function, 0.25/0.5 = decreased function, 1 = normal function,
#         1.5 = increased function (CYP2C19*17)
# Keys are upper-cased; lookups upper-case the observed allele.

STAR_ACTIVITY: Dict[str, Dict[str, float]] = {

    # ── CYP2D6 ──────────────────────────────────────────────────────────────
    # https://cpicpgx.org/guidelines/guideline-for-codeine-and-cyp2d6/
    "CYP2D6": {
        "*1":   1.0,
        "*2":   1.0,
        "*2A":  1.0,
        "*3":   0.0,
        "*4":   0.0,   # splice defect, rs3892097
        "*5":   0.0,   # gene deletion
        "*6":   0.0,
        "*7":   0.0,
        "*8":   0.0,
        "*9":   0.5,
        "*10":  0.25,
        "*14":  0.0,
        "*17":  0.5,
        "*29":  0.5,
        "*35":  1.0,
        "*36":  0.0,
        "*41":  0.5,
    },

    # ── CYP2C19 ─────────────────────────────────────────────────────────────
    # https://cpicpgx.org/guidelines/guideline-for-clopidogrel-and-cyp2c19/
    "CYP2C19": {
        "*1":   1.0,
        "*2":   0.0,   # rs4244285
        "*3":   0.0,   # rs4986893
        "*4":   0.0,
        "*5":   0.0,
        "*6":   0.0,
        "*7":   0.0,
        "*8":   0.0,
        "*9":   0.5,
        "*10":  0.5,
        "*17":  1.5,   # increased function, rs12248560
        "*35":  0.5,
    },

    # ── CYP2C9 ──────────────────────────────────────────────────────────────
    # https://cpicpgx.org/guidelines/guideline-for-warfarin-and-cyp2c9-and-vkorc1/
    "CYP2C9": {
        "*1":   1.0,
        "*2":   0.5,   # rs1799853
        "*3":   0.0,   # rs1057910
        "*5":   0.5,
        "*6":   0.0,
        "*8":   0.5,
        "*11":  0.5,
        "*13":  0.0,
    },

    # ── TPMT ────────────────────────────────────────────────────────────────
    # https://cpicpgx.org/guidelines/guideline-for-thiopurines-and-tpmt/
    "TPMT": {
        "*1":   1.0,
        "*2":   0.0,   # rs1800462
        "*3A":  0.0,
        "*3B":  0.0,
        "*3C":  0.0,   # rs1142345
        "*4":   0.0,
        "*8":   0.5,
    },

    # ── DPYD ────────────────────────────────────────────────────────────────
    # https://cpicpgx.org/guidelines/guideline-for-fluoropyrimidines-and-dpyd/
    "DPYD": {
        "*1":   1.0,
        "*2A":  0.0,   # splice defect, rs3918290
        "*13":  0.0,   # rs67376798
        "*9B":  0.5,
        "HAPB3": 0.5,
    },

    # ── UGT1A1 ──────────────────────────────────────────────────────────────
    # https://cpicpgx.org/guidelines/guideline-for-atazanavir-and-ugt1a1/
    "UGT1A1": {
        "*1":   1.0,
        "*6":   0.5,
        "*27":  0.5,
        "*28":  0.5,   # promoter TA repeat
        "*36":  1.0,
        "*37":  0.5,
    },

    # ── SLCO1B1 ─────────────────────────────────────────────────────────────
    # https://cpicpgx.org/guidelines/cpic-guideline-for-statins/
    "SLCO1B1": {
        "*1":   1.0,
        "*1A":  1.0,
        "*1B":  1.0,
        "*5":   0.0,   # rs4149056
        "*9":   0.5,
        "*14":  1.0,
        "*15":  0.0,
        "*17":  0.0,
        "*20":  1.0,
    },
}

# Copy-number suffixes (xN) are only defined for CYP2D6.
COPY_NUMBER_GENES = {"CYP2D6"}

# ---------------------------------------------------------------------------
# Activity score → Phenotype per gene
# ---------------------------------------------------------------------------

def _cyp2d6_phenotype(score: float) -> Phenotype:
    if score == 0:        return PM
    if score <= 1.0:      return IM
    if score <= 2.25:     return NM
    return                       UM

def _cyp2c19_phenotype(score: float) -> Phenotype:
    if score == 0:        return PM
    if score <= 1.5:      return IM
    if score <= 2.0:      return NM
    if score <= 2.5:      return RM
    return                       UM

def _cyp2c9_phenotype(score: float) -> Phenotype:
    if score <= 0.5:      return PM
    if score <= 1.5:      return IM
    return                       NM

def _tpmt_phenotype(score: float) -> Phenotype:
    if score == 0:        return PM
    if score <= 1.0:      return IM
    return                       NM

def _dpyd_phenotype(score: float) -> Phenotype:
    if score <= 0.5:      return PM
    if score <= 1.5:      return IM
    return                       NM

def _ugt1a1_phenotype(score: float) -> Phenotype:
    if score <= 1.0:      return PM
    if score <= 1.5:      return IM
    return                       NM

def _slco1b1_phenotype(score: float) -> Phenotype:
    if score <= 0.5:      return Phenotype.POOR_FUNCTION
    if score <= 1.5:      return Phenotype.DECREASED_FUNCTION
    return                       Phenotype.NORMAL_FUNCTION

_PHENOTYPE_FN: Dict[str, Callable[[float], Phenotype]] = {
    "CYP2D6":  _cyp2d6_phenotype,
    "CYP2C19": _cyp2c19_phenotype,
    "CYP2C9":  _cyp2c9_phenotype,
    "TPMT":    _tpmt_phenotype,
    "DPYD":    _dpyd_phenotype,
    "UGT1A1":  _ugt1a1_phenotype,
    "SLCO1B1": _slco1b1_phenotype,
}

SUPPORTED_GENES = tuple(_PHENOTYPE_FN)


def allele_activity(gene: str, star: str) -> Optional[float]:
    """Activity value for one allele; None when the allele is not in the table."""
    return STAR_ACTIVITY.get(gene.upper(), {}).get(star.upper())


def score_to_phenotype(gene: str, score: float) -> Optional[Phenotype]:
    fn = _PHENOTYPE_FN.get(gene.upper())
    if fn is None:
        return None
    return fn(round(score, 2))
