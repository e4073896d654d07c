"""
Recommendation Engine - genotype-driven guidance per medication.

Rules are keyed by (drug, gene, phenotype). Only actionable combinations are
listed; a medication whose gene/phenotype has no rule yields nothing.
Every emitted recommendation carries at least one citation; a rule without
one is an authoring defect and raises RuleAuthoringError.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from ..interactions.models import NormalizedDrug
from ..interactions.normalizer import fallback_name
from .models import (
    PerDrugPGxRecommendation,
    PGxResult,
    Phenotype,
    RecommendationAction,
    RuleAuthoringError,
)

logger = logging.getLogger(__name__)

PM = Phenotype.POOR_METABOLIZER
IM = Phenotype.INTERMEDIATE_METABOLIZER
RM = Phenotype.RAPID_METABOLIZER
UM = Phenotype.ULTRARAPID_METABOLIZER

AVOID = RecommendationAction.AVOID
ADJUST = RecommendationAction.ADJUST_DOSE
ALTERNATIVE = RecommendationAction.USE_ALTERNATIVE
MONITOR = RecommendationAction.MONITOR

# Actions that make a drug unsuitable as a substitute for a given phenotype
CONTRAINDICATING_ACTIONS = frozenset({AVOID, ALTERNATIVE})


# ============================================================================
# Rule Model
# ============================================================================

class PGxRule(BaseModel):
    """One actionable (drug, gene, phenotype) combination."""
    model_config = ConfigDict(frozen=True)

    drug: str = Field(..., description="Canonical (lowercase) drug name")
    gene: str
    phenotype: Phenotype
    action: RecommendationAction
    rationale: str
    citations: Tuple[str, ...] = Field(default_factory=tuple)

    @property
    def key(self) -> Tuple[str, str, Phenotype]:
        return (self.drug, self.gene, self.phenotype)


# ============================================================================
# Guideline References
# ============================================================================

CPIC_CODEINE = "CPIC Guideline for CYP2D6, OPRM1, COMT and Opioid Therapy: https://cpicpgx.org/guidelines/guideline-for-codeine-and-cyp2d6/"
CPIC_TAMOXIFEN = "CPIC Guideline for CYP2D6 and Tamoxifen Therapy: https://cpicpgx.org/guidelines/cpic-guideline-for-tamoxifen-based-on-cyp2d6-genotype/"
CPIC_ONDANSETRON = "CPIC Guideline for CYP2D6 and Ondansetron/Tropisetron: https://cpicpgx.org/guidelines/guideline-for-ondansetron-and-tropisetron-and-cyp2d6-genotype/"
CPIC_CLOPIDOGREL = "CPIC Guideline for CYP2C19 and Clopidogrel Therapy: https://cpicpgx.org/guidelines/guideline-for-clopidogrel-and-cyp2c19/"
CPIC_SSRI = "CPIC Guideline for CYP2D6, CYP2C19 and SSRIs: https://cpicpgx.org/guidelines/guideline-for-selective-serotonin-reuptake-inhibitors-and-cyp2d6-and-cyp2c19/"
CPIC_TCA = "CPIC Guideline for CYP2D6, CYP2C19 and Tricyclic Antidepressants: https://cpicpgx.org/guidelines/guideline-for-tricyclic-antidepressants-and-cyp2d6-and-cyp2c19/"
CPIC_VORICONAZOLE = "CPIC Guideline for CYP2C19 and Voriconazole Therapy: https://cpicpgx.org/guidelines/guideline-for-voriconazole-and-cyp2c19/"
CPIC_PPI = "CPIC Guideline for CYP2C19 and Proton Pump Inhibitors: https://cpicpgx.org/guidelines/cpic-guideline-for-proton-pump-inhibitors-and-cyp2c19/"
CPIC_WARFARIN = "CPIC Guideline for Warfarin and CYP2C9/VKORC1: https://cpicpgx.org/guidelines/guideline-for-warfarin-and-cyp2c9-and-vkorc1/"
CPIC_PHENYTOIN = "CPIC Guideline for CYP2C9, HLA-B and Phenytoin: https://cpicpgx.org/guidelines/guideline-for-phenytoin-and-cyp2c9-and-hla-b/"
CPIC_NSAID = "CPIC Guideline for CYP2C9 and NSAIDs: https://cpicpgx.org/guidelines/cpic-guideline-for-nsaids-based-on-cyp2c9-genotype/"
CPIC_FLUOROPYRIMIDINE = "CPIC Guideline for DPYD and Fluoropyrimidines: https://cpicpgx.org/guidelines/guideline-for-fluoropyrimidines-and-dpyd/"
CPIC_THIOPURINE = "CPIC Guideline for TPMT, NUDT15 and Thiopurines: https://cpicpgx.org/guidelines/guideline-for-thiopurines-and-tpmt/"
CPIC_ATAZANAVIR = "CPIC Guideline for UGT1A1 and Atazanavir: https://cpicpgx.org/guidelines/guideline-for-atazanavir-and-ugt1a1/"
FDA_IRINOTECAN = "FDA Table of Pharmacogenomic Biomarkers in Drug Labeling (irinotecan, UGT1A1): https://www.fda.gov/drugs/science-and-research-drugs/table-pharmacogenomic-biomarkers-drug-labeling"
CPIC_STATIN = "CPIC Guideline for SLCO1B1, ABCG2, CYP2C9 and Statins: https://cpicpgx.org/guidelines/cpic-guideline-for-statins/"


def _rule(drug, gene, phenotype, action, rationale, *citations) -> PGxRule:
    return PGxRule(
        drug=drug,
        gene=gene,
        phenotype=phenotype,
        action=action,
        rationale=rationale,
        citations=tuple(citations),
    )


# ============================================================================
# Rule Table
# ============================================================================

PGX_RULES: Tuple[PGxRule, ...] = (
    # ── CYP2D6 ──────────────────────────────────────────────────────────────
    _rule("codeine", "CYP2D6", PM, AVOID,
          "Greatly reduced conversion of codeine to morphine; insufficient pain relief expected.",
          CPIC_CODEINE),
    _rule("codeine", "CYP2D6", IM, MONITOR,
          "Reduced morphine formation; monitor for inadequate analgesia.",
          CPIC_CODEINE),
    _rule("codeine", "CYP2D6", UM, AVOID,
          "Increased morphine formation; risk of life-threatening respiratory depression.",
          CPIC_CODEINE),
    _rule("tramadol", "CYP2D6", PM, AVOID,
          "Reduced formation of the active O-desmethyltramadol metabolite; insufficient pain relief expected.",
          CPIC_CODEINE),
    _rule("tramadol", "CYP2D6", IM, MONITOR,
          "Reduced active metabolite formation; monitor for inadequate analgesia.",
          CPIC_CODEINE),
    _rule("tramadol", "CYP2D6", UM, AVOID,
          "Increased active metabolite formation; risk of toxicity.",
          CPIC_CODEINE),
    _rule("tamoxifen", "CYP2D6", PM, ALTERNATIVE,
          "Lower endoxifen concentrations and higher risk of breast cancer recurrence; consider an aromatase inhibitor.",
          CPIC_TAMOXIFEN),
    _rule("tamoxifen", "CYP2D6", IM, ALTERNATIVE,
          "Lower endoxifen concentrations; consider an aromatase inhibitor, avoid CYP2D6 inhibitors.",
          CPIC_TAMOXIFEN),
    _rule("ondansetron", "CYP2D6", UM, ALTERNATIVE,
          "Increased metabolism reduces antiemetic response; choose a drug not metabolized by CYP2D6 (e.g., granisetron).",
          CPIC_ONDANSETRON),
    _rule("amitriptyline", "CYP2D6", PM, ALTERNATIVE,
          "Greatly reduced metabolism increases side-effect risk; consider a drug not metabolized by CYP2D6.",
          CPIC_TCA),
    _rule("amitriptyline", "CYP2D6", UM, ALTERNATIVE,
          "Increased metabolism risks lack of efficacy; consider a drug not metabolized by CYP2D6.",
          CPIC_TCA),

    # ── CYP2C19 ─────────────────────────────────────────────────────────────
    _rule("clopidogrel", "CYP2C19", PM, ALTERNATIVE,
          "Significantly reduced active metabolite formation; use prasugrel or ticagrelor if no contraindication.",
          CPIC_CLOPIDOGREL),
    _rule("clopidogrel", "CYP2C19", IM, ALTERNATIVE,
          "Reduced active metabolite formation and higher risk of cardiovascular events; use prasugrel or ticagrelor.",
          CPIC_CLOPIDOGREL),
    _rule("citalopram", "CYP2C19", PM, ADJUST,
          "Greatly reduced metabolism; consider a 50% reduction of the starting dose.",
          CPIC_SSRI),
    _rule("citalopram", "CYP2C19", UM, ALTERNATIVE,
          "Increased metabolism and risk of non-response; consider an alternative not predominantly metabolized by CYP2C19.",
          CPIC_SSRI),
    _rule("escitalopram", "CYP2C19", PM, ADJUST,
          "Greatly reduced metabolism; consider a 50% reduction of the starting dose.",
          CPIC_SSRI),
    _rule("escitalopram", "CYP2C19", UM, ALTERNATIVE,
          "Increased metabolism and risk of non-response; consider an alternative not predominantly metabolized by CYP2C19.",
          CPIC_SSRI),
    _rule("voriconazole", "CYP2C19", PM, ALTERNATIVE,
          "Higher trough concentrations and adverse event risk; choose an agent not dependent on CYP2C19.",
          CPIC_VORICONAZOLE),
    _rule("voriconazole", "CYP2C19", UM, ALTERNATIVE,
          "Subtherapeutic concentrations likely; choose an agent not dependent on CYP2C19.",
          CPIC_VORICONAZOLE),
    _rule("omeprazole", "CYP2C19", UM, ADJUST,
          "Increased clearance and risk of therapeutic failure; increase the starting dose by 100%.",
          CPIC_PPI),
    _rule("omeprazole", "CYP2C19", RM, ADJUST,
          "Increased clearance; increase the starting dose by 50-100% for H. pylori or erosive esophagitis.",
          CPIC_PPI),

    # ── CYP2C9 ──────────────────────────────────────────────────────────────
    _rule("warfarin", "CYP2C9", PM, ADJUST,
          "Greatly reduced clearance; use a genotype-guided dosing algorithm with substantially lower doses.",
          CPIC_WARFARIN),
    _rule("warfarin", "CYP2C9", IM, ADJUST,
          "Reduced clearance; use a genotype-guided dosing algorithm and monitor INR closely.",
          CPIC_WARFARIN),
    _rule("phenytoin", "CYP2C9", PM, ADJUST,
          "Reduced clearance; reduce the maintenance dose by 50% and monitor levels.",
          CPIC_PHENYTOIN),
    _rule("phenytoin", "CYP2C9", IM, ADJUST,
          "Reduced clearance; consider a 25% lower maintenance dose.",
          CPIC_PHENYTOIN),
    _rule("celecoxib", "CYP2C9", PM, ADJUST,
          "Markedly prolonged half-life; start at 25-50% of the lowest dose or choose an alternative.",
          CPIC_NSAID),

    # ── DPYD ────────────────────────────────────────────────────────────────
    _rule("fluorouracil", "DPYD", PM, AVOID,
          "Complete DPD deficiency is likely; severe or fatal toxicity risk.",
          CPIC_FLUOROPYRIMIDINE),
    _rule("fluorouracil", "DPYD", IM, ADJUST,
          "Partial DPD deficiency; reduce the starting dose by 50% and titrate by toxicity.",
          CPIC_FLUOROPYRIMIDINE),
    _rule("capecitabine", "DPYD", PM, AVOID,
          "Complete DPD deficiency is likely; severe or fatal toxicity risk.",
          CPIC_FLUOROPYRIMIDINE),
    _rule("capecitabine", "DPYD", IM, ADJUST,
          "Partial DPD deficiency; reduce the starting dose by 50% and titrate by toxicity.",
          CPIC_FLUOROPYRIMIDINE),

    # ── TPMT ────────────────────────────────────────────────────────────────
    _rule("mercaptopurine", "TPMT", PM, ADJUST,
          "Accumulation of thioguanine nucleotides; reduce the daily dose tenfold and dose thrice weekly.",
          CPIC_THIOPURINE),
    _rule("mercaptopurine", "TPMT", IM, ADJUST,
          "Moderately elevated thioguanine nucleotides; start at 30-80% of the normal dose.",
          CPIC_THIOPURINE),
    _rule("azathioprine", "TPMT", PM, ALTERNATIVE,
          "Life-threatening myelosuppression risk; consider a non-thiopurine agent for non-malignant conditions.",
          CPIC_THIOPURINE),
    _rule("azathioprine", "TPMT", IM, ADJUST,
          "Moderately elevated thioguanine nucleotides; start at 30-80% of the normal dose.",
          CPIC_THIOPURINE),
    _rule("thioguanine", "TPMT", PM, ADJUST,
          "Accumulation of thioguanine nucleotides; reduce the dose tenfold.",
          CPIC_THIOPURINE),
    _rule("thioguanine", "TPMT", IM, ADJUST,
          "Moderately elevated thioguanine nucleotides; start at 50-80% of the normal dose.",
          CPIC_THIOPURINE),

    # ── UGT1A1 ──────────────────────────────────────────────────────────────
    _rule("irinotecan", "UGT1A1", PM, ADJUST,
          "Reduced SN-38 glucuronidation increases neutropenia risk; consider a reduced starting dose.",
          FDA_IRINOTECAN),
    _rule("atazanavir", "UGT1A1", PM, ALTERNATIVE,
          "High likelihood of jaundice leading to discontinuation; consider an alternative agent.",
          CPIC_ATAZANAVIR),

    # ── SLCO1B1 ─────────────────────────────────────────────────────────────
    _rule("simvastatin", "SLCO1B1", Phenotype.POOR_FUNCTION, ALTERNATIVE,
          "High simvastatin acid exposure and myopathy risk; prescribe an alternative statin.",
          CPIC_STATIN),
    _rule("simvastatin", "SLCO1B1", Phenotype.DECREASED_FUNCTION, ADJUST,
          "Increased myopathy risk; prescribe 20 mg/day or less, or an alternative statin.",
          CPIC_STATIN),
    _rule("atorvastatin", "SLCO1B1", Phenotype.POOR_FUNCTION, ADJUST,
          "Increased myopathy risk; prescribe 20 mg/day or less.",
          CPIC_STATIN),
)


def build_rule_index(rules: Iterable[PGxRule]) -> Dict[Tuple[str, str, Phenotype], PGxRule]:
    """Index rules by key; duplicate keys and uncited rules are authoring defects."""
    index: Dict[Tuple[str, str, Phenotype], PGxRule] = {}
    for rule in rules:
        if not rule.citations:
            raise RuleAuthoringError(f"PGx rule {rule.key} has no citation")
        if rule.key in index:
            raise RuleAuthoringError(f"Duplicate PGx rule for {rule.key}")
        index[rule.key] = rule
    return index


_RULE_INDEX = build_rule_index(PGX_RULES)

MedicationInput = Union[str, NormalizedDrug]


def _medication_names(med: MedicationInput) -> Tuple[str, str]:
    """(display name, lookup name) for a medication."""
    if isinstance(med, NormalizedDrug):
        return med.display_name, med.canonical_name
    return med, fallback_name(med)


class RecommendationEngine:
    """Applies the PGx rule table to medications and mapped genotype results."""

    def __init__(self, rules: Optional[Iterable[PGxRule]] = None):
        self.rules = _RULE_INDEX if rules is None else build_rule_index(rules)

    def lookup(self, drug: str, gene: str, phenotype: Optional[Phenotype]) -> Optional[PGxRule]:
        if phenotype is None:
            return None
        return self.rules.get((fallback_name(drug), gene.strip().upper(), phenotype))

    def recommend(
        self,
        meds: Sequence[MedicationInput],
        mapped_results: Sequence[PGxResult],
    ) -> List[PerDrugPGxRecommendation]:
        """
        One recommendation per matching (medication, gene) combination.
        Medications and genes are evaluated independently; output follows
        medication order, then result order.
        """
        recommendations = []
        for med in meds:
            display, name = _medication_names(med)
            for result in mapped_results:
                rule = self.lookup(name, result.gene, result.phenotype)
                if rule is None:
                    continue
                recommendations.append(self._emit(display, rule))

        logger.info("Generated %d PGx recommendations for %d medications", len(recommendations), len(meds))
        return recommendations

    def contraindicated(self, drug: str, mapped_results: Sequence[PGxResult]) -> Optional[PGxRule]:
        """First rule that makes `drug` unsuitable for these phenotypes, if any."""
        for result in mapped_results:
            rule = self.lookup(drug, result.gene, result.phenotype)
            if rule is not None and rule.action in CONTRAINDICATING_ACTIONS:
                return rule
        return None

    @staticmethod
    def _emit(drug_name: str, rule: PGxRule) -> PerDrugPGxRecommendation:
        if not rule.citations:
            raise RuleAuthoringError(f"Refusing to emit uncited recommendation for {rule.key}")
        return PerDrugPGxRecommendation(
            drug_name=drug_name,
            gene=rule.gene,
            phenotype=rule.phenotype,
            recommendation=rule.action,
            rationale=rule.rationale,
            citations=list(rule.citations),
        )


_engine: Optional[RecommendationEngine] = None


def get_recommendation_engine() -> RecommendationEngine:
    global _engine
    if _engine is None:
        _engine = RecommendationEngine()
    return _engine


def recommend(
    meds: Sequence[MedicationInput],
    mapped_results: Sequence[PGxResult],
) -> List[PerDrugPGxRecommendation]:
    return get_recommendation_engine().recommend(meds, mapped_results)
