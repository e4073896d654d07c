"""
Alternative Ranker - propose same-class substitutes for a flagged medication.

Scoring (per candidate):
  interaction risk = sum of severity weights against the co-medications,
                     capped at `max_interaction_risk`
  safety_score     = max(0, 100 - risk * severity_penalty)
  efficacy_score   = catalogue value (preferred agents score higher)
  score            = safety_score + efficacy_score
  best             = safety_score >= threshold and efficacy_score >= threshold

Candidates ruled out by phenotype (PGx rule action avoid/use_alternative) or by
allergy/age are removed before scoring. Formulary status only affects
visibility.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Union

from ..interactions.config import AlternativeConfig, get_config
from ..interactions.models import DrugPair, MedicationReference, NormalizedDrug
from ..interactions.normalizer import DrugNormalizer
from ..interactions.resolver import PairResolution, TieredInteractionResolver
from ..pharmacogenomics.models import RuleAuthoringError
from ..pharmacogenomics.phenotype_mapper import map_phenotypes
from ..pharmacogenomics.recommendation_engine import RecommendationEngine, get_recommendation_engine
from . import catalogue
from .models import (
    AlternativeRanking,
    AlternativeSuggestion,
    ExcludedAlternative,
    InteractionBurden,
    PatientContext,
)

logger = logging.getLogger(__name__)


def check_best_gate(suggestion: AlternativeSuggestion, threshold: float):
    """`best` requires both component scores to reach the threshold."""
    if suggestion.best and (suggestion.safety_score < threshold or suggestion.efficacy_score < threshold):
        raise RuleAuthoringError(
            f"{suggestion.name} marked best with safety={suggestion.safety_score}, "
            f"efficacy={suggestion.efficacy_score} (threshold {threshold})"
        )


class AlternativeRanker:
    """Ranks therapeutic-class alternatives against a patient's co-medications."""

    def __init__(
        self,
        resolver: TieredInteractionResolver,
        normalizer: Optional[DrugNormalizer] = None,
        engine: Optional[RecommendationEngine] = None,
        config: Optional[AlternativeConfig] = None,
    ):
        self.resolver = resolver
        self.normalizer = normalizer or DrugNormalizer(resolver.store)
        self.engine = engine or get_recommendation_engine()
        self.config = config or get_config().alternatives

    async def rank(
        self,
        for_drug: str,
        with_drug: Union[str, Sequence[str], None] = None,
        patient_context: Optional[PatientContext] = None,
        formulary_only: bool = False,
    ) -> List[AlternativeSuggestion]:
        ranking = await self.rank_detailed(for_drug, with_drug, patient_context, formulary_only)
        return ranking.suggestions

    async def rank_detailed(
        self,
        for_drug: str,
        with_drug: Union[str, Sequence[str], None] = None,
        patient_context: Optional[PatientContext] = None,
        formulary_only: bool = False,
    ) -> AlternativeRanking:
        """
        Rank alternatives for `for_drug` given the co-medication(s) `with_drug`.

        Suggestions are sorted by score (descending), then name, and truncated
        to `max_suggestions` after the formulary filter.
        """
        context = patient_context or PatientContext()
        others = [with_drug] if isinstance(with_drug, str) else list(with_drug or [])

        target, *co_meds = await self.normalizer.normalize(
            [MedicationReference(name=name) for name in [for_drug, *others]]
        )
        drug_class = catalogue.drug_class_of(target.canonical_name)
        ranking = AlternativeRanking(for_drug=for_drug, drug_class=drug_class)

        if drug_class is None:
            logger.info("No therapeutic class for %s; no alternatives proposed", target.canonical_name)
            return ranking

        co_med_names = {drug.canonical_name for drug in co_meds}
        phenotypes = map_phenotypes(context.phenotypes).results

        candidates = []
        for name in catalogue.class_members(drug_class):
            if name == target.canonical_name or name in co_med_names:
                continue
            reason = self._exclusion_reason(name, context, phenotypes)
            if reason:
                ranking.excluded.append(ExcludedAlternative(name=name, reason=reason))
                continue
            candidates.append(name)

        if not candidates:
            return ranking

        normalized = await self.normalizer.normalize([MedicationReference(name=name) for name in candidates])
        suggestions = []
        for candidate in normalized:
            resolutions = await self.resolver.resolve_all(
                [DrugPair(drug_a=candidate, drug_b=other) for other in co_meds]
            )
            suggestion = self._score(for_drug, drug_class, candidate, resolutions, context)
            check_best_gate(suggestion, self.config.best_threshold)
            suggestions.append(suggestion)

        suggestions.sort(key=lambda s: (-s.score, s.name))
        if formulary_only:
            suggestions = [s for s in suggestions if s.formulary_status == catalogue.LIKELY_COVERED]

        ranking.suggestions = suggestions[:self.config.max_suggestions]
        return ranking

    # ------------------------------------------------------------------
    # Exclusions
    # ------------------------------------------------------------------

    def _exclusion_reason(self, name: str, context: PatientContext, phenotypes) -> Optional[str]:
        rule = self.engine.contraindicated(name, phenotypes)
        if rule is not None:
            return f"{rule.gene} {rule.phenotype.value}: {rule.action.value}"

        for allergy in context.allergies:
            if catalogue.allergy_conflict(name, allergy):
                return f"Contraindicated due to {allergy} allergy"

        if context.age is not None:
            if context.age >= catalogue.ELDERLY_AGE and name in catalogue.AVOID_IN_ELDERLY:
                return "Avoid in elderly due to anticholinergic effects"
            if context.age < catalogue.PEDIATRIC_AGE and name in catalogue.AVOID_IN_PEDIATRIC:
                return "Contraindicated in pediatric patients"
        return None

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def _score(
        self,
        for_drug: str,
        drug_class: str,
        candidate: NormalizedDrug,
        resolutions: Iterable[PairResolution],
        context: PatientContext,
    ) -> AlternativeSuggestion:
        name = candidate.canonical_name
        details = []
        unresolved = []
        total_risk = 0

        for resolution in resolutions:
            other = resolution.pair.drug_b.canonical_name
            record = resolution.record
            if record is None:
                unresolved.append(other)
                continue
            risk = catalogue.SEVERITY_RISK[record.severity]
            total_risk += risk
            details.append(InteractionBurden(
                with_drug=other,
                severity=record.severity,
                risk_score=risk,
                mechanism=record.mechanism,
                source_tier=record.source_tier,
            ))

        risk = min(total_risk, self.config.max_interaction_risk)
        safety = max(0.0, 100.0 - risk * self.config.severity_penalty)
        efficacy = catalogue.efficacy_score(name)
        threshold = self.config.best_threshold

        return AlternativeSuggestion(
            for_drug=for_drug,
            name=name,
            drug_class=drug_class,
            safety_score=safety,
            efficacy_score=efficacy,
            score=safety + efficacy,
            best=safety >= threshold and efficacy >= threshold,
            formulary_status=catalogue.formulary_status(name),
            rationale=self._rationale(risk, unresolved),
            interaction_details=details,
            unresolved_with=unresolved,
            dosage_adjustments=self._dosage_adjustments(name, drug_class, context),
        )

    @staticmethod
    def _rationale(risk: int, unresolved: List[str]) -> str:
        reasons = []
        if risk == 0 and not unresolved:
            reasons.append("No known interactions with current medications")
        elif risk == 0:
            reasons.append("No interaction data found for " + ", ".join(unresolved) + "; consult additional sources")
        elif risk <= 1:
            reasons.append("Lower interaction risk profile")
        else:
            reasons.append("Interacts with current medications; review before substituting")
        reasons.append("Same therapeutic class")
        return "; ".join(reasons)

    @staticmethod
    def _dosage_adjustments(name: str, drug_class: str, context: PatientContext) -> List[str]:
        notes = []
        if context.renal_function == "impaired" and name in catalogue.RENAL_DOSE_ADJUST:
            notes.append("Dose reduction required for renal impairment")
        if context.hepatic_function == "impaired" and (
            name in catalogue.HEPATIC_CAUTION_DRUGS or drug_class in catalogue.HEPATIC_CAUTION_CLASSES
        ):
            notes.append("Caution with hepatic impairment")
        return notes
