"""
Analysis Dispatcher - validates a request and runs the matching pipeline.

  DDI          → normalize → pairs → tiered resolve → aggregate
  EVIDENCE     → normalize → pairs → tiered resolve → evidence summary
  PGX          → phenotype mapping → per-drug recommendations
  DATA_QUALITY → completeness assessment

Validation happens before any component runs; a missing or malformed field
raises AnalysisValidationError naming the field.
"""
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Type, Union

from pydantic import BaseModel, ValidationError

from oncosafe.schemas.analysis import (
    DataQualityPayload,
    DataQualityResult,
    DDIAnalysisResult,
    EvidenceResult,
    GapOut,
    InteractionOut,
    MedicationListPayload,
    PairEvidenceOut,
    PGxAnalysisResult,
    PGxOverview,
    PGxPayload,
    PhenotypeOut,
    RecommendationOut,
)
from oncosafe.services.interactions.aggregator import aggregate
from oncosafe.services.interactions.config import InteractionCoreConfig, get_config
from oncosafe.services.interactions.evidence import summarize_evidence
from oncosafe.services.interactions.models import ConfidenceLevel
from oncosafe.services.interactions.normalizer import DrugNormalizer
from oncosafe.services.interactions.pairs import enumerate_pairs
from oncosafe.services.interactions.resolver import TieredInteractionResolver
from oncosafe.services.interactions.store import DrugLookupStore, create_store
from oncosafe.services.pharmacogenomics.phenotype_mapper import map_phenotypes
from oncosafe.services.pharmacogenomics.recommendation_engine import (
    RecommendationEngine,
    get_recommendation_engine,
)
from oncosafe.services.quality.data_quality import assess_data_quality

logger = logging.getLogger(__name__)

NO_DATA_NOTICE = "No interaction data found; consult additional sources."
INSUFFICIENT_INPUT_NOTICE = "Fewer than two distinct medications; no interaction pairs to evaluate."

AnalysisResult = Union[DDIAnalysisResult, PGxAnalysisResult, DataQualityResult, EvidenceResult]


class AnalysisType(str, Enum):
    DDI = "DDI"
    DATA_QUALITY = "DATA_QUALITY"
    EVIDENCE = "EVIDENCE"
    PGX = "PGX"


class AnalysisValidationError(ValueError):
    """Caller fault: a required field is missing or malformed."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


PAYLOAD_MODELS: Dict[AnalysisType, Type[BaseModel]] = {
    AnalysisType.DDI: MedicationListPayload,
    AnalysisType.DATA_QUALITY: DataQualityPayload,
    AnalysisType.EVIDENCE: MedicationListPayload,
    AnalysisType.PGX: PGxPayload,
}


def parse_analysis_type(value: Any) -> AnalysisType:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise AnalysisValidationError("analysisType", "is required")
    try:
        return AnalysisType(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(t.value for t in AnalysisType)
        raise AnalysisValidationError("analysisType", f"must be one of {allowed}, got {value!r}")


def _field_path(loc) -> str:
    return "payload." + ".".join(str(part) for part in loc) if loc else "payload"


def validate_payload(analysis_type: AnalysisType, payload: Optional[Dict[str, Any]]) -> BaseModel:
    """Validate the payload shape for `analysis_type`; first error wins."""
    if payload is None:
        raise AnalysisValidationError("payload", "is required")

    try:
        model = PAYLOAD_MODELS[analysis_type].model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        raise AnalysisValidationError(_field_path(first.get("loc")), first.get("msg", "is invalid")) from e

    for index, med in enumerate(getattr(model, "medications", None) or []):
        if not med.name.strip():
            raise AnalysisValidationError(f"payload.medications.{index}.name", "must not be blank")
    for index, result in enumerate(getattr(model, "genotypes", None) or []):
        if not result.gene.strip():
            raise AnalysisValidationError(f"payload.genotypes.{index}.gene", "must not be blank")
    return model


class AnalysisDispatcher:
    """Routes an analysis request to its component pipeline."""

    def __init__(
        self,
        store: Optional[DrugLookupStore] = None,
        resolver: Optional[TieredInteractionResolver] = None,
        engine: Optional[RecommendationEngine] = None,
        config: Optional[InteractionCoreConfig] = None,
    ):
        self.config = config or get_config()
        self.store = store or (resolver.store if resolver else create_store(self.config.store))
        self.resolver = resolver or TieredInteractionResolver(self.store, config=self.config)
        self.normalizer = DrugNormalizer(self.store, lookup_timeout=self.config.store.lookup_timeout_seconds)
        self.engine = engine or get_recommendation_engine()

        self._handlers: Dict[AnalysisType, Callable[[str, Any], Awaitable[AnalysisResult]]] = {
            AnalysisType.DDI: self._run_ddi,
            AnalysisType.DATA_QUALITY: self._run_data_quality,
            AnalysisType.EVIDENCE: self._run_evidence,
            AnalysisType.PGX: self._run_pgx,
        }
        missing = set(AnalysisType) - set(self._handlers)
        assert not missing, f"No handler for analysis types: {sorted(t.value for t in missing)}"

    async def run(self, analysis_type: Any, payload: Optional[Dict[str, Any]], patient_id: Optional[str]) -> AnalysisResult:
        """Validate, then dispatch. Raises AnalysisValidationError for caller faults."""
        kind = parse_analysis_type(analysis_type)
        if patient_id is None or not str(patient_id).strip():
            raise AnalysisValidationError("patientId", "is required")
        model = validate_payload(kind, payload)

        handler = self._handlers.get(kind)
        if handler is None:
            raise AssertionError(f"Unhandled analysis type: {kind}")

        logger.info("Running %s analysis for patient %s", kind.value, patient_id)
        result = await handler(str(patient_id).strip(), model)
        logger.info("Completed %s analysis for patient %s", kind.value, patient_id)
        return result

    # ------------------------------------------------------------------
    # Shared interaction path
    # ------------------------------------------------------------------

    async def _resolve_medications(self, medications, warnings):
        drugs = await self.normalizer.normalize(medications, warnings)
        pairs = enumerate_pairs(drugs, consolidate_formulations=self.config.consolidate_formulations)
        resolutions = await self.resolver.resolve_all(pairs)
        return resolutions

    @staticmethod
    def _degraded(resolutions, warnings) -> bool:
        return bool(warnings) or any(r.failed_tiers for r in resolutions)

    @staticmethod
    def _downgrade(confidence: ConfidenceLevel) -> ConfidenceLevel:
        if confidence == ConfidenceLevel.HIGH:
            return ConfidenceLevel.MEDIUM
        return ConfidenceLevel.LOW

    @staticmethod
    def _unresolved_notes(resolutions) -> list:
        return [
            f"{r.pair.drug_a.display_name} + {r.pair.drug_b.display_name}: {NO_DATA_NOTICE}"
            for r in resolutions
            if not r.resolved
        ]

    # ------------------------------------------------------------------
    # Pipelines
    # ------------------------------------------------------------------

    async def _run_ddi(self, patient_id: str, payload: MedicationListPayload) -> DDIAnalysisResult:
        warnings = []
        resolutions = await self._resolve_medications(payload.medications, warnings)
        records = [r.record for r in resolutions if r.resolved]
        summary = aggregate(records, self.config.tier_confidence)

        confidence = summary.confidence
        if self._degraded(resolutions, warnings):
            logger.warning("DDI analysis for %s degraded: %s", patient_id, "; ".join(warnings) or "tier lookup failures")
            confidence = self._downgrade(confidence)

        notes = [] if resolutions else [INSUFFICIENT_INPUT_NOTICE]
        notes.extend(self._unresolved_notes(resolutions))

        return DDIAnalysisResult(
            patient_id=patient_id,
            overall_risk_level=summary.overall_risk,
            worst_severity=summary.worst_severity,
            per_pair_interactions=[InteractionOut.from_record(r) for r in records],
            confidence=confidence,
            pairs_evaluated=len(resolutions),
            notes=notes,
        )

    async def _run_evidence(self, patient_id: str, payload: MedicationListPayload) -> EvidenceResult:
        warnings = []
        resolutions = await self._resolve_medications(payload.medications, warnings)
        evidence = summarize_evidence(resolutions)
        confidence = aggregate([r.record for r in resolutions if r.resolved], self.config.tier_confidence).confidence
        if self._degraded(resolutions, warnings):
            confidence = self._downgrade(confidence)

        notes = [] if resolutions else [INSUFFICIENT_INPUT_NOTICE]
        notes.extend(self._unresolved_notes(resolutions))

        return EvidenceResult(
            patient_id=patient_id,
            per_pair_evidence=[PairEvidenceOut(**p.model_dump()) for p in evidence.pairs],
            tier_distribution=evidence.tier_distribution,
            unresolved_pairs=evidence.unresolved_pairs,
            confidence=confidence,
            notes=notes,
        )

    async def _run_pgx(self, patient_id: str, payload: PGxPayload) -> PGxAnalysisResult:
        mapping = map_phenotypes([g.to_result() for g in payload.genotypes])
        warnings = []
        drugs = await self.normalizer.normalize(payload.medications, warnings)
        if warnings:
            logger.warning("PGX analysis for %s degraded: %s", patient_id, "; ".join(warnings))
        recommendations = self.engine.recommend(drugs, mapping.results)

        notes = [f"{gap.gene}: {gap.reason}" for gap in mapping.gaps]
        return PGxAnalysisResult(
            patient_id=patient_id,
            pgx_overview=PGxOverview(
                genes_evaluated=mapping.genes_evaluated,
                phenotypes=[PhenotypeOut.from_result(r) for r in mapping.results if r.phenotype is not None],
                gaps=[GapOut.from_gap(g) for g in mapping.gaps],
            ),
            per_drug_recommendations=[RecommendationOut.from_recommendation(r) for r in recommendations],
            notes=notes,
        )

    async def _run_data_quality(self, patient_id: str, payload: DataQualityPayload) -> DataQualityResult:
        report = assess_data_quality(payload.demographics, payload.labs, payload.allergies)
        return DataQualityResult(patient_id=patient_id, **report.model_dump())


_dispatcher: Optional[AnalysisDispatcher] = None


def get_dispatcher() -> AnalysisDispatcher:
    """Process-wide dispatcher built from the global configuration."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = AnalysisDispatcher()
    return _dispatcher


def set_dispatcher(dispatcher: Optional[AnalysisDispatcher]):
    global _dispatcher
    _dispatcher = dispatcher


async def run(analysis_type: Any, payload: Optional[Dict[str, Any]], patient_id: Optional[str]) -> AnalysisResult:
    return await get_dispatcher().run(analysis_type, payload, patient_id)
