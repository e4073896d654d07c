"""
Tiered Interaction Resolver.

Per pair, terminal on the first hit:
  1. cache      - live store, by canonical code pair
  2. curated    - curated table, by canonical name pair
  3. heuristic  - bundled table of well-documented major interactions
  4. None       - unknown (not "no interaction")

Every tier is queried in a fixed orientation of the pair and then the other,
so (A, B) and (B, A) reach the same row. A collaborator failure, or a row
that cannot be read, counts as a miss for that tier only.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Tuple

from .config import InteractionCoreConfig, TierConfidence, get_config
from .knowledge_base import HeuristicInteractionTable, load_heuristic_table
from .models import ConfidenceLevel, DrugPair, InteractionRecord, InteractionRow, SourceTier, substance_key
from .store import DrugLookupStore

logger = logging.getLogger(__name__)


@dataclass
class PairResolution:
    """Outcome of resolving one pair."""
    pair: DrugPair
    record: Optional[InteractionRecord] = None
    failed_tiers: List[SourceTier] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.record is not None


class TieredInteractionResolver:
    """Resolve drug pairs through cache, curated and heuristic tiers."""

    def __init__(
        self,
        store: DrugLookupStore,
        heuristic_table: Optional[HeuristicInteractionTable] = None,
        config: Optional[InteractionCoreConfig] = None,
    ):
        self.store = store
        self.config = config or get_config()
        if heuristic_table is None:
            heuristic_table = load_heuristic_table(self.config.heuristic_table_path)
        self.heuristic_table = heuristic_table
        self.tier_confidence: TierConfidence = self.config.tier_confidence

    async def resolve(self, pair: DrugPair) -> Optional[InteractionRecord]:
        """Resolve one pair; None means no tier had data."""
        return (await self.resolve_detailed(pair)).record

    async def resolve_detailed(self, pair: DrugPair) -> PairResolution:
        resolution = PairResolution(pair=pair)

        resolution.record = await self._cache_tier(pair, resolution)
        if resolution.record is not None:
            return resolution

        resolution.record = await self._curated_tier(pair, resolution)
        if resolution.record is not None:
            return resolution

        row = self._heuristic_tier(pair)
        if row is not None:
            logger.info("Heuristic table resolved %s (table %s)", pair.label(), self.heuristic_table.version)
            resolution.record = InteractionRecord.from_row(
                row, pair, SourceTier.HEURISTIC, self.tier_confidence.heuristic
            )
        return resolution

    async def resolve_all(self, pairs: List[DrugPair]) -> List[PairResolution]:
        """Resolve independent pairs concurrently; output order matches `pairs`."""
        return list(await asyncio.gather(*(self.resolve_detailed(pair) for pair in pairs)))

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------

    async def _cache_tier(self, pair: DrugPair, resolution: PairResolution) -> Optional[InteractionRecord]:
        code_a = pair.drug_a.canonical_code
        code_b = pair.drug_b.canonical_code
        if not code_a or not code_b:
            return None

        first, second = sorted((code_a, code_b))
        return await self._both_orders(
            SourceTier.CACHE,
            resolution,
            self.tier_confidence.cache,
            lambda: self.store.lookup_interaction(first, second),
            lambda: self.store.lookup_interaction(second, first),
        )

    async def _curated_tier(self, pair: DrugPair, resolution: PairResolution) -> Optional[InteractionRecord]:
        first, second = _name_order(pair)
        return await self._both_orders(
            SourceTier.CURATED,
            resolution,
            self.tier_confidence.curated,
            lambda: self.store.lookup_interaction_by_name(first, second),
            lambda: self.store.lookup_interaction_by_name(second, first),
        )

    def _heuristic_tier(self, pair: DrugPair) -> Optional[InteractionRow]:
        first, second = _name_order(pair)
        return self.heuristic_table.lookup(first, second) or self.heuristic_table.lookup(second, first)

    async def _both_orders(
        self,
        tier: SourceTier,
        resolution: PairResolution,
        confidence: ConfidenceLevel,
        forward: Callable[[], Awaitable[Optional[InteractionRow]]],
        backward: Callable[[], Awaitable[Optional[InteractionRow]]],
    ) -> Optional[InteractionRecord]:
        # A row the store returns but we cannot read fails the tier like a transport error.
        try:
            row = await self._bounded(forward())
            if row is None:
                row = await self._bounded(backward())
            if row is None:
                return None
            return InteractionRecord.from_row(row, resolution.pair, tier, confidence)
        except Exception as e:
            logger.warning("%s tier lookup failed for %s: %s", tier.value, resolution.pair.label(), e)
            resolution.failed_tiers.append(tier)
            return None

    async def _bounded(self, lookup: Awaitable[Optional[InteractionRow]]) -> Optional[InteractionRow]:
        return await asyncio.wait_for(lookup, timeout=self.config.store.lookup_timeout_seconds)


def _name_order(pair: DrugPair) -> Tuple[str, str]:
    """Canonical names ordered by lookup key, so (A, B) and (B, A) query alike."""
    names = (pair.drug_a.canonical_name, pair.drug_b.canonical_name)
    return tuple(sorted(names, key=lambda name: (substance_key(name), name)))
