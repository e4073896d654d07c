"""
Drug Normalizer - resolves free-text medication references to canonical identities.
"""

import asyncio
import logging
from typing import List, Optional

from .models import MedicationReference, NormalizedDrug
from .store import DrugLookupStore

logger = logging.getLogger(__name__)


def fallback_name(name: str) -> str:
    return (name or "").strip().lower()


class DrugNormalizer:
    """Normalizes medication references through the alias directory."""

    def __init__(self, store: DrugLookupStore, lookup_timeout: Optional[float] = None):
        self.store = store
        self.lookup_timeout = lookup_timeout

    async def normalize(
        self,
        refs: List[MedicationReference],
        warnings: Optional[List[str]] = None,
    ) -> List[NormalizedDrug]:
        """
        Normalize every reference concurrently. Output order matches input order.

        Directory failures never raise; they degrade that reference to the
        lowercase-trimmed fallback and append a soft warning to `warnings`.
        """
        sink = warnings if warnings is not None else []
        return list(await asyncio.gather(*(self._normalize_one(ref, sink) for ref in refs)))

    async def _normalize_one(self, ref: MedicationReference, warnings: List[str]) -> NormalizedDrug:
        try:
            lookup = self.store.lookup_alias(ref.name)
            if self.lookup_timeout:
                match = await asyncio.wait_for(lookup, timeout=self.lookup_timeout)
            else:
                match = await lookup
        except Exception as e:
            logger.warning("Directory lookup failed for %r: %s", ref.name, e)
            warnings.append(f"Drug directory unavailable for '{ref.name}'; used name as given.")
            match = None

        if match is None:
            return NormalizedDrug(
                original_reference=ref,
                canonical_name=fallback_name(ref.name),
                canonical_code=None,
            )

        return NormalizedDrug(
            original_reference=ref,
            canonical_name=fallback_name(match.canonical_name),
            canonical_code=match.canonical_code,
        )
