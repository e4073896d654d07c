"""
Drug lookup collaborators.

The analysis core only depends on the three lookups of `DrugLookupStore`.
Concrete stores:
- InMemoryDrugStore: indexed in-process tables (bundled data, tests)
- HttpDrugStore: PostgREST-style row API (drug_aliases, drug_interactions,
  curated_interactions)
- DisabledDrugStore: answers nothing; every tier but the heuristic one misses
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional, Tuple

import backoff
import httpx

from .config import StoreConfig, get_config
from .models import AliasMatch, InteractionRow, substance_key

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a collaborator cannot answer a lookup."""


class DrugLookupStore(ABC):
    """Read-only lookup capability consumed by the normalizer and resolver."""

    @abstractmethod
    async def lookup_alias(self, name: str) -> Optional[AliasMatch]:
        """Case-insensitive exact match against alias and canonical-name columns."""

    @abstractmethod
    async def lookup_interaction(self, code_a: str, code_b: str) -> Optional[InteractionRow]:
        """Interaction row keyed by canonical codes, in the order given."""

    @abstractmethod
    async def lookup_interaction_by_name(self, name_a: str, name_b: str) -> Optional[InteractionRow]:
        """Curated interaction row keyed by substance names, in the order given."""

    async def aclose(self):
        pass


class DisabledDrugStore(DrugLookupStore):
    """Store that never matches."""

    async def lookup_alias(self, name: str) -> Optional[AliasMatch]:
        return None

    async def lookup_interaction(self, code_a: str, code_b: str) -> Optional[InteractionRow]:
        return None

    async def lookup_interaction_by_name(self, name_a: str, name_b: str) -> Optional[InteractionRow]:
        return None


class InMemoryDrugStore(DrugLookupStore):
    """
    In-process store.

    Aliases are indexed by lowercase-trimmed alias and canonical name.
    Coded rows are indexed by (code_a, code_b) exactly as stored; curated rows by
    (substance_key(a), substance_key(b)) exactly as stored. Reverse-order lookup is
    the resolver's job, so a row stored as (A, B) does not answer (B, A) here.
    """

    def __init__(
        self,
        aliases: Optional[Dict[str, AliasMatch]] = None,
        coded_interactions: Iterable[InteractionRow] = (),
        curated_interactions: Iterable[InteractionRow] = (),
    ):
        self._aliases: Dict[str, AliasMatch] = {}
        self._by_code: Dict[Tuple[str, str], InteractionRow] = {}
        self._by_name: Dict[Tuple[str, str], InteractionRow] = {}

        for alias, match in (aliases or {}).items():
            self._aliases[alias.strip().lower()] = match
            self._aliases.setdefault(match.canonical_name.strip().lower(), match)

        for row in coded_interactions:
            if not row.codes or len(row.codes) != 2:
                continue
            self._by_code.setdefault((row.codes[0], row.codes[1]), row)

        for row in curated_interactions:
            key = (substance_key(row.drugs[0]), substance_key(row.drugs[1]))
            self._by_name.setdefault(key, row)

    @classmethod
    def from_bundled_data(cls) -> "InMemoryDrugStore":
        """Store seeded with the bundled alias directory and curated table."""
        from .knowledge_base import load_aliases, load_curated_interactions

        curated = load_curated_interactions()
        return cls(
            aliases=load_aliases(),
            coded_interactions=[row for row in curated if row.codes],
            curated_interactions=curated,
        )

    async def lookup_alias(self, name: str) -> Optional[AliasMatch]:
        return self._aliases.get((name or "").strip().lower())

    async def lookup_interaction(self, code_a: str, code_b: str) -> Optional[InteractionRow]:
        return self._by_code.get((code_a, code_b))

    async def lookup_interaction_by_name(self, name_a: str, name_b: str) -> Optional[InteractionRow]:
        return self._by_name.get((substance_key(name_a), substance_key(name_b)))


class HttpDrugStore(DrugLookupStore):
    """
    Row-API backed store (PostgREST conventions: `col=eq.value` filters, JSON arrays).

    Tables:
      drug_aliases(alias, canonical_name, canonical_code)
      drug_interactions(drug1_rxcui, drug2_rxcui, drug1_name, drug2_name, severity,
                        mechanism, effect, management, evidence_level, sources)
      curated_interactions(drug_a, drug_b, severity, mechanism, effect, management,
                           evidence_level, sources)
    """

    def __init__(
        self,
        config: Optional[StoreConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or get_config().store
        if not self.config.base_url:
            raise ValueError("HttpDrugStore requires store.base_url (ONCOSAFE_STORE_URL)")
        self.base_url = self.config.base_url.rstrip("/")

        headers = {"Accept": "application/json"}
        if self.config.api_key:
            headers["apikey"] = self.config.api_key
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.config.timeout_seconds)
        self._headers = headers

    @backoff.on_exception(
        backoff.expo,
        (httpx.RequestError, httpx.HTTPStatusError),
        max_tries=2,
        giveup=lambda e: isinstance(e, httpx.HTTPStatusError) and e.response.status_code < 500
    )
    async def _fetch_rows(self, table: str, params: Dict[str, str]) -> list:
        response = await self._client.get(
            f"{self.base_url}/{table}",
            params={**params, "limit": "1"},
            headers=self._headers,
        )
        response.raise_for_status()
        return response.json()

    async def _first_row(self, table: str, params: Dict[str, str]) -> Optional[dict]:
        try:
            rows = await self._fetch_rows(table, params)
        except (httpx.RequestError, httpx.HTTPStatusError) as e:
            raise StoreError(f"{table} lookup failed: {e}") from e
        if not isinstance(rows, list):
            raise StoreError(f"{table} lookup returned {type(rows).__name__}, expected list")
        return rows[0] if rows else None

    async def lookup_alias(self, name: str) -> Optional[AliasMatch]:
        term = (name or "").strip().lower()
        if not term:
            return None
        row = await self._first_row(
            "drug_aliases",
            {
                "select": "canonical_name,canonical_code",
                "or": f"(alias.eq.{term},canonical_name.eq.{term})",
            },
        )
        if row is None:
            return None
        return AliasMatch(
            canonical_name=str(row["canonical_name"]).strip().lower(),
            canonical_code=row.get("canonical_code"),
        )

    async def lookup_interaction(self, code_a: str, code_b: str) -> Optional[InteractionRow]:
        row = await self._first_row(
            "drug_interactions",
            {"drug1_rxcui": f"eq.{code_a}", "drug2_rxcui": f"eq.{code_b}"},
        )
        if row is None:
            return None
        return InteractionRow(
            drugs=[row.get("drug1_name") or code_a, row.get("drug2_name") or code_b],
            severity=row["severity"],
            mechanism=row.get("mechanism") or "",
            effect=row.get("effect") or "",
            management=row.get("management") or "",
            evidence_level=row.get("evidence_level") or "",
            sources=row.get("sources") or [],
            codes=[code_a, code_b],
        )

    async def lookup_interaction_by_name(self, name_a: str, name_b: str) -> Optional[InteractionRow]:
        row = await self._first_row(
            "curated_interactions",
            {"drug_a": f"eq.{name_a.strip().lower()}", "drug_b": f"eq.{name_b.strip().lower()}"},
        )
        if row is None:
            return None
        return InteractionRow(
            drugs=[row["drug_a"], row["drug_b"]],
            severity=row["severity"],
            mechanism=row.get("mechanism") or "",
            effect=row.get("effect") or "",
            management=row.get("management") or "",
            evidence_level=row.get("evidence_level") or "",
            sources=row.get("sources") or [],
        )

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()


def create_store(config: Optional[StoreConfig] = None) -> DrugLookupStore:
    """HTTP store when a base URL is configured, otherwise the bundled in-memory store."""
    config = config or get_config().store
    if config.base_url:
        logger.info("Using HTTP drug store at %s", config.base_url)
        return HttpDrugStore(config)
    return InMemoryDrugStore.from_bundled_data()
