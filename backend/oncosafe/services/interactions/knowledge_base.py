"""
Bundled interaction knowledge - alias directory, curated table and the
heuristic table of well-documented major interactions.

All tables are JSON files under oncosafe/data, loaded once per process and
returned as immutable tuples / mappings.
"""

import json
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from .models import AliasMatch, InteractionRow, Severity, substance_key

DATA_DIR = Path(__file__).resolve().parent.parent.parent / "data"

ALIASES_FILE = DATA_DIR / "drug_aliases.json"
CURATED_FILE = DATA_DIR / "curated_interactions.json"
HEURISTIC_FILE = DATA_DIR / "heuristic_interactions.json"


def _read_json(path: Path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


@lru_cache(maxsize=1)
def load_aliases() -> Mapping[str, AliasMatch]:
    """Alias directory: lowercase alias -> canonical identity."""
    data = _read_json(ALIASES_FILE)
    codes: Dict[str, str] = data.get("codes", {})
    aliases: Dict[str, AliasMatch] = {}

    for canonical, code in codes.items():
        aliases[canonical.lower()] = AliasMatch(canonical_name=canonical.lower(), canonical_code=code)

    for alias, canonical in data.get("aliases", {}).items():
        canonical = canonical.lower()
        aliases[alias.lower()] = AliasMatch(
            canonical_name=canonical,
            canonical_code=codes.get(canonical),
        )

    return MappingProxyType(aliases)


def _rows(entries: List[dict]) -> Tuple[InteractionRow, ...]:
    rows = []
    for entry in entries:
        row = InteractionRow(**entry)
        Severity.parse(row.severity)  # reject unknown severities at load time
        rows.append(row)
    return tuple(rows)


@lru_cache(maxsize=1)
def load_curated_interactions() -> Tuple[InteractionRow, ...]:
    """Curated interaction table seeding the in-memory store."""
    return _rows(_read_json(CURATED_FILE)["interactions"])


class HeuristicInteractionTable:
    """
    Small, versioned table of well-known major interactions used only when no
    other tier matches. Lookups are exact on (substance_key(a), substance_key(b));
    callers try both orders.
    """

    def __init__(self, entries: Tuple[InteractionRow, ...], version: str = "unversioned"):
        self.version = version
        self.entries = tuple(entries)
        self._index: Dict[Tuple[str, str], InteractionRow] = {}
        for row in self.entries:
            self._index.setdefault((substance_key(row.drugs[0]), substance_key(row.drugs[1])), row)

    def lookup(self, name_a: str, name_b: str) -> Optional[InteractionRow]:
        return self._index.get((substance_key(name_a), substance_key(name_b)))

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def from_file(cls, path: Path) -> "HeuristicInteractionTable":
        data = _read_json(Path(path))
        return cls(_rows(data["interactions"]), version=str(data.get("version", "unversioned")))


@lru_cache(maxsize=4)
def load_heuristic_table(path: Optional[str] = None) -> HeuristicInteractionTable:
    """Load the heuristic table (bundled file unless a path is given)."""
    return HeuristicInteractionTable.from_file(Path(path) if path else HEURISTIC_FILE)


def filter_known_interactions(
    rows: Tuple[InteractionRow, ...],
    drug: Optional[str] = None,
    drug_a: Optional[str] = None,
    drug_b: Optional[str] = None,
    severity: Optional[Severity] = None,
    limit: Optional[int] = None,
) -> List[InteractionRow]:
    """
    Filter curated rows for browsing.

    - drug: substring match against either drug in the row
    - drug_a + drug_b: both must match (substring), order-insensitive
    - severity: exact, after synonym parsing
    """
    results = list(rows)

    if drug:
        term = drug.strip().lower()
        results = [r for r in results if any(term in d.lower() for d in r.drugs)]

    if drug_a and drug_b:
        a = drug_a.strip().lower()
        b = drug_b.strip().lower()
        results = [
            r for r in results
            if (a in r.drugs[0].lower() and b in r.drugs[1].lower())
            or (a in r.drugs[1].lower() and b in r.drugs[0].lower())
        ]

    if severity is not None:
        results = [r for r in results if Severity.parse(r.severity) == severity]

    if limit is not None and limit > 0:
        results = results[:limit]

    return results
