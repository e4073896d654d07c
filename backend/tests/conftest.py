"""
Shared fixtures: drug lookup stores in the states the pipeline has to cope with.
"""

import asyncio

import pytest

from oncosafe.services.interactions.config import reset_config
from oncosafe.services.interactions.models import MedicationReference, NormalizedDrug
from oncosafe.services.interactions.store import (
    DisabledDrugStore,
    DrugLookupStore,
    InMemoryDrugStore,
    StoreError,
)


class FailingDrugStore(DrugLookupStore):
    """Every lookup raises, like an unreachable directory."""

    def __init__(self):
        self.calls = 0

    async def lookup_alias(self, name):
        self.calls += 1
        raise StoreError("directory unreachable")

    async def lookup_interaction(self, code_a, code_b):
        self.calls += 1
        raise StoreError("interaction store unreachable")

    async def lookup_interaction_by_name(self, name_a, name_b):
        self.calls += 1
        raise StoreError("curated store unreachable")


class SlowDrugStore(DisabledDrugStore):
    """Alias lookups hang past any reasonable timeout."""

    async def lookup_alias(self, name):
        await asyncio.sleep(5)
        return None


def make_drug(name, code=None):
    return NormalizedDrug(
        original_reference=MedicationReference(name=name),
        canonical_name=name.strip().lower(),
        canonical_code=code,
    )


@pytest.fixture(autouse=True)
def fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def bundled_store():
    return InMemoryDrugStore.from_bundled_data()


@pytest.fixture
def disabled_store():
    return DisabledDrugStore()


@pytest.fixture
def failing_store():
    return FailingDrugStore()


@pytest.fixture
def slow_store():
    return SlowDrugStore()


@pytest.fixture
def drug():
    """Factory for NormalizedDrug values: drug("warfarin", "11289")."""
    return make_drug
