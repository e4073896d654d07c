"""
Unit tests for drug name normalization.
"""

import pytest

from oncosafe.services.interactions.models import MedicationReference
from oncosafe.services.interactions.normalizer import DrugNormalizer


def refs(*names):
    return [MedicationReference(name=name) for name in names]


class TestDrugNormalizer:

    @pytest.fixture
    def normalizer(self, bundled_store):
        return DrugNormalizer(bundled_store)

    async def test_brand_name_resolves_to_canonical(self, normalizer):
        [drug] = await normalizer.normalize(refs("Coumadin"))

        assert drug.canonical_name == "warfarin"
        assert drug.canonical_code == "11289"
        assert drug.display_name == "Coumadin"

    async def test_lookup_is_case_insensitive_and_trimmed(self, normalizer):
        [drug] = await normalizer.normalize(refs("  TYLENOL "))
        assert drug.canonical_name == "acetaminophen"

    async def test_unknown_name_falls_back_without_code(self, normalizer):
        [drug] = await normalizer.normalize(refs("  Hydromorphone  "))

        assert drug.canonical_name == "hydromorphone"
        assert drug.canonical_code is None

    async def test_output_order_matches_input(self, normalizer):
        drugs = await normalizer.normalize(refs("Zocor", "Advil", "unknownium", "Biaxin"))
        assert [d.canonical_name for d in drugs] == ["simvastatin", "ibuprofen", "unknownium", "clarithromycin"]

    async def test_original_reference_is_preserved(self, normalizer):
        ref = MedicationReference(name="Plavix", dose="75 mg", route="oral")
        [drug] = await normalizer.normalize([ref])
        assert drug.original_reference == ref

    async def test_directory_failure_degrades_with_warning(self, failing_store):
        normalizer = DrugNormalizer(failing_store)
        warnings = []

        drugs = await normalizer.normalize(refs("Coumadin", "aspirin"), warnings)

        assert [d.canonical_name for d in drugs] == ["coumadin", "aspirin"]
        assert all(d.canonical_code is None for d in drugs)
        assert len(warnings) == 2
        assert "Coumadin" in warnings[0]

    async def test_directory_failure_without_sink_does_not_raise(self, failing_store):
        drugs = await DrugNormalizer(failing_store).normalize(refs("warfarin"))
        assert drugs[0].canonical_name == "warfarin"

    async def test_slow_directory_times_out_to_fallback(self, slow_store):
        normalizer = DrugNormalizer(slow_store, lookup_timeout=0.01)
        warnings = []

        [drug] = await normalizer.normalize(refs("Eliquis"), warnings)

        assert drug.canonical_name == "eliquis"
        assert warnings

    async def test_empty_input(self, normalizer):
        assert await normalizer.normalize([]) == []
