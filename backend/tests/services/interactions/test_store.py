"""
Unit tests for the drug lookup stores.
The HTTP store is exercised against httpx.MockTransport.
"""

import httpx
import pytest

from oncosafe.services.interactions.config import StoreConfig
from oncosafe.services.interactions.models import AliasMatch, InteractionRow
from oncosafe.services.interactions.store import (
    HttpDrugStore,
    InMemoryDrugStore,
    StoreError,
    create_store,
)


class TestInMemoryDrugStore:

    async def test_alias_lookup_includes_canonical_names(self):
        store = InMemoryDrugStore(aliases={"Coumadin": AliasMatch(canonical_name="warfarin", canonical_code="11289")})

        assert (await store.lookup_alias("coumadin")).canonical_code == "11289"
        assert (await store.lookup_alias(" WARFARIN ")).canonical_name == "warfarin"
        assert await store.lookup_alias("aspirin") is None

    async def test_lookups_are_order_sensitive(self):
        row = InteractionRow(drugs=["aspirin", "warfarin"], codes=["1191", "11289"], severity="major")
        store = InMemoryDrugStore(coded_interactions=[row], curated_interactions=[row])

        assert await store.lookup_interaction("1191", "11289") == row
        assert await store.lookup_interaction("11289", "1191") is None
        assert await store.lookup_interaction_by_name("Aspirin", "warfarin") == row
        assert await store.lookup_interaction_by_name("warfarin", "aspirin") is None

    async def test_bundled_data_is_seeded(self, bundled_store):
        assert (await bundled_store.lookup_alias("tylenol")).canonical_name == "acetaminophen"
        assert await bundled_store.lookup_interaction("1191", "11289") is not None
        assert await bundled_store.lookup_interaction_by_name("metformin", "contrast media") is not None


class TestHttpDrugStore:

    @pytest.fixture
    def config(self):
        return StoreConfig(base_url="http://store.test/rest/v1/", api_key="secret", timeout_seconds=1.0)

    def make_store(self, config, handler):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return HttpDrugStore(config, client=client)

    async def test_alias_lookup(self, config):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["or"] = request.url.params["or"]
            seen["apikey"] = request.headers.get("apikey")
            return httpx.Response(200, json=[{"canonical_name": "Warfarin", "canonical_code": "11289"}])

        store = self.make_store(config, handler)
        match = await store.lookup_alias("  Coumadin ")

        assert match == AliasMatch(canonical_name="warfarin", canonical_code="11289")
        assert seen["path"] == "/rest/v1/drug_aliases"
        assert seen["or"] == "(alias.eq.coumadin,canonical_name.eq.coumadin)"
        assert seen["apikey"] == "secret"

    async def test_empty_result_is_a_miss(self, config):
        store = self.make_store(config, lambda request: httpx.Response(200, json=[]))
        assert await store.lookup_alias("unknownium") is None
        assert await store.lookup_interaction("1", "2") is None

    async def test_coded_interaction_row(self, config):
        def handler(request):
            assert request.url.params["drug1_rxcui"] == "eq.1191"
            assert request.url.params["drug2_rxcui"] == "eq.11289"
            return httpx.Response(200, json=[{
                "drug1_name": "aspirin",
                "drug2_name": "warfarin",
                "severity": "major",
                "mechanism": "Additive bleeding risk",
                "sources": ["FDA label"],
            }])

        store = self.make_store(config, handler)
        row = await store.lookup_interaction("1191", "11289")

        assert row.drugs == ["aspirin", "warfarin"]
        assert row.codes == ["1191", "11289"]
        assert row.sources == ["FDA label"]

    async def test_curated_row_by_name(self, config):
        def handler(request):
            assert request.url.path.endswith("/curated_interactions")
            return httpx.Response(200, json=[{"drug_a": "metformin", "drug_b": "contrast media", "severity": "major"}])

        store = self.make_store(config, handler)
        row = await store.lookup_interaction_by_name("Metformin", "contrast media")
        assert row.severity == "major"

    async def test_client_error_raises_store_error(self, config):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404, json={"message": "not found"})

        store = self.make_store(config, handler)
        with pytest.raises(StoreError):
            await store.lookup_alias("warfarin")
        assert len(calls) == 1

    async def test_server_error_is_retried_then_raised(self, config):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503)

        store = self.make_store(config, handler)
        with pytest.raises(StoreError):
            await store.lookup_interaction("1", "2")
        assert len(calls) == 2

    async def test_non_list_payload_raises_store_error(self, config):
        store = self.make_store(config, lambda request: httpx.Response(200, json={"rows": []}))
        with pytest.raises(StoreError):
            await store.lookup_alias("warfarin")

    def test_requires_base_url(self):
        with pytest.raises(ValueError):
            HttpDrugStore(StoreConfig(base_url=None))


class TestCreateStore:

    def test_defaults_to_bundled_store(self):
        assert isinstance(create_store(StoreConfig(base_url=None)), InMemoryDrugStore)

    async def test_http_store_when_url_configured(self):
        store = create_store(StoreConfig(base_url="http://store.test"))
        assert isinstance(store, HttpDrugStore)
        await store.aclose()
