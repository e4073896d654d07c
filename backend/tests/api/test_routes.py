"""
API tests through FastAPI's TestClient.
The dispatcher dependency is overridden with one backed by the bundled store.
"""

import pytest
from fastapi.testclient import TestClient

from oncosafe.main import app
from oncosafe.services.interactions.store import InMemoryDrugStore
from oncosafe.services.pipeline.dispatcher import NO_DATA_NOTICE, AnalysisDispatcher, get_dispatcher


class BrokenDispatcher:

    async def run(self, analysis_type, payload, patient_id):
        raise RuntimeError("boom")


@pytest.fixture
def client():
    dispatcher = AnalysisDispatcher(store=InMemoryDrugStore.from_bundled_data())
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class TestAnalysisRoute:

    def test_ddi_response_is_camel_case(self, client):
        response = client.post("/api/v1/analysis/run", json={
            "analysisType": "DDI",
            "patientId": "P001",
            "payload": {"medications": [{"name": "warfarin"}, {"name": "aspirin"}]},
        })

        assert response.status_code == 200
        body = response.json()
        assert body["analysisType"] == "DDI"
        assert body["patientId"] == "P001"
        assert body["overallRiskLevel"] == "high"
        assert body["perPairInteractions"][0]["severity"] == "major"
        assert body["perPairInteractions"][0]["sourceTier"] == "cache"

    def test_pgx_response(self, client):
        response = client.post("/api/v1/analysis/run", json={
            "analysisType": "PGX",
            "patientId": "P004",
            "payload": {
                "genotypes": [{"gene": "CYP2D6", "genotype": "*4/*4"}],
                "medications": [{"name": "codeine"}],
            },
        })

        assert response.status_code == 200
        body = response.json()
        assert body["pgxOverview"]["phenotypes"][0]["phenotype"] == "poor_metabolizer"
        assert body["perDrugRecommendations"][0]["recommendation"] == "avoid"

    def test_validation_error_names_field(self, client):
        response = client.post("/api/v1/analysis/run", json={
            "analysisType": "DDI",
            "payload": {"medications": [{"name": "warfarin"}]},
        })

        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "patientId"

    def test_unknown_analysis_type(self, client):
        response = client.post("/api/v1/analysis/run", json={
            "analysisType": "TOXICITY",
            "patientId": "P001",
            "payload": {},
        })

        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "analysisType"

    def test_unexpected_failure_is_500(self):
        app.dependency_overrides[get_dispatcher] = lambda: BrokenDispatcher()
        try:
            response = TestClient(app).post("/api/v1/analysis/run", json={
                "analysisType": "DDI",
                "patientId": "P001",
                "payload": {"medications": [{"name": "warfarin"}]},
            })
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500


class TestInteractionRoutes:

    def test_known_by_pair(self, client):
        response = client.get("/api/v1/interactions/known", params={"drugA": "warfarin", "drugB": "aspirin"})

        assert response.status_code == 200
        [row] = response.json()
        assert row["severity"] == "major"
        assert "evidenceLevel" in row

    def test_known_invalid_severity(self, client):
        response = client.get("/api/v1/interactions/known", params={"severity": "deadly"})
        assert response.status_code == 400

    def test_check_pair_with_brand_name(self, client):
        response = client.post("/api/v1/interactions/check-pair", json={"drugA": "Coumadin", "drugB": "aspirin"})

        assert response.status_code == 200
        body = response.json()
        assert body["resolved"] is True
        assert body["drugA"] == "Coumadin"
        assert body["interaction"]["severity"] == "major"
        assert body["recommendation"].startswith("AVOID")

    def test_check_pair_unknown_is_not_safe(self, client):
        response = client.post("/api/v1/interactions/check-pair", json={"drugA": "morphine", "drugB": "sertraline"})

        body = response.json()
        assert body["resolved"] is False
        assert body["interaction"] is None
        assert body["recommendation"] == NO_DATA_NOTICE

    def test_check_pair_same_substance(self, client):
        response = client.post("/api/v1/interactions/check-pair", json={"drugA": "Tylenol", "drugB": "acetaminophen"})
        assert response.status_code == 400


class TestPharmacogenomicsRoutes:

    def test_phenotypes(self, client):
        response = client.post("/api/v1/pharmacogenomics/phenotypes", json={
            "genotypes": [
                {"gene": "CYP2C19", "genotype": "*1/*17"},
                {"gene": "CYP2D6", "genotype": "*1/*999"},
            ],
        })

        assert response.status_code == 200
        body = response.json()
        assert body["genesEvaluated"] == ["CYP2C19", "CYP2D6"]
        assert body["phenotypes"][0]["phenotype"] == "rapid_metabolizer"
        assert body["phenotypes"][0]["activityScore"] == 2.5
        assert body["gaps"][0]["gene"] == "CYP2D6"

    def test_phenotypes_ignore_caller_inference_fields(self, client):
        response = client.post("/api/v1/pharmacogenomics/phenotypes", json={
            "genotypes": [{"gene": "CYP2D6", "genotype": "*4/*4", "phenotypeInferred": False, "activityScore": 2.0}],
        })

        [phenotype] = response.json()["phenotypes"]
        assert phenotype["phenotype"] == "poor_metabolizer"
        assert phenotype["inferred"] is True
        assert phenotype["activityScore"] == 0.0

    def test_rules_filtered_by_drug(self, client):
        response = client.get("/api/v1/pharmacogenomics/rules", params={"drug": "Codeine"})

        rules = response.json()
        assert len(rules) == 3
        assert all(r["citations"] for r in rules)


class TestAlternativesRoute:

    def test_rank(self, client):
        response = client.post("/api/v1/alternatives/rank", json={
            "forDrug": "codeine",
            "withDrugs": ["sertraline"],
            "patientContext": {"phenotypes": [{"gene": "CYP2D6", "genotype": "*4/*4"}]},
        })

        assert response.status_code == 200
        body = response.json()
        assert body["drugClass"] == "OPIOIDS"
        assert body["suggestions"][0]["name"] == "morphine"
        assert body["suggestions"][0]["best"] is True
        assert body["suggestions"][0]["safetyScore"] == 100.0
        assert body["excluded"][0]["name"] == "tramadol"
