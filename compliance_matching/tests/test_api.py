"""
Tests: HTTP API (catalog, missing documents, fulfilment, duplicates).

Run with:
    pytest compliance_matching/tests/test_api.py -v
"""

import pytest
from fastapi.testclient import TestClient

from compliance_matching.api import create_app
from compliance_matching.api.routes import get_compliance_service
from compliance_matching.matching.rules_config import MatchingConfigStore
from compliance_matching.services.compliance_service import ComplianceService

SOA_DOCS = [
    {"id": "d1", "title": "SOA-15-Jul-2026-V2", "owner": {"id": "u1"}},
    {"id": "d2", "title": "Statement_of_Applicability_v3.1.docx", "owner": {"id": "u1"}},
    {"id": "d3", "title": "Statement of Applicability v1.0.pdf", "owner": {"id": "u1"}},
]


@pytest.fixture
def service():
    return ComplianceService(config_store=MatchingConfigStore(path=""))


@pytest.fixture
def client(service):
    app = create_app()
    app.dependency_overrides[get_compliance_service] = lambda: service
    return TestClient(app)


class TestHealthAndCatalog:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    def test_full_catalog(self, client):
        body = client.get("/api/catalog").json()
        assert len(body["requirements"]) == 36
        assert body["summary"]["ISO_9001_2015"] == {"Required": 12, "Optional": 5}

    def test_catalog_for_one_standard(self, client):
        body = client.get("/api/catalog", params={"standard": "ISO_27001_2022"}).json()
        assert body["standard"] == "ISO_27001_2022"
        assert len(body["requirements"]) == 19
        assert body["summary"] == {"ISO_27001_2022": {"Required": 14, "Optional": 5}}


class TestCompliance:
    def test_missing_documents(self, client, service):
        resp = client.post(
            "/api/compliance/missing",
            json={
                "organization_id": "org-1",
                "standard": "ISO_27001_2022",
                "user_id": "u1",
                "documents": [{"id": "d1", "title": "Information Security Policy v2.docx"}],
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["total_requirements"] == 19
        assert body["missing_count"] == len(body["missing"])
        assert "ISO27001-01" in [f["requirement_id"] for f in body["fulfilled"]]
        assert "ISO27001-01" not in [r["id"] for r in body["missing"]]

        trail = service.audit.get_trail("org-1")
        assert trail[-1]["action"] == "FIND_MISSING_DOCUMENTS"
        assert trail[-1]["user_id"] == "u1"

    def test_invalid_document_rejected(self, client):
        resp = client.post(
            "/api/compliance/missing",
            json={
                "organization_id": "org-1",
                "documents": [{"id": "d1", "title": "Loop", "parent_id": "d1"}],
            },
        )
        assert resp.status_code == 422

    def test_repeated_ids_rejected(self, client):
        resp = client.post(
            "/api/compliance/missing",
            json={
                "organization_id": "org-1",
                "documents": [{"id": "d1", "title": "SOA"}, {"id": "d1", "title": "BCP"}],
            },
        )
        assert resp.status_code == 422

    def test_fulfillment(self, client):
        resp = client.post(
            "/api/compliance/fulfillment",
            json={
                "organization_id": "org-1",
                "requirement_id": "ISO27001-02",
                "documents": [{"id": "d1", "title": "SOA-15-Jul-2026-V2"}],
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["requirement"]["title"] == "Statement of Applicability (SoA)"
        assert body["result"]["is_match"] is True
        assert body["result"]["matched_by"]["document_id"] == "d1"

    def test_fulfillment_unknown_requirement(self, client):
        resp = client.post(
            "/api/compliance/fulfillment",
            json={"organization_id": "org-1", "requirement_id": "NOPE-99", "documents": []},
        )
        assert resp.status_code == 404


class TestDuplicates:
    def test_detect(self, client, service):
        resp = client.post(
            "/api/duplicates/detect",
            json={"organization_id": "org-1", "documents": SOA_DOCS},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["analysis_date"]
        assert body["data"]["duplicates_found"] == 2
        assert body["data"]["duplicate_groups"][0]["recommended_action"] == "keep_latest"
        assert service.audit.get_trail("org-1")[-1]["action"] == "DETECT_DUPLICATES"

    def test_group_by_base_document(self, client):
        resp = client.post(
            "/api/duplicates/group",
            json={"organization_id": "org-1", "base_document": "soa", "documents": SOA_DOCS},
        )
        assert resp.status_code == 200
        assert len(resp.json()["documents"]) == 3

    def test_group_requires_a_key(self, client):
        resp = client.post(
            "/api/duplicates/group",
            json={"organization_id": "org-1", "documents": SOA_DOCS},
        )
        assert resp.status_code == 400

    def test_group_not_found(self, client):
        resp = client.post(
            "/api/duplicates/group",
            json={"organization_id": "org-1", "group_id": "0000", "documents": SOA_DOCS},
        )
        assert resp.status_code == 404

    def test_repeated_ids_rejected(self, client):
        docs = SOA_DOCS + [{"id": "d1", "title": "Risk Register", "owner": {"id": "u1"}}]
        resp = client.post(
            "/api/duplicates/detect",
            json={"organization_id": "org-1", "documents": docs},
        )
        assert resp.status_code == 422
        assert "d1" in resp.json()["detail"]

    def test_group_repeated_ids_rejected(self, client):
        docs = SOA_DOCS + [{"id": "d2", "title": "Risk Register", "owner": {"id": "u1"}}]
        resp = client.post(
            "/api/duplicates/group",
            json={"organization_id": "org-1", "base_document": "soa", "documents": docs},
        )
        assert resp.status_code == 422
