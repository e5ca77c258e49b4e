"""
API routes — thin HTTP layer that delegates to the ComplianceService.

Routes:
  GET  /health                      → API health check
  GET  /api/catalog                 → Standard-required documents (?standard=)
  POST /api/compliance/missing      → Unmet requirements for a document corpus
  POST /api/compliance/fulfillment  → How one requirement is (or isn't) fulfilled
  POST /api/duplicates/detect       → Probable-duplicate groups in a corpus
  POST /api/duplicates/group        → One duplicate group by base name or id

The caller supplies the organization's documents in the request body;
loading them from storage is the caller's job.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from compliance_matching.catalog.loader import catalog_summary
from compliance_matching.models.schemas import (
    DuplicateDetectionResult,
    DuplicateGroup,
    FulfilledRequirement,
    FulfillmentResult,
    OrgDocument,
    StandardRequirement,
)
from compliance_matching.services.compliance_service import ComplianceService

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
catalog_router = APIRouter()
compliance_router = APIRouter()
duplicates_router = APIRouter()


@lru_cache()
def get_compliance_service() -> ComplianceService:
    """Process-wide service (catalog and rules loaded once)."""
    return ComplianceService()


# ── Request / response schemas ───────────────────────────
class CatalogResponse(BaseModel):
    standard: Optional[str] = None
    summary: dict[str, dict[str, int]]
    requirements: list[StandardRequirement]


class MissingRequest(BaseModel):
    organization_id: str
    standard: Optional[str] = None
    user_id: str = ""
    documents: list[OrgDocument] = []


class MissingResponse(BaseModel):
    organization_id: str
    standard: Optional[str] = None
    total_requirements: int
    missing_count: int
    missing: list[StandardRequirement]
    fulfilled: list[FulfilledRequirement]


class FulfillmentRequest(BaseModel):
    organization_id: str
    requirement_id: str
    documents: list[OrgDocument] = []


class FulfillmentResponse(BaseModel):
    organization_id: str
    requirement: StandardRequirement
    result: FulfillmentResult


class DuplicateRequest(BaseModel):
    organization_id: str
    user_id: str = ""
    documents: list[OrgDocument] = []


class DuplicateResponse(BaseModel):
    data: DuplicateDetectionResult
    analysis_date: str


class DuplicateGroupRequest(BaseModel):
    organization_id: str
    base_document: Optional[str] = None
    group_id: Optional[str] = None
    documents: list[OrgDocument] = []


# ── Health ───────────────────────────────────────────────
@health_router.get("/health")
async def health():
    return {"status": "ok"}


# ── Catalog ──────────────────────────────────────────────
@catalog_router.get("", response_model=CatalogResponse)
async def get_catalog(
    standard: Optional[str] = None,
    service: ComplianceService = Depends(get_compliance_service),
):
    requirements = service.catalog_for(standard)
    return CatalogResponse(
        standard=standard,
        summary=catalog_summary(requirements),
        requirements=requirements,
    )


# ── Missing documents ────────────────────────────────────
@compliance_router.post("/missing", response_model=MissingResponse)
async def find_missing(
    body: MissingRequest,
    service: ComplianceService = Depends(get_compliance_service),
):
    try:
        report = service.missing_documents(
            body.organization_id, body.documents, body.standard, user_id=body.user_id
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return MissingResponse(
        organization_id=body.organization_id,
        standard=body.standard,
        total_requirements=report.total_requirements,
        missing_count=len(report.missing),
        missing=report.missing,
        fulfilled=report.fulfilled,
    )


@compliance_router.post("/fulfillment", response_model=FulfillmentResponse)
async def check_fulfillment(
    body: FulfillmentRequest,
    service: ComplianceService = Depends(get_compliance_service),
):
    try:
        requirement = service.get_requirement(body.requirement_id)
        result = service.check_requirement(
            body.organization_id, body.requirement_id, body.documents
        )
    except KeyError:
        raise HTTPException(
            status_code=404, detail=f"Requirement {body.requirement_id} not found"
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return FulfillmentResponse(
        organization_id=body.organization_id, requirement=requirement, result=result
    )


# ── Duplicates ───────────────────────────────────────────
@duplicates_router.post("/detect", response_model=DuplicateResponse)
async def detect_duplicates(
    body: DuplicateRequest,
    service: ComplianceService = Depends(get_compliance_service),
):
    try:
        result = service.detect_duplicates(
            body.organization_id, body.documents, user_id=body.user_id
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return DuplicateResponse(
        data=result, analysis_date=datetime.now(timezone.utc).isoformat()
    )


@duplicates_router.post("/group", response_model=DuplicateGroup)
async def get_duplicate_group(
    body: DuplicateGroupRequest,
    service: ComplianceService = Depends(get_compliance_service),
):
    if body.base_document is None and body.group_id is None:
        raise HTTPException(
            status_code=400, detail="Either base_document or group_id is required"
        )

    try:
        group = service.duplicate_group(
            body.organization_id,
            body.documents,
            base_document=body.base_document,
            group_id=body.group_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if group is None:
        raise HTTPException(status_code=404, detail="Duplicate group not found")
    return group
