"""
Data schemas exchanged between the storage/route layer and the matching core.

Inputs (OrgDocument, StandardRequirement) arrive as in-memory snapshots
already loaded from storage; outputs (MatchResult, FulfillmentResult,
DuplicateDetectionResult, MissingRequirementsReport) are plain values
returned to the caller for serialization.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from .enums import (
    DocumentStatus,
    DocumentType,
    RequirementCategory,
    MatchType,
    FulfillmentType,
    RelationshipType,
    RecommendedAction,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Organization documents ───────────────────────────────


class Owner(BaseModel):
    id: str = ""
    name: str = ""
    email: str = ""


class ClauseAssociation(BaseModel):
    """A link between a document and one clause of a standard."""
    clause_number: str
    standard_id: str


class OrgDocument(BaseModel):
    """A document owned by an organization. Read-only for the core."""
    id: str
    title: str
    status: DocumentStatus = DocumentStatus.DRAFT
    current_version: int = Field(default=1, ge=1)
    owner: Owner = Field(default_factory=Owner)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    document_type: Optional[DocumentType] = None
    clause_associations: list[ClauseAssociation] = []

    # Relationships, resolved by id against the corpus they arrive with
    parent_id: Optional[str] = None
    child_ids: list[str] = []
    reference_ids: list[str] = []       # outgoing cross-references
    referenced_by_ids: list[str] = []   # incoming cross-references

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive timestamps from storage are UTC; keeps them comparable
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _no_self_links(self) -> "OrgDocument":
        if self.parent_id is not None and self.parent_id == self.id:
            raise ValueError(f"Document {self.id} cannot be its own parent")
        for field_name in ("child_ids", "reference_ids", "referenced_by_ids"):
            if self.id in getattr(self, field_name):
                raise ValueError(f"Document {self.id} lists itself in {field_name}")
        return self


def ensure_unique_ids(documents: Iterable[OrgDocument]) -> None:
    """Raise ValueError when a corpus carries the same document id twice."""
    seen: set[str] = set()
    repeated: list[str] = []
    for doc in documents:
        if doc.id in seen and doc.id not in repeated:
            repeated.append(doc.id)
        seen.add(doc.id)
    if repeated:
        raise ValueError(f"Corpus contains repeated document ids: {', '.join(repeated)}")


# ── Standard catalog ─────────────────────────────────────


class StandardRequirement(BaseModel):
    """A named document an organization is expected to produce for a standard."""
    id: str
    title: str
    category: RequirementCategory = RequirementCategory.REQUIRED
    standard_id: str
    keywords: list[str] = []
    required_clause_numbers: list[str] = []
    document_type: Optional[DocumentType] = None
    fulfills: list[str] = []
    can_be_fulfilled_by: list[str] = []
    description: str = ""
    clause_ref: Optional[str] = None
    importance: str = ""


# ── Match results ────────────────────────────────────────


class MatchResult(BaseModel):
    """Outcome of matching one document against one requirement."""
    is_match: bool = False
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    match_type: MatchType = MatchType.NONE


class MatchedBy(BaseModel):
    document_id: str
    document_title: str
    relationship_type: Optional[RelationshipType] = None


class FulfillmentResult(BaseModel):
    """Outcome of checking one requirement against a whole corpus."""
    is_match: bool = False
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    match_type: FulfillmentType = FulfillmentType.DIRECT
    matched_by: Optional[MatchedBy] = None


class FulfilledRequirement(BaseModel):
    requirement_id: str
    requirement_title: str
    standard_id: str
    result: FulfillmentResult


class MissingRequirementsReport(BaseModel):
    standard: Optional[str] = None  # None = whole catalog
    total_requirements: int = 0
    fulfilled: list[FulfilledRequirement] = []
    missing: list[StandardRequirement] = []


# ── Duplicate detection ──────────────────────────────────


class VersionInfo(BaseModel):
    version_number: Optional[str] = None
    version_date: Optional[str] = None


class DuplicateMember(BaseModel):
    """A document inside a duplicate group, annotated with version data."""
    id: str
    title: str
    current_version: int
    status: DocumentStatus
    owner: Owner
    created_at: datetime
    updated_at: datetime
    is_latest_version: bool = False
    version_info: VersionInfo = Field(default_factory=VersionInfo)


class DuplicateGroup(BaseModel):
    group_id: str
    base_document: str  # normalized base name of the group's seed document
    documents: list[DuplicateMember] = []
    recommended_action: RecommendedAction = RecommendedAction.KEEP_LATEST
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


class DuplicateDetectionResult(BaseModel):
    organization_id: Optional[str] = None
    duplicate_groups: list[DuplicateGroup] = []
    total_documents: int = 0
    duplicates_found: int = 0
