"""Models — enums and pydantic schemas shared by the core and the API."""

from .enums import (
    DocumentStatus,
    DocumentType,
    StandardType,
    RequirementCategory,
    MatchType,
    FulfillmentType,
    RelationshipType,
    RecommendedAction,
)
from .schemas import (
    Owner,
    ClauseAssociation,
    OrgDocument,
    StandardRequirement,
    MatchResult,
    MatchedBy,
    FulfillmentResult,
    FulfilledRequirement,
    MissingRequirementsReport,
    VersionInfo,
    DuplicateMember,
    DuplicateGroup,
    DuplicateDetectionResult,
    ensure_unique_ids,
)

__all__ = [
    "DocumentStatus",
    "DocumentType",
    "StandardType",
    "RequirementCategory",
    "MatchType",
    "FulfillmentType",
    "RelationshipType",
    "RecommendedAction",
    "Owner",
    "ClauseAssociation",
    "OrgDocument",
    "StandardRequirement",
    "MatchResult",
    "MatchedBy",
    "FulfillmentResult",
    "FulfilledRequirement",
    "MissingRequirementsReport",
    "VersionInfo",
    "DuplicateMember",
    "DuplicateGroup",
    "DuplicateDetectionResult",
    "ensure_unique_ids",
]
