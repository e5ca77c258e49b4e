from enum import Enum

class DocumentStatus(str, Enum):
    DRAFT = "DRAFT"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    ARCHIVED = "ARCHIVED"

class DocumentType(str, Enum):
    POLICY = "POLICY"
    PROCEDURE = "PROCEDURE"
    MANUAL = "MANUAL"
    RECORD = "RECORD"
    LOG = "LOG"
    PLAN = "PLAN"
    REPORT = "REPORT"
    DOCUMENT = "DOCUMENT"

class StandardType(str, Enum):
    ISO_9001_2015 = "ISO_9001_2015"
    ISO_27001_2022 = "ISO_27001_2022"

class RequirementCategory(str, Enum):
    REQUIRED = "Required"
    OPTIONAL = "Optional"

class MatchType(str, Enum):
    """How a single document matched a standard requirement."""
    CLAUSE = "clause"
    KEYWORD = "keyword"
    TITLE = "title"
    NONE = "none"

class FulfillmentType(str, Enum):
    """How a requirement was fulfilled across the whole corpus."""
    DIRECT = "direct"
    FULFILLS = "fulfills"
    CAN_BE_FULFILLED_BY = "canBeFulfilledBy"
    PARENT = "parent"
    REFERENCE = "reference"

class RelationshipType(str, Enum):
    DIRECT = "direct"
    FULFILLS = "fulfills"
    CAN_BE_FULFILLED_BY = "canBeFulfilledBy"
    PARENT = "parent"
    CHILD = "child"
    REFERENCES = "references"
    REFERENCED_BY = "referencedBy"

class RecommendedAction(str, Enum):
    KEEP_LATEST = "keep_latest"
    MERGE_CONTENT = "merge_content"
    MANUAL_REVIEW = "manual_review"
