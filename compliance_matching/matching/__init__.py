"""
Matching core — the single boundary the route layer interacts with.

    from compliance_matching.matching import find_missing_documents, DuplicateDetector

Everything here is synchronous and pure over in-memory snapshots: no
storage handles, no network, no shared mutable state.
"""

from .normalizer import normalize_title, titles_equal
from .similarity import levenshtein_distance, similarity
from .document_matcher import DocumentMatcher
from .relationship_matcher import RelationshipMatcher
from .missing_requirements import build_missing_report, find_missing_documents
from .duplicate_detector import DuplicateDetector
from .rules_config import (
    DuplicateConfig,
    MatchingConfig,
    MatchingConfigStore,
    RelationshipConfig,
)

__all__ = [
    "normalize_title",
    "titles_equal",
    "levenshtein_distance",
    "similarity",
    "DocumentMatcher",
    "RelationshipMatcher",
    "build_missing_report",
    "find_missing_documents",
    "DuplicateDetector",
    "DuplicateConfig",
    "MatchingConfig",
    "MatchingConfigStore",
    "RelationshipConfig",
]
