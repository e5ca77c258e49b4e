"""
Compliance Service — binds the standard catalog, the rule configuration and
the audit trail around the pure matching core.

Route handlers call this service; the core itself never sees the catalog
source, the config file or the audit trail.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from compliance_matching.catalog.loader import load_catalog
from compliance_matching.matching.document_matcher import DocumentMatcher
from compliance_matching.matching.duplicate_detector import DuplicateDetector
from compliance_matching.matching.missing_requirements import build_missing_report
from compliance_matching.matching.relationship_matcher import RelationshipMatcher
from compliance_matching.matching.rules_config import MatchingConfigStore
from compliance_matching.models.schemas import (
    DuplicateDetectionResult,
    DuplicateGroup,
    FulfillmentResult,
    MissingRequirementsReport,
    OrgDocument,
    StandardRequirement,
)
from compliance_matching.services.audit_service import AuditService

logger = logging.getLogger(__name__)


class ComplianceService:
    """Missing-document and duplicate analyses for one catalog and rule set."""

    def __init__(
        self,
        catalog: Sequence[StandardRequirement] | None = None,
        config_store: MatchingConfigStore | None = None,
        audit: AuditService | None = None,
    ):
        self.config_store = config_store or MatchingConfigStore()
        self.catalog = list(catalog) if catalog is not None else load_catalog()
        self.audit = audit or AuditService()

        self.matcher = RelationshipMatcher(
            DocumentMatcher(self.config_store.get_matching_config()),
            self.config_store.get_relationship_config(),
        )
        self.detector = DuplicateDetector(self.config_store.get_duplicate_config())

    def catalog_for(self, standard: str | None = None) -> list[StandardRequirement]:
        if standard is None:
            return list(self.catalog)
        return [r for r in self.catalog if r.standard_id == standard]

    def get_requirement(self, requirement_id: str) -> StandardRequirement:
        for req in self.catalog:
            if req.id == requirement_id:
                return req
        raise KeyError(requirement_id)

    # ── Missing documents ────────────────────────────────

    def missing_documents(
        self,
        organization_id: str,
        corpus: Sequence[OrgDocument],
        standard: str | None = None,
        user_id: str = "",
    ) -> MissingRequirementsReport:
        report = build_missing_report(corpus, self.catalog, standard, self.matcher)
        self.audit.record(
            organization_id,
            "FIND_MISSING_DOCUMENTS",
            {
                "standard": standard or "ALL",
                "totalDocuments": len(corpus),
                "totalRequirements": report.total_requirements,
                "missing": len(report.missing),
            },
            user_id=user_id,
        )
        return report

    def check_requirement(
        self,
        organization_id: str,
        requirement_id: str,
        corpus: Sequence[OrgDocument],
    ) -> FulfillmentResult:
        """Fulfilment of one catalog requirement. KeyError for unknown ids."""
        requirement = self.get_requirement(requirement_id)
        result = self.matcher.check_requirement_fulfillment(requirement, corpus, self.catalog)
        logger.info(
            f"[{organization_id}] {requirement.title}: "
            f"{'fulfilled' if result.is_match else 'missing'} "
            f"({result.match_type.value}, {result.confidence:.2f})"
        )
        return result

    # ── Duplicates ───────────────────────────────────────

    def detect_duplicates(
        self,
        organization_id: str,
        corpus: Sequence[OrgDocument],
        user_id: str = "",
    ) -> DuplicateDetectionResult:
        result = self.detector.detect_duplicates(corpus, organization_id=organization_id)
        self.audit.record(
            organization_id,
            "DETECT_DUPLICATES",
            {
                "totalDocuments": result.total_documents,
                "duplicatesFound": result.duplicates_found,
                "groupsFound": len(result.duplicate_groups),
            },
            user_id=user_id,
        )
        return result

    def duplicate_group(
        self,
        organization_id: str,
        corpus: Sequence[OrgDocument],
        base_document: str | None = None,
        group_id: str | None = None,
    ) -> Optional[DuplicateGroup]:
        """Re-run detection and pick one group by base name or group id."""
        if base_document is None and group_id is None:
            raise ValueError("Either base_document or group_id is required")
        result = self.detector.detect_duplicates(corpus, organization_id=organization_id)
        for group in result.duplicate_groups:
            if group_id is not None and group.group_id == group_id:
                return group
            if base_document is not None and group.base_document == base_document:
                return group
        return None
