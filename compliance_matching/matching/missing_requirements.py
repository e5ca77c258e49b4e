"""
Missing-Requirements Finder — walks the standard catalog and reports which
required documents an organization's corpus does not yet satisfy.

Pure over its inputs; audit logging is left to the caller.
"""

from __future__ import annotations

import logging
from typing import Sequence

from compliance_matching.matching.relationship_matcher import RelationshipMatcher
from compliance_matching.models.schemas import (
    FulfilledRequirement,
    MissingRequirementsReport,
    OrgDocument,
    StandardRequirement,
)

logger = logging.getLogger(__name__)


def _filter_catalog(
    catalog: Sequence[StandardRequirement], standard: str | None
) -> list[StandardRequirement]:
    if standard is None:
        return list(catalog)
    return [r for r in catalog if r.standard_id == standard]


def build_missing_report(
    corpus: Sequence[OrgDocument],
    catalog: Sequence[StandardRequirement],
    standard: str | None = None,
    matcher: RelationshipMatcher | None = None,
) -> MissingRequirementsReport:
    """Check every (optionally filtered) catalog requirement against the corpus.

    Catalog order is preserved in both the fulfilled and the missing lists.
    The unfiltered catalog is handed to the matcher so that "fulfills"
    links from other standards still count.
    """
    matcher = matcher or RelationshipMatcher()
    requirements = _filter_catalog(catalog, standard)
    report = MissingRequirementsReport(
        standard=standard, total_requirements=len(requirements)
    )

    for requirement in requirements:
        result = matcher.check_requirement_fulfillment(requirement, corpus, catalog)
        if result.is_match:
            by = result.matched_by.document_title if result.matched_by else "?"
            logger.debug(
                f"✅ {requirement.title} fulfilled by {by} "
                f"({result.match_type.value}, {round(result.confidence * 100)}%)"
            )
            report.fulfilled.append(
                FulfilledRequirement(
                    requirement_id=requirement.id,
                    requirement_title=requirement.title,
                    standard_id=requirement.standard_id,
                    result=result,
                )
            )
        else:
            report.missing.append(requirement)

    logger.info(
        f"Checked {len(requirements)} requirements against {len(corpus)} documents: "
        f"{len(report.fulfilled)} fulfilled, {len(report.missing)} missing"
    )
    return report


def find_missing_documents(
    corpus: Sequence[OrgDocument],
    catalog: Sequence[StandardRequirement],
    standard: str | None = None,
    matcher: RelationshipMatcher | None = None,
) -> list[StandardRequirement]:
    """Requirements no corpus document satisfies, in catalog order."""
    return build_missing_report(corpus, catalog, standard, matcher).missing
