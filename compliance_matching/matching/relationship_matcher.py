"""
Relationship Matcher — decides whether a standard requirement is fulfilled
by anything in an organization's corpus.

Organizations often consolidate several requirements into one manual, or
satisfy one through a linked or parent document.  Beyond direct matches,
this matcher follows:

  - fulfilment links  (manual keyword coverage, same-type policy/procedure
                       titles, canBeFulfilledBy titles, catalog "fulfills")
  - hierarchy         (manual parents ×0.8, children ×0.9)
  - cross-references  (outgoing, then incoming ×0.7)

Strategies run in order and the first match wins.  Confidence is
discounted the further the relationship is from a direct match.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, Sequence

from compliance_matching.matching.document_matcher import (
    DocumentMatcher,
    clamp_confidence,
    keyword_fraction,
    title_match_confidence,
)
from compliance_matching.matching.normalizer import normalize_title
from compliance_matching.matching.rules_config import RelationshipConfig
from compliance_matching.models.enums import DocumentType, FulfillmentType, RelationshipType
from compliance_matching.models.schemas import (
    FulfillmentResult,
    MatchedBy,
    MatchResult,
    OrgDocument,
    StandardRequirement,
    ensure_unique_ids,
)

logger = logging.getLogger(__name__)


class SupportsMatchDocument(Protocol):
    def match_document(
        self, doc: OrgDocument, requirement: StandardRequirement
    ) -> MatchResult: ...


@dataclass
class CorpusView:
    """An organization's documents indexed for relationship traversal.

    Relationships are taken from both ends: a child is listed when the
    parent names it or when it names the parent, likewise for references.
    """

    documents: list[OrgDocument]
    catalog: list[StandardRequirement] = field(default_factory=list)
    by_id: dict[str, OrgDocument] = field(init=False)
    children: dict[str, list[str]] = field(init=False)
    referenced_by: dict[str, list[str]] = field(init=False)

    def __post_init__(self) -> None:
        ensure_unique_ids(self.documents)
        self.by_id = {d.id: d for d in self.documents}
        self.children = {d.id: list(d.child_ids) for d in self.documents}
        self.referenced_by = {d.id: list(d.referenced_by_ids) for d in self.documents}

        for doc in self.documents:
            if doc.parent_id in self.children and doc.id not in self.children[doc.parent_id]:
                self.children[doc.parent_id].append(doc.id)
            for target in doc.reference_ids:
                if target in self.referenced_by and doc.id not in self.referenced_by[target]:
                    self.referenced_by[target].append(doc.id)

    def resolve(self, doc_id: str | None) -> Optional[OrgDocument]:
        if doc_id is None:
            return None
        doc = self.by_id.get(doc_id)
        if doc is None:
            logger.debug(f"Linked document {doc_id} is not in the corpus — skipped")
        return doc


FulfillmentStrategy = Callable[[StandardRequirement, CorpusView], Optional[FulfillmentResult]]


def _matched(
    match_type: FulfillmentType,
    confidence: float,
    doc: OrgDocument,
    relationship: RelationshipType,
) -> FulfillmentResult:
    return FulfillmentResult(
        is_match=True,
        confidence=clamp_confidence(confidence),
        match_type=match_type,
        matched_by=MatchedBy(
            document_id=doc.id,
            document_title=doc.title,
            relationship_type=relationship,
        ),
    )


class RelationshipMatcher:
    """Requirement-vs-corpus matching built on top of a document matcher."""

    def __init__(
        self,
        document_matcher: SupportsMatchDocument | None = None,
        config: RelationshipConfig | None = None,
    ):
        self.document_matcher = document_matcher or DocumentMatcher()
        self.config = config or RelationshipConfig()
        self._strategies: list[FulfillmentStrategy] = [
            self.check_direct_match,
            self.check_fulfillment_relationships,
            self.check_hierarchical_relationships,
            self.check_cross_references,
        ]

    def check_requirement_fulfillment(
        self,
        requirement: StandardRequirement,
        corpus: Sequence[OrgDocument],
        catalog: Sequence[StandardRequirement] | None = None,
    ) -> FulfillmentResult:
        """First strategy that finds a satisfying document wins."""
        view = CorpusView(documents=list(corpus), catalog=list(catalog or []))
        for strategy in self._strategies:
            result = strategy(requirement, view)
            if result is not None and result.is_match:
                return result
        return FulfillmentResult(
            is_match=False, confidence=0.0, match_type=FulfillmentType.DIRECT
        )

    # ── Helpers ──────────────────────────────────────────

    def _match(self, doc: OrgDocument, requirement: StandardRequirement) -> MatchResult:
        result = self.document_matcher.match_document(doc, requirement)
        if not 0.0 <= result.confidence <= 1.0:
            raise ValueError(
                f"Document matcher returned confidence {result.confidence!r} "
                f"for '{doc.title}' vs '{requirement.title}' — must be within [0, 1]"
            )
        return result

    def titles_match(self, doc_title: str, standard_title: str) -> bool:
        """Relationship-aware title rule ('&' counts as a separator)."""
        return title_match_confidence(
            doc_title,
            standard_title,
            overlap_threshold=self.config.title_overlap_threshold,
            split_ampersand=True,
        ) > 0.0

    def document_can_fulfill_standard(
        self, doc: OrgDocument, requirement: StandardRequirement
    ) -> bool:
        """Manuals cover requirements by keywords; policies and procedures by title."""
        if doc.document_type == DocumentType.MANUAL:
            coverage = keyword_fraction(doc.title, requirement.keywords)
            return coverage > self.config.manual_keyword_threshold

        if (
            doc.document_type in (DocumentType.POLICY, DocumentType.PROCEDURE)
            and requirement.document_type == doc.document_type
        ):
            return self.titles_match(doc.title, requirement.title)

        return False

    # ── Strategies ───────────────────────────────────────

    def check_direct_match(
        self, requirement: StandardRequirement, view: CorpusView
    ) -> Optional[FulfillmentResult]:
        for doc in view.documents:
            result = self._match(doc, requirement)
            if result.is_match and result.confidence > self.config.direct_min_confidence:
                return _matched(
                    FulfillmentType.DIRECT, result.confidence, doc, RelationshipType.DIRECT
                )
        return None

    def check_fulfillment_relationships(
        self, requirement: StandardRequirement, view: CorpusView
    ) -> Optional[FulfillmentResult]:
        for doc in view.documents:
            if self.document_can_fulfill_standard(doc, requirement):
                return _matched(
                    FulfillmentType.FULFILLS,
                    self.config.fulfills_confidence,
                    doc,
                    RelationshipType.FULFILLS,
                )

        for title in requirement.can_be_fulfilled_by:
            for doc in view.documents:
                if self.titles_match(doc.title, title):
                    return _matched(
                        FulfillmentType.CAN_BE_FULFILLED_BY,
                        self.config.can_be_fulfilled_by_confidence,
                        doc,
                        RelationshipType.CAN_BE_FULFILLED_BY,
                    )

        # Catalog entries declaring that they fulfil this requirement
        target = normalize_title(requirement.title, split_ampersand=True)
        for other in view.catalog:
            if other.id == requirement.id:
                continue
            covers = {normalize_title(t, split_ampersand=True) for t in other.fulfills}
            if target not in covers:
                continue
            for doc in view.documents:
                result = self._match(doc, other)
                if result.is_match and result.confidence > self.config.direct_min_confidence:
                    return _matched(
                        FulfillmentType.FULFILLS,
                        self.config.catalog_fulfills_confidence,
                        doc,
                        RelationshipType.FULFILLS,
                    )
        return None

    def check_hierarchical_relationships(
        self, requirement: StandardRequirement, view: CorpusView
    ) -> Optional[FulfillmentResult]:
        for doc in view.documents:
            parent = view.resolve(doc.parent_id)
            if parent is None or parent.document_type != DocumentType.MANUAL:
                continue
            result = self._match(parent, requirement)
            if result.is_match:
                return _matched(
                    FulfillmentType.PARENT,
                    result.confidence * self.config.parent_factor,
                    parent,
                    RelationshipType.PARENT,
                )

        for doc in view.documents:
            for child_id in view.children.get(doc.id, []):
                child = view.resolve(child_id)
                if child is None:
                    continue
                result = self._match(child, requirement)
                if result.is_match:
                    return _matched(
                        FulfillmentType.PARENT,
                        result.confidence * self.config.child_factor,
                        child,
                        RelationshipType.CHILD,
                    )
        return None

    def check_cross_references(
        self, requirement: StandardRequirement, view: CorpusView
    ) -> Optional[FulfillmentResult]:
        for doc in view.documents:
            for ref_id in doc.reference_ids:
                referenced = view.resolve(ref_id)
                if referenced is None:
                    continue
                result = self._match(referenced, requirement)
                if result.is_match:
                    return _matched(
                        FulfillmentType.REFERENCE,
                        result.confidence * self.config.reference_factor,
                        referenced,
                        RelationshipType.REFERENCES,
                    )

        for doc in view.documents:
            for ref_id in view.referenced_by.get(doc.id, []):
                referencing = view.resolve(ref_id)
                if referencing is None:
                    continue
                result = self._match(referencing, requirement)
                if result.is_match:
                    return _matched(
                        FulfillmentType.REFERENCE,
                        result.confidence * self.config.reference_factor,
                        referencing,
                        RelationshipType.REFERENCED_BY,
                    )
        return None
