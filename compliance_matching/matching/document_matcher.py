"""
Document Matcher — decides whether one organization document satisfies
one standard-required document.

Strategies run in strict priority order and the first positive result
wins; results are never blended across strategies:

  1. clause        – shared (standard, clause) association, authoritative
  2. title         – normalized equality / containment / word overlap
  3. abbreviation  – "SOA-15-Jul-2026-V2" vs "Statement of Applicability"
  4. keyword       – share of requirement keywords found in the title
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from compliance_matching.matching.normalizer import (
    abbreviation_candidates,
    contains_phrase,
    normalize_title,
)
from compliance_matching.matching.rules_config import MatchingConfig
from compliance_matching.matching.similarity import token_overlap
from compliance_matching.models.enums import MatchType
from compliance_matching.models.schemas import MatchResult, OrgDocument, StandardRequirement

logger = logging.getLogger(__name__)

MatchStrategy = Callable[[OrgDocument, StandardRequirement], Optional[MatchResult]]


def clamp_confidence(value: float) -> float:
    return max(0.0, min(1.0, value))


def title_match_confidence(
    title_a: str,
    title_b: str,
    contains_confidence: float = 0.85,
    overlap_threshold: float = 0.5,
    split_ampersand: bool = False,
) -> float:
    """Title similarity under the equality → containment → word-overlap rule.

    Returns 0.0 when none of the three sub-rules fires.
    """
    norm_a = normalize_title(title_a, split_ampersand=split_ampersand)
    norm_b = normalize_title(title_b, split_ampersand=split_ampersand)
    if not norm_a or not norm_b:
        return 0.0

    if norm_a == norm_b:
        return 1.0
    if norm_a in norm_b or norm_b in norm_a:
        return contains_confidence

    overlap = token_overlap(norm_a, norm_b)
    if overlap > overlap_threshold:
        return overlap
    return 0.0


def keyword_fraction(title: str, keywords: Iterable[str]) -> float:
    """Share of ``keywords`` occurring in the normalized title."""
    normalized = [normalize_title(k) for k in keywords]
    normalized = [k for k in normalized if k]
    if not normalized:
        return 0.0
    norm_title = normalize_title(title)
    hits = sum(1 for k in normalized if k in norm_title)
    return hits / len(normalized)


def _clause_covers(required: str, held: str) -> bool:
    # "6.2" covers "6.2.1" and vice versa, "6.1" never covers "6.10"
    return required.startswith(held + ".") or held.startswith(required + ".")


class DocumentMatcher:
    """Matches a single document against a single standard requirement."""

    def __init__(self, config: MatchingConfig | None = None):
        self.config = config or MatchingConfig()
        self._strategies: list[MatchStrategy] = [
            self.check_clause_match,
            self.check_title_match,
            self.check_abbreviation_match,
            self.check_keyword_match,
        ]

    def match_document(
        self, doc: OrgDocument, requirement: StandardRequirement
    ) -> MatchResult:
        """Run the strategy chain; a negative result when nothing matches."""
        for strategy in self._strategies:
            result = strategy(doc, requirement)
            if result is not None and result.is_match:
                logger.debug(
                    f"'{doc.title}' ↔ '{requirement.title}': "
                    f"{result.match_type.value} ({result.confidence:.2f})"
                )
                return result
        return MatchResult(is_match=False, confidence=0.0, match_type=MatchType.NONE)

    # ── Strategies ───────────────────────────────────────

    def check_clause_match(
        self, doc: OrgDocument, requirement: StandardRequirement
    ) -> Optional[MatchResult]:
        """Clause associations already linking the document to the requirement."""
        required = requirement.required_clause_numbers
        held = {
            a.clause_number
            for a in doc.clause_associations
            if a.standard_id == requirement.standard_id
        }
        if not required or not held:
            return None

        if any(clause in held for clause in required):
            return MatchResult(is_match=True, confidence=1.0, match_type=MatchType.CLAUSE)

        if not self.config.partial_clause_match:
            return None

        covered = [c for c in required if any(_clause_covers(c, h) for h in held)]
        if not covered:
            return None
        confidence = clamp_confidence(
            len(covered) / len(required) * self.config.partial_clause_factor
        )
        return MatchResult(
            is_match=confidence > self.config.partial_clause_min_confidence,
            confidence=confidence,
            match_type=MatchType.CLAUSE,
        )

    def check_title_match(
        self, doc: OrgDocument, requirement: StandardRequirement
    ) -> Optional[MatchResult]:
        confidence = title_match_confidence(
            doc.title,
            requirement.title,
            contains_confidence=self.config.title_contains_confidence,
            overlap_threshold=self.config.token_overlap_threshold,
        )
        if confidence <= 0.0:
            return None
        return MatchResult(
            is_match=True,
            confidence=clamp_confidence(confidence),
            match_type=MatchType.TITLE,
        )

    def check_abbreviation_match(
        self, doc: OrgDocument, requirement: StandardRequirement
    ) -> Optional[MatchResult]:
        """Abbreviated filename vs. full requirement title, in either direction."""
        known = self.config.known_abbreviations
        norm_doc = normalize_title(doc.title)
        norm_req = normalize_title(requirement.title)

        hit = any(
            contains_phrase(norm_doc, cand)
            for cand in abbreviation_candidates(requirement.title, known)
        ) or any(
            contains_phrase(norm_req, cand)
            for cand in abbreviation_candidates(doc.title, known)
        )
        if not hit:
            return None
        return MatchResult(
            is_match=True,
            confidence=clamp_confidence(self.config.abbreviation_confidence),
            match_type=MatchType.TITLE,
        )

    def check_keyword_match(
        self, doc: OrgDocument, requirement: StandardRequirement
    ) -> Optional[MatchResult]:
        fraction = keyword_fraction(doc.title, requirement.keywords)
        if fraction <= self.config.keyword_threshold:
            return None

        low = self.config.keyword_min_confidence
        high = self.config.keyword_max_confidence
        return MatchResult(
            is_match=True,
            confidence=clamp_confidence(low + fraction * (high - low)),
            match_type=MatchType.KEYWORD,
        )
