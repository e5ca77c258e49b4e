"""
Duplicate Detector — clusters an organization's documents into groups
that are probably versions or renderings of the same document, marks the
latest version in each group and recommends what to do with the rest.

Deterministic: the same corpus always yields equal results.
"""

from __future__ import annotations

import logging
import re
from itertools import combinations
from typing import Optional, Sequence

from compliance_matching.matching.document_matcher import clamp_confidence
from compliance_matching.matching.normalizer import (
    GLUED_VERSION_TOKEN,
    is_abbreviation_of,
    normalize_title,
    strip_extension,
)
from compliance_matching.matching.rules_config import DuplicateConfig
from compliance_matching.matching.similarity import similarity
from compliance_matching.models.enums import RecommendedAction
from compliance_matching.models.schemas import (
    DuplicateDetectionResult,
    DuplicateGroup,
    DuplicateMember,
    OrgDocument,
    VersionInfo,
    ensure_unique_ids,
)
from compliance_matching.utils.hashing import fingerprint_ids

logger = logging.getLogger(__name__)

# Applied to an already-normalized title (separators are spaces by then)
_VERSIONING_REMNANTS = [
    re.compile(r"\b(?:version|rev|revision)\s*\d+(?:\s\d+)*\b"),
    re.compile(r"\b\d{4}[\s/]\d{1,2}[\s/]\d{1,2}\b"),   # 2026-07-15
    re.compile(r"\b\d{1,2}[\s/]\d{1,2}[\s/]\d{2,4}\b"),  # 15/07/2026
    re.compile(r"\b(?:19|20)\d{2}\b"),                  # bare years
    re.compile(r"\bv\s*\d+\b"),                         # "v 2"
    re.compile(r"\b(?:draft|final|approved|pending)\b"),
]
_WHITESPACE = re.compile(r"\s+")
# Numbers left after version/date stripping identify the document ("ISO 9001", "Procedure 2")
_NUMBER = re.compile(r"\b\d+\b")

_VERSION_PATTERNS = [
    re.compile(r"(?<![a-z0-9])v(\d+(?:\.\d+)?)(?![a-z0-9])", re.IGNORECASE),
    GLUED_VERSION_TOKEN,
    re.compile(r"(?<![a-z0-9])(?:version|revision|rev)[\s_\-.]*(\d+(?:\.\d+)?)", re.IGNORECASE),
]
_DATE_PATTERNS = [
    re.compile(
        r"(?<!\d)(\d{1,2}[-/_. ](?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)"
        r"[-/_. ]\d{2,4})(?!\d)",
        re.IGNORECASE,
    ),
    re.compile(r"(?<!\d)(\d{4}[-/]\d{1,2}[-/]\d{1,2})(?!\d)"),
    re.compile(r"(?<!\d)(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})(?!\d)"),
]


def base_name(title: str) -> str:
    """Normalized title with every version/date/status remnant removed."""
    normalized = normalize_title(strip_extension(title))
    result = normalized
    for pattern in _VERSIONING_REMNANTS:
        result = pattern.sub(" ", result)
    result = _WHITESPACE.sub(" ", result).strip()
    # A title that is nothing but a version/date keeps its normalized form
    return result or normalized


def extract_version_info(title: str) -> VersionInfo:
    info = VersionInfo()
    for pattern in _VERSION_PATTERNS:
        match = pattern.search(title or "")
        if match:
            info.version_number = match.group(1)
            break
    for pattern in _DATE_PATTERNS:
        match = pattern.search(title or "")
        if match:
            info.version_date = match.group(1)
            break
    return info


def version_key(info: VersionInfo) -> Optional[tuple[int, ...]]:
    """Comparable form of a version number: "3.1" → (3, 1), "2.0" → (2,)."""
    if not info.version_number:
        return None
    parts = [int(p) for p in info.version_number.split(".")]
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


class DuplicateDetector:
    """Finds probable duplicate documents within one organization."""

    def __init__(self, config: DuplicateConfig | None = None):
        self.config = config or DuplicateConfig()

    def detect_duplicates(
        self,
        corpus: Sequence[OrgDocument],
        organization_id: str | None = None,
    ) -> DuplicateDetectionResult:
        """Group probable duplicates. ValueError when a document id repeats."""
        ensure_unique_ids(corpus)
        documents = sorted(
            corpus,
            key=lambda d: (normalize_title(d.title), -d.current_version, d.id),
        )
        bases = {d.id: base_name(d.title) for d in documents}

        groups: list[DuplicateGroup] = []
        assigned: set[str] = set()

        for i, seed in enumerate(documents):
            if seed.id in assigned:
                continue
            members = [seed]
            assigned.add(seed.id)

            for candidate in documents[i + 1:]:
                if candidate.id in assigned:
                    continue
                score = self.pair_similarity(bases[seed.id], bases[candidate.id])
                if score > self.config.similarity_threshold:
                    members.append(candidate)
                    assigned.add(candidate.id)

            if len(members) > 1:
                groups.append(self._build_group(bases[seed.id], members, bases))

        groups.sort(
            key=lambda g: (-len(g.documents), -g.confidence, g.base_document, g.group_id)
        )
        result = DuplicateDetectionResult(
            organization_id=organization_id,
            duplicate_groups=groups,
            total_documents=len(documents),
            duplicates_found=sum(len(g.documents) - 1 for g in groups),
        )
        logger.info(
            f"Duplicate scan of {result.total_documents} documents: "
            f"{len(groups)} groups, {result.duplicates_found} duplicates"
        )
        return result

    def pair_similarity(self, base_a: str, base_b: str) -> float:
        """Similarity of two base names; abbreviations count as near-equal.

        Titles carrying different numbers ("ISO 9001" vs "ISO 27001") never match.
        """
        if base_a == base_b:
            return 1.0
        if self.config.numbered_titles_distinct and (
            set(_NUMBER.findall(base_a)) != set(_NUMBER.findall(base_b))
        ):
            return 0.0
        known = self.config.known_abbreviations
        if is_abbreviation_of(base_a, base_b, known) or is_abbreviation_of(base_b, base_a, known):
            return self.config.abbreviation_similarity
        return similarity(base_a, base_b)

    # ── Group assembly ───────────────────────────────────

    def _build_group(
        self,
        base_document: str,
        docs: list[OrgDocument],
        bases: dict[str, str],
    ) -> DuplicateGroup:
        members = [
            DuplicateMember(
                id=d.id,
                title=d.title,
                current_version=d.current_version,
                status=d.status,
                owner=d.owner,
                created_at=d.created_at,
                updated_at=d.updated_at,
                version_info=extract_version_info(d.title),
            )
            for d in docs
        ]
        self.mark_latest_version(members)

        scores = [
            self.pair_similarity(bases[a.id], bases[b.id])
            for a, b in combinations(docs, 2)
        ]
        confidence = clamp_confidence(sum(scores) / len(scores))

        return DuplicateGroup(
            group_id=fingerprint_ids(d.id for d in docs),
            base_document=base_document,
            documents=members,
            recommended_action=self.recommended_action(members),
            confidence=confidence,
        )

    @staticmethod
    def mark_latest_version(members: list[DuplicateMember]) -> None:
        """Highest explicit version wins, then most recent update."""
        def rank(m: DuplicateMember):
            key = version_key(m.version_info)
            return (key is not None, key or (), m.updated_at, m.current_version, m.id)

        latest = max(members, key=rank)
        for m in members:
            m.is_latest_version = m.id == latest.id

    def recommended_action(self, members: list[DuplicateMember]) -> RecommendedAction:
        owners = {m.owner.id for m in members}
        if len(owners) > 1:
            return self.config.mixed_owner_action

        keys = [version_key(m.version_info) for m in members]
        explicit = [k for k in keys if k is not None]
        if not explicit:
            return self.config.ambiguous_version_action
        if explicit.count(max(explicit)) > 1:
            return self.config.ambiguous_version_action
        if len(explicit) < len(members):
            return self.config.partial_version_action
        if len(set(explicit)) < len(explicit):
            return self.config.ambiguous_version_action
        return RecommendedAction.KEEP_LATEST
