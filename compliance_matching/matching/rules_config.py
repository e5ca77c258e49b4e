"""
Rules Config Store — thresholds, confidences and discount factors for
the matching engine.

Every tunable constant lives in one of the config models below.  Overrides
are read from the JSON file named by ``MATCHING_RULES_PATH``; anything not
overridden keeps its default.  Falls back to defaults when the file is
missing or unreadable.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, model_validator

from compliance_matching.config import get_settings
from compliance_matching.models.enums import RecommendedAction

logger = logging.getLogger(__name__)


# ── Config models ────────────────────────────────────────

class MatchingConfig(BaseModel):
    """Single document vs. single requirement."""
    partial_clause_match: bool = False  # "6.2" matching "6.2.1"
    partial_clause_factor: float = Field(default=0.8, ge=0.0, le=1.0)
    partial_clause_min_confidence: float = Field(default=0.3, ge=0.0, le=1.0)

    title_contains_confidence: float = Field(default=0.85, ge=0.0, le=1.0)
    token_overlap_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    abbreviation_confidence: float = Field(default=0.75, ge=0.0, le=1.0)

    keyword_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    keyword_min_confidence: float = Field(default=0.3, ge=0.0, le=1.0)
    keyword_max_confidence: float = Field(default=0.6, ge=0.0, le=1.0)

    known_abbreviations: dict[str, list[str]] = {
        "statement of applicability": ["soa", "statement applicability", "applicability statement"],
        "quality objectives": ["qo", "qual objectives", "quality obj"],
        "quality policy": ["qp", "qual policy"],
        "business continuity plan": ["bcp", "bus continuity", "continuity plan"],
        "risk assessment": ["ra", "risk assess"],
        "risk register": ["rr", "risk reg"],
        "training records": ["tr", "training rec"],
        "internal audit": ["ia", "int audit"],
        "management review": ["mr", "mgmt review", "management rev"],
        "information security policy": ["isp", "infosec policy", "info sec policy", "infosec"],
        "information security management system": ["isms"],
        "quality management system": ["qms"],
        "management review minutes": ["mr minutes", "mgmt review minutes", "management minutes"],
        "internal audit plan": ["ia plan", "audit plan", "ia schedule", "audit schedule"],
        "nonconformity": ["nc", "non conformity"],
        "corrective action": ["ca", "corrective actions"],
    }

    @model_validator(mode="after")
    def _keyword_bounds(self) -> "MatchingConfig":
        if self.keyword_min_confidence > self.keyword_max_confidence:
            raise ValueError("keyword_min_confidence must not exceed keyword_max_confidence")
        return self


class RelationshipConfig(BaseModel):
    """Requirement vs. whole corpus, including document relationships."""
    direct_min_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    manual_keyword_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    fulfills_confidence: float = Field(default=0.9, ge=0.0, le=1.0)
    can_be_fulfilled_by_confidence: float = Field(default=0.85, ge=0.0, le=1.0)
    catalog_fulfills_confidence: float = Field(default=0.85, ge=0.0, le=1.0)
    parent_factor: float = Field(default=0.8, ge=0.0, le=1.0)
    child_factor: float = Field(default=0.9, ge=0.0, le=1.0)
    reference_factor: float = Field(default=0.7, ge=0.0, le=1.0)
    title_overlap_threshold: float = Field(default=0.5, ge=0.0, le=1.0)


class DuplicateConfig(BaseModel):
    """Duplicate clustering and remediation policy."""
    similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    abbreviation_similarity: float = Field(default=0.9, ge=0.0, le=1.0)
    mixed_owner_action: RecommendedAction = RecommendedAction.MANUAL_REVIEW
    ambiguous_version_action: RecommendedAction = RecommendedAction.MERGE_CONTENT
    partial_version_action: RecommendedAction = RecommendedAction.MERGE_CONTENT
    # "Procedure 1" and "Procedure 2" are separate documents, not revisions
    numbered_titles_distinct: bool = True
    known_abbreviations: dict[str, list[str]] = Field(
        default_factory=lambda: MatchingConfig().known_abbreviations
    )


_MODELS: dict[str, type[BaseModel]] = {
    "matching": MatchingConfig,
    "relationship": RelationshipConfig,
    "duplicate": DuplicateConfig,
}


# ── Store class ──────────────────────────────────────────

class MatchingConfigStore:
    """
    Loads rule configs from the overrides file. Falls back to defaults.
    Cached after first load for the lifetime of the store.
    """

    def __init__(self, path: str | Path | None = None):
        self.settings = get_settings()
        raw = path if path is not None else self.settings.matching_rules_path
        self._path = Path(raw) if raw else None
        self._cache: dict[str, BaseModel] = {}

    def _read_overrides(self) -> dict[str, Any]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Matching rules file unreadable, using defaults: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Matching rules file {self._path} is not a JSON object, using defaults")
            return {}
        return data

    def _load_config(self, rule_type: str) -> BaseModel:
        """Load from the overrides file or return defaults."""
        if rule_type in self._cache:
            return self._cache[rule_type]

        model_cls = _MODELS[rule_type]
        overrides = self._read_overrides().get(rule_type)
        config = model_cls()
        if overrides:
            try:
                config = model_cls(**overrides)
                logger.info(f"Loaded {rule_type} rules from {self._path}")
            except ValidationError as e:
                logger.warning(f"Invalid {rule_type} rules in {self._path}, using defaults: {e}")

        self._cache[rule_type] = config
        return config

    def get_matching_config(self) -> MatchingConfig:
        return self._load_config("matching")  # type: ignore[return-value]

    def get_relationship_config(self) -> RelationshipConfig:
        return self._load_config("relationship")  # type: ignore[return-value]

    def get_duplicate_config(self) -> DuplicateConfig:
        return self._load_config("duplicate")  # type: ignore[return-value]

    def update_config(self, rule_type: str, config_dict: dict[str, Any]) -> bool:
        """Admin: validate and save a rule config to the overrides file."""
        if rule_type not in _MODELS:
            raise ValueError(f"Unknown rule type: {rule_type}")
        if self._path is None:
            logger.error("Cannot update config — no matching rules path configured")
            return False

        # Raises ValidationError (a ValueError) before anything is written
        validated = _MODELS[rule_type](**config_dict)

        data = self._read_overrides()
        data[rule_type] = validated.model_dump(mode="json")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

        # Invalidate cache
        self._cache.pop(rule_type, None)
        logger.info(f"Updated {rule_type} rules in {self._path}")
        return True
