"""
Catalog Loader — reads the standard-required documents an organization is
measured against.

The bundled seed covers ISO 9001:2015 and ISO 27001:2022.  Point
``CATALOG_PATH`` at another JSON file of the same shape to use a
different catalog.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any

from compliance_matching.config import get_settings
from compliance_matching.models.enums import DocumentType
from compliance_matching.models.schemas import StandardRequirement

logger = logging.getLogger(__name__)

# Default path to seed data (relative to this file)
_SEED_FILE = Path(__file__).parent / "standard_documents.json"


def _load_json(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_catalog(
    path: str | Path | None = None,
    standard: str | None = None,
) -> list[StandardRequirement]:
    """Load and validate the catalog, optionally restricted to one standard."""
    if path is None:
        path = get_settings().catalog_path or _SEED_FILE
    entries = _load_json(Path(path))
    if not isinstance(entries, list):
        raise ValueError(f"Catalog {path} must be a JSON list of requirements")

    per_standard: Counter[str] = Counter()
    catalog: list[StandardRequirement] = []
    for entry in entries:
        std = entry.get("standard_id", "")
        per_standard[std] += 1
        data = {
            "id": f"{std}-{per_standard[std]:02d}",
            "document_type": DocumentType.DOCUMENT,
            **{k: v for k, v in entry.items() if v is not None or k == "clause_ref"},
        }
        catalog.append(StandardRequirement(**data))

    if standard is not None:
        catalog = [r for r in catalog if r.standard_id == standard]

    logger.debug(f"Loaded {len(catalog)} catalog requirements from {path}")
    return catalog


def catalog_summary(catalog: list[StandardRequirement]) -> dict[str, dict[str, int]]:
    """Required / Optional counts per standard."""
    summary: dict[str, dict[str, int]] = {}
    for req in catalog:
        counts = summary.setdefault(req.standard_id, {"Required": 0, "Optional": 0})
        counts[req.category.value] += 1
    return summary
