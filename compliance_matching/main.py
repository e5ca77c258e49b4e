"""
Compliance Document Matching — Main Entry Point

Analyse an exported document corpus (CLI):
    python -m compliance_matching.main corpus.json [--standard ISO_27001_2022]

Run as an API server:
    python -m compliance_matching.main --serve
    # or: uvicorn compliance_matching.api:app --reload --port 8000

Or import and run programmatically:
    from compliance_matching.main import run
    result = run("path/to/corpus.json")

The corpus file is either a JSON list of documents or an object
{"organization_id": "...", "documents": [...]}.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

from compliance_matching.config import get_settings
from compliance_matching.models.schemas import OrgDocument
from compliance_matching.services.compliance_service import ComplianceService
from compliance_matching.utils.logger import setup_logging


def load_corpus(path: str | Path) -> tuple[str, list[OrgDocument]]:
    """Read a corpus export and validate every document."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Corpus file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, list):
        organization_id, raw_docs = path.stem, data
    elif isinstance(data, dict):
        organization_id = data.get("organization_id", path.stem)
        raw_docs = data.get("documents", [])
    else:
        raise ValueError(f"Unsupported corpus format in {path}")
    return organization_id, [OrgDocument(**d) for d in raw_docs]


def run(corpus_path: str, standard: str | None = None) -> dict[str, Any]:
    """Run both analyses over a corpus file and return them as plain data."""
    setup_logging(get_settings().log_level)
    logger = logging.getLogger(__name__)

    organization_id, corpus = load_corpus(corpus_path)
    service = ComplianceService()

    report = service.missing_documents(organization_id, corpus, standard)
    duplicates = service.detect_duplicates(organization_id, corpus)

    logger.info("=" * 60)
    logger.info(f"  ORGANIZATION: {organization_id} ({len(corpus)} documents)")
    logger.info(f"  Standard:     {standard or 'ALL'}")
    logger.info("=" * 60)
    logger.info(
        f"  Requirements: {report.total_requirements} checked, "
        f"{len(report.fulfilled)} fulfilled, {len(report.missing)} missing"
    )
    for req in report.missing:
        logger.info(f"    ✗ [{req.standard_id}] {req.title} ({req.category.value})")
    logger.info(
        f"  Duplicates:   {len(duplicates.duplicate_groups)} groups, "
        f"{duplicates.duplicates_found} redundant documents"
    )
    for group in duplicates.duplicate_groups:
        latest = next(d.title for d in group.documents if d.is_latest_version)
        logger.info(
            f"    ≡ {group.base_document}: {len(group.documents)} docs, "
            f"{group.recommended_action.value}, latest = {latest}"
        )

    return {
        "organization_id": organization_id,
        "missing": report.model_dump(mode="json"),
        "duplicates": duplicates.model_dump(mode="json"),
    }


def serve(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the FastAPI server."""
    import uvicorn

    setup_logging(get_settings().log_level)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("compliance_matching.api:app", host=host, port=port, reload=True)


def main(argv: list[str] | None = None) -> None:
    args = list(sys.argv[1:] if argv is None else argv)
    if "--serve" in args:
        serve()
        return

    standard = None
    if "--standard" in args:
        idx = args.index("--standard")
        if idx + 1 >= len(args):
            raise SystemExit("--standard needs a value, e.g. ISO_27001_2022")
        standard = args[idx + 1]
        del args[idx:idx + 2]
    if not args:
        raise SystemExit("usage: python -m compliance_matching <corpus.json> [--standard STD] | --serve")
    run(args[0], standard)


if __name__ == "__main__":
    main()
