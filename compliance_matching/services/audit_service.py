"""
Audit Service — records matching runs (missing-document checks, duplicate
scans) for later inspection.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


class AuditService:
    """
    Records who ran which analysis for which organization, with result counts.
    Entries are held in memory; persisting them belongs to the storage layer.
    """

    def __init__(self):
        self._entries: list[dict[str, Any]] = []

    def record(
        self,
        organization_id: str,
        action: str,
        details: dict[str, Any] | None = None,
        user_id: str = "",
    ) -> dict[str, Any]:
        """Record an audit entry and return it."""
        entry = {
            "organization_id": organization_id,
            "action": action,
            "details": dict(details or {}),
            "user_id": user_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        self._entries.append(entry)
        logger.debug(f"[AUDIT] {organization_id} → {action}: {entry['details']}")
        return entry

    def get_trail(self, organization_id: str) -> list[dict[str, Any]]:
        """Return all audit entries for an organization."""
        return [e for e in self._entries if e["organization_id"] == organization_id]

    def get_all(self) -> list[dict[str, Any]]:
        """Return all audit entries (for debugging)."""
        return list(self._entries)
