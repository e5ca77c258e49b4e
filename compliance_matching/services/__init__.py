"""Services — AuditService, ComplianceService."""

from compliance_matching.services.audit_service import AuditService
from compliance_matching.services.compliance_service import ComplianceService

__all__ = ["AuditService", "ComplianceService"]
