from app.audit.base import PostProcessor, Processor, can_run_audit
from app.audit.models import AuditDetails, AuditResult, AuditSummary, ResultBag
from app.audit.runner import AuditRunner

__all__ = [
    "AuditDetails",
    "AuditResult",
    "AuditRunner",
    "AuditSummary",
    "PostProcessor",
    "Processor",
    "ResultBag",
    "can_run_audit",
]
