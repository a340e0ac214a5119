"""a11y_scout.audit: адаптер аудита страниц и движок axe-core."""
from a11y_scout.audit.auditor import PageAuditor, audit_failed_violation

__all__ = ["PageAuditor", "audit_failed_violation"]
