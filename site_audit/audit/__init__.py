"""site_audit.audit: запуск аудита отдельной страницы."""

from site_audit.audit.runner import AuditRunner, LighthouseRunner, extract_scores

__all__ = ["AuditRunner", "LighthouseRunner", "extract_scores"]
