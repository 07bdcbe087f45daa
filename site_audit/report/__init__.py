# File: site_audit/report/__init__.py
"""site_audit.report: Генерация сводок (JSON и HTML) по файлу результатов."""

from site_audit.report.html_report import render_html
from site_audit.report.json_report import render_json

__all__ = ["render_json", "render_html"]
