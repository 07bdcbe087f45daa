# File: site_audit/report/html_report.py
"""site_audit.report.html_report: Генерация HTML-сводки с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from site_audit.aggregator import ScanReport

#: Шаблоны, поставляемые вместе с пакетом.
DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def _percent(score: Any) -> str:
    return "–" if score is None else f"{score * 100:.0f}%"


def render_html(
    report: ScanReport,
    template_dir: Union[Path, str, None],
    output_path: Union[Path, str],
) -> Path:
    """Рендерит HTML-сводку из шаблона и сохраняет её по указанному пути.

    Args:
        report: объект ScanReport.
        template_dir: директория с шаблоном ``report.html.j2``;
            None — встроенные шаблоны пакета.
        output_path: путь к итоговому HTML-файлу.

    Returns:
        Path до сохранённого HTML-файла.
    """
    template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    env.filters["percent"] = _percent
    template = env.get_template("report.html.j2")

    context: dict[str, Any] = {
        "total": report.total,
        "averages": report.averages,
        "pages": report.pages,
        "failures": report.failures,
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
