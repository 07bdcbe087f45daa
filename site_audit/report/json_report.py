# site_audit/report/json_report.py

"""
Генерация JSON-сводки для проекта SiteAudit.

Сериализация объекта ScanReport в файл.
"""
import json
from pathlib import Path

from site_audit.aggregator import ScanReport


def render_json(report: ScanReport, output_path: Path | str) -> Path:
    """
    Сохраняет сводку report в формате JSON по указанному пути.

    :param report: объект ScanReport
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from site_audit.report.json_report import render_json
    report_path = render_json(report, 'reports/summary.json')
    print(f"JSON summary saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = {
        'total': report.total,
        'averages': report.averages,
        'pages': report.pages,
        'failures': report.failures,
    }

    with output.open('w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return output
