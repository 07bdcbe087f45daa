# File: site_audit/aggregator.py
"""site_audit.aggregator: Сводный отчёт по файлу результатов аудита."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, TypedDict

from site_audit.store import PageError, PageScores, ScanResult

CATEGORY_KEYS: Tuple[str, ...] = ("performance", "accessibility", "bestPractices", "seo")


class PageRow(TypedDict):
    """Строка отчёта для успешно проверенной страницы."""

    url: str
    performance: Optional[float]
    accessibility: Optional[float]
    bestPractices: Optional[float]
    seo: Optional[float]


class FailedPage(TypedDict):
    """Страница, аудит которой не удался."""

    url: str
    error: str


@dataclass(slots=True)
class ScanReport:
    """Сводка: страницы, ошибки и средние оценки по категориям."""

    pages: List[PageRow] = field(default_factory=list)
    failures: List[FailedPage] = field(default_factory=list)
    averages: Dict[str, Optional[float]] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.pages) + len(self.failures)

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        output = asdict(self)
        output["total"] = self.total
        return json.dumps(output, ensure_ascii=False, indent=2 if pretty else None)


def _average(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return round(sum(present) / len(present), 4)


def aggregate_results(results: Iterable[ScanResult]) -> ScanReport:
    """Собирает ScanReport из записей хранилища, сохраняя их порядок."""
    report = ScanReport()
    for result in results:
        if isinstance(result, PageError):
            report.failures.append({"url": result.url, "error": result.error})
        elif isinstance(result, PageScores):
            report.pages.append(result.model_dump(by_alias=True))  # type: ignore[arg-type]
    report.averages = {
        key: _average(page[key] for page in report.pages) for key in CATEGORY_KEYS  # type: ignore[literal-required]
    }
    return report
