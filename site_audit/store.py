# File: site_audit/store.py
"""site_audit.store: Хранилище результатов аудита с возобновлением.

Файл результатов — один JSON-список, переписываемый целиком после каждой
обработанной страницы. Повторный запуск загружает его и пропускает URL,
для которых запись уже есть.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from site_audit.logger import logger

__all__ = [
    "PageScores",
    "PageError",
    "ScanResult",
    "ResultStore",
    "load_results",
    "persist_results",
    "contains",
]

Score = Optional[float]


class PageScores(BaseModel):
    """Успешный аудит: оценки четырёх категорий в диапазоне 0–1."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    url: str
    performance: Score = Field(None, ge=0, le=1)
    accessibility: Score = Field(None, ge=0, le=1)
    best_practices: Score = Field(None, ge=0, le=1, alias="bestPractices")
    seo: Score = Field(None, ge=0, le=1)

    @property
    def is_success(self) -> bool:
        return True


class PageError(BaseModel):
    """Неудачный аудит: сообщение об ошибке."""
    model_config = ConfigDict(frozen=True)

    url: str
    error: str

    @property
    def is_success(self) -> bool:
        return False


ScanResult = Union[PageScores, PageError]


def _result_from_dict(entry: Dict[str, Any]) -> ScanResult:
    if "error" in entry:
        return PageError.model_validate(entry)
    return PageScores.model_validate(entry)


def _result_to_dict(result: Union[ScanResult, Any]) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(by_alias=True)
    return result


def _read_entries(p: Path) -> List[Any]:
    if not p.exists():
        logger.debug("No results file at %s, starting fresh", p)
        return []
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Results file %s is unreadable (%s), starting fresh", p, exc)
        return []
    if not isinstance(data, list):
        logger.warning("Results file %s does not hold a JSON list, starting fresh", p)
        return []
    return data


def _validate_entry(entry: Any, index: int, p: Path) -> Optional[ScanResult]:
    if not isinstance(entry, dict):
        logger.warning("Entry #%d in %s is not an object, leaving it as is", index, p)
        return None
    try:
        return _result_from_dict(entry)
    except ValidationError as exc:
        logger.warning("Entry #%d in %s is invalid (%s), leaving it as is", index, p, exc.errors()[0]["msg"])
        return None


def load_results(path: Union[str, Path]) -> List[ScanResult]:
    """Читает файл результатов; отсутствующий или повреждённый файл даёт пустой список."""
    p = Path(path)
    results: List[ScanResult] = []
    for index, entry in enumerate(_read_entries(p)):
        result = _validate_entry(entry, index, p)
        if result is not None:
            results.append(result)
    return results


def persist_results(path: Union[str, Path], results: Iterable[Union[ScanResult, Any]]) -> Path:
    """
    Полностью перезаписывает файл результатов (JSON с отступом 2).

    Элементы, которые не являются моделями (невалидные записи из прошлых
    запусков), пишутся как есть.
    """
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    payload = [_result_to_dict(r) for r in results]
    with output.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    return output


def contains(results: Iterable[ScanResult], url: str) -> bool:
    """Есть ли запись для url (точное совпадение строки)."""
    return any(r.url == url for r in results)


class ResultStore:
    """
    Результаты одного запуска, связанные с файлом на диске.

    Записи, не прошедшие валидацию, остаются в файле на своих местах и
    переживают каждое сохранение; их URL (если он строка) считается уже
    обработанным.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self.results: List[ScanResult] = []
        self._entries: List[Union[ScanResult, Any]] = []
        self._urls: set[str] = set()

    def load(self) -> ResultStore:
        self.results, self._entries, self._urls = [], [], set()
        for index, entry in enumerate(_read_entries(self.path)):
            result = _validate_entry(entry, index, self.path)
            if result is None:
                self._entries.append(entry)
                if isinstance(entry, dict) and isinstance(entry.get("url"), str):
                    self._urls.add(entry["url"])
                continue
            self.append(result)
        if self._entries:
            logger.info("Loaded %d existing results from %s", len(self._entries), self.path)
        return self

    def append(self, result: ScanResult) -> None:
        self.results.append(result)
        self._entries.append(result)
        self._urls.add(result.url)

    def persist(self) -> Path:
        return persist_results(self.path, self._entries)

    def __contains__(self, url: object) -> bool:
        return url in self._urls

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[ScanResult]:
        return iter(self.results)
