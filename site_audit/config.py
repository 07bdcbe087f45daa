# === FILE: site_audit/config.py ===
"""
Модуль для загрузки и валидации конфигурации SiteAudit.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_CATEGORIES: List[str] = ["performance", "accessibility", "best-practices", "seo"]


class AuditConfig(BaseModel):
    """Конфигурация одного запуска аудита сайта."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    output_file: Path = Field(
        Path("lighthouse_results.json"), description="JSON-файл с результатами (он же точка возобновления)."
    )
    pause_time: float = Field(5.0, ge=0, description="Пауза между аудитами страниц (секунд).")
    audit_timeout: float = Field(120.0, gt=0, description="Таймаут аудита одной страницы (секунд).")
    probe_timeout: float = Field(10.0, gt=0, description="Таймаут HTTP-запросов к sitemap (секунд).")
    user_agent: str = Field("SiteAuditBot/1.0", min_length=1, description="Заголовок User-Agent.")
    retry_times: int = Field(2, ge=0, description="Повторы загрузки sitemap при 5xx/429.")
    lighthouse_path: str = Field("lighthouse", min_length=1, description="Исполняемый файл Lighthouse CLI.")
    chrome_flags: List[str] = Field(
        default_factory=lambda: ["--headless", "--no-sandbox", "--disable-setuid-sandbox"],
        description="Флаги запуска Chrome.",
    )
    categories: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORIES), description="Категории Lighthouse."
    )
    follow_all_sitemaps: bool = Field(
        False, description="Обходить все дочерние sitemap индекса, а не только первый."
    )
    max_sitemap_depth: int = Field(5, ge=1, description="Максимальная вложенность sitemap-индексов.")
    default_batch_size: int = Field(10, ge=1, description="Размер пакета по умолчанию (режим 2).")

    @field_validator("categories")
    def _check_categories(cls, v: List[str]) -> List[str]:
        unknown = [c for c in v if c not in DEFAULT_CATEGORIES]
        if unknown:
            raise ValueError(f"Неизвестные категории Lighthouse: {', '.join(unknown)}")
        return v


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> AuditConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект AuditConfig.

    Без явного пути используется configs/default.yaml, а если его нет —
    значения по умолчанию. Явно указанный, но отсутствующий файл даёт
    FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return AuditConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    try:
        return AuditConfig(**data)
    except ValidationError:
        raise
