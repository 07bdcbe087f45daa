# === FILE: site_audit/interactive_cli.py ===
"""
Источники ввода для сессии аудита: интерактивный (click.prompt) и заранее
заданный (для флагов CLI и тестов). Сессия получает провайдер явно и не
держит глобального состояния ввода.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional, Protocol

import click

from site_audit.logger import logger

__all__ = [
    "ScanMode",
    "InputProvider",
    "ConsoleInputProvider",
    "ScriptedInputProvider",
    "parse_scan_mode",
    "parse_batch_size",
    "pick_single_url",
    "DEFAULT_BATCH_SIZE",
]

DEFAULT_BATCH_SIZE = 10


class ScanMode(str, Enum):
    """Режим сканирования, как его выбирает оператор."""

    SITEMAP = "1"
    BATCH = "2"
    SINGLE = "3"


class InputProvider(Protocol):
    def ask_site_url(self) -> str: ...

    def ask_scan_mode(self) -> ScanMode: ...

    def ask_batch_size(self) -> int: ...

    def ask_single_url(self, default: str) -> str: ...


def parse_scan_mode(answer: Optional[str]) -> ScanMode:
    """Пустой ответ означает режим 1; неизвестный — тоже 1, с предупреждением."""
    answer = (answer or "").strip()
    if not answer:
        return ScanMode.SITEMAP
    try:
        return ScanMode(answer)
    except ValueError:
        logger.warning("Unknown scan mode %r, falling back to full sitemap scan", answer)
        return ScanMode.SITEMAP


def parse_batch_size(answer: Optional[str], default: int = DEFAULT_BATCH_SIZE) -> int:
    """Нечисловой или неположительный ответ даёт значение по умолчанию."""
    try:
        value = int((answer or "").strip())
    except ValueError:
        return default
    return value if value > 0 else default


def pick_single_url(answer: Optional[str], default: str) -> str:
    answer = (answer or "").strip()
    return answer or default


class ConsoleInputProvider:
    """Спрашивает оператора в терминале."""

    def __init__(self, default_batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        self.default_batch_size = default_batch_size

    def ask_site_url(self) -> str:
        return click.prompt("Please enter the URL of your website or sitemap", type=str)

    def ask_scan_mode(self) -> ScanMode:
        click.echo("Choose a scan mode:")
        click.echo("  1) Full site via sitemap")
        click.echo("  2) Full site in batches of N pages")
        click.echo("  3) Single URL")
        answer = click.prompt("Mode", default="", show_default=False, type=str)
        return parse_scan_mode(answer)

    def ask_batch_size(self) -> int:
        answer = click.prompt(
            f"Pages per batch [{self.default_batch_size}]", default="", show_default=False, type=str
        )
        return parse_batch_size(answer, self.default_batch_size)

    def ask_single_url(self, default: str) -> str:
        answer = click.prompt(f"URL to audit [{default}]", default="", show_default=False, type=str)
        return pick_single_url(answer, default)


class ScriptedInputProvider:
    """Отдаёт заранее известные ответы; пустые значения ведут себя как пустой ввод."""

    def __init__(
        self,
        site_url: str,
        mode: Optional[str] = None,
        batch_size: Optional[str] = None,
        single_url: Optional[str] = None,
        default_batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self.site_url = site_url
        self.mode = mode
        self.batch_size = batch_size
        self.single_url = single_url
        self.default_batch_size = default_batch_size

    def ask_site_url(self) -> str:
        return self.site_url

    def ask_scan_mode(self) -> ScanMode:
        return parse_scan_mode(self.mode)

    def ask_batch_size(self) -> int:
        return parse_batch_size(self.batch_size, self.default_batch_size)

    def ask_single_url(self, default: str) -> str:
        return pick_single_url(self.single_url, default)
