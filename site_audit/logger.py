# === FILE: site_audit/logger.py ===
"""site_audit.logger: общий логгер SiteAudit.

Все модули пишут в один именованный логгер ``"SiteAudit"``::

    from site_audit.logger import logger

Вывод идёт в stdout; при ``--log-file`` добавляется файл с ротацией, чтобы
многочасовой проход по sitemap оставлял след по каждой странице. CLI
перенастраивает логгер через :func:`init_logging`, как только разобраны опции.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Optional, Union

LOGGER_NAME: Final[str] = "SiteAudit"
DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# 5 MB на файл, три архивных копии
_MAX_BYTES: Final[int] = 5 * 1024 * 1024
_BACKUPS: Final[int] = 3

Level = Union[int, str]


def _console(fmt: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _rotating_file(path: Union[str, Path], fmt: str) -> logging.Handler:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(target, maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8")
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure(
    *,
    level: Level = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Настраивает логгер проекта и возвращает его.

    ``replace_handlers=False`` добавляет обработчики к уже существующим,
    иначе старые снимаются и закрываются. Сообщения не уходят в корневой
    логгер.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        for old in list(lg.handlers):
            lg.removeHandler(old)
            old.close()

    lg.addHandler(_console(log_format))
    if log_file is not None:
        lg.addHandler(_rotating_file(log_file, log_format))

    lg.propagate = False
    return lg


def init_logging(
    level: Level = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Вариант для CLI: всегда заменяет обработчики."""
    return configure(level=level, log_file=log_file, log_format=log_format)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "LOGGER_NAME"]
