# File: site_audit/utils.py
"""site_audit.utils: Утилитарные функции для нормализации URL и выделения origin."""

from __future__ import annotations

from typing import Final, Sequence
from urllib.parse import urlsplit, urlunsplit

from site_audit.exceptions import InvalidUrl
from site_audit.logger import logger

__all__: Sequence[str] = (
    "normalize_url",
    "url_origin",
)

_SCHEME_PREFIXES: Final = ("http://", "https://")
_DEFAULT_PORTS: Final = {"http": 80, "https": 443}
# Символы, которые не могут встречаться в имени хоста.
_FORBIDDEN_HOST_CHARS: Final = frozenset(" \t\r\n#%/:<>?@[\\]^|\"'`{}")


def _split_or_fail(raw: str):
    try:
        parsed = urlsplit(raw)
        port = parsed.port
    except ValueError as exc:
        raise InvalidUrl(raw) from exc
    host = parsed.hostname or ""
    if not host or not parsed.netloc:
        raise InvalidUrl(raw)
    if not host.startswith("[") and ":" not in host and _FORBIDDEN_HOST_CHARS & set(host):
        raise InvalidUrl(raw)
    return parsed, host, port


def normalize_url(raw: str) -> str:
    """Нормализует URL до канонической формы.

    Строка обрезается и приводится к нижнему регистру, при отсутствии схемы
    добавляется ``https://``, ведущий ``www.`` у хоста удаляется, для «голого»
    origin добавляется завершающий слеш. Повторное применение ничего не меняет.

    Raises:
        InvalidUrl: если строку нельзя разобрать как URL с хостом.
    """
    candidate = raw.strip().lower()
    if not candidate.startswith(_SCHEME_PREFIXES):
        candidate = "https://" + candidate

    parsed, host, port = _split_or_fail(candidate)

    if host.startswith("www."):
        host = host[4:]
        if not host:
            raise InvalidUrl(raw)

    if ":" in host:
        host = f"[{host}]"
    netloc = host
    if port is not None and port != _DEFAULT_PORTS.get(parsed.scheme):
        netloc = f"{host}:{port}"
    userinfo, sep, _ = parsed.netloc.rpartition("@")
    if sep:
        netloc = f"{userinfo}@{netloc}"

    normalized = urlunsplit((parsed.scheme, netloc, parsed.path or "/", parsed.query, parsed.fragment))
    logger.debug("Normalized URL: %s -> %s", raw, normalized)
    return normalized


def url_origin(url: str) -> str:
    """Возвращает origin (схема + хост + порт) без завершающего слеша."""
    parsed = urlsplit(url)
    return urlunsplit((parsed.scheme, parsed.netloc.rpartition("@")[2], "", "", ""))
