"""site_audit.exceptions: иерархия ошибок SiteAudit.

Ошибки обнаружения (``InvalidUrl``, ``SitemapNotFound``, ``SitemapFetchError``)
прерывают весь запуск до первого аудита. ``AuditFailure`` относится к одной
странице и превращается в запись ``PageError`` в файле результатов.
"""
from __future__ import annotations

__all__ = [
    "SiteAuditError",
    "InvalidUrl",
    "SitemapNotFound",
    "SitemapFetchError",
    "UnsupportedSitemapShape",
    "AuditFailure",
]


class SiteAuditError(Exception):
    """Базовый класс всех ошибок проекта."""


class InvalidUrl(SiteAuditError, ValueError):
    """URL не удалось нормализовать."""

    def __init__(self, raw: str = "") -> None:
        super().__init__("Invalid URL provided")
        self.raw = raw


class SitemapNotFound(SiteAuditError):
    """Ни один из кандидатов sitemap не ответил."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Sitemap not found for {url}")
        self.url = url


class SitemapFetchError(SiteAuditError):
    """Тело sitemap не удалось загрузить."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch sitemap {url}: {reason}")
        self.url = url
        self.reason = reason


class UnsupportedSitemapShape(SiteAuditError):
    """Корневой элемент не ``urlset`` и не ``sitemapindex``."""

    def __init__(self, url: str, root_tag: str) -> None:
        super().__init__(f"Unsupported sitemap structure at {url}: <{root_tag}>")
        self.url = url
        self.root_tag = root_tag


class AuditFailure(SiteAuditError):
    """Аудит одной страницы завершился ошибкой."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url
