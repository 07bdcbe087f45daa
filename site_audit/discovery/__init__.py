"""site_audit.discovery: поиск sitemap и получение списка страниц сайта."""

from site_audit.discovery.fetcher import SitemapFetcher
from site_audit.discovery.pages import resolve_page_urls
from site_audit.discovery.resolver import SITEMAP_CANDIDATES, candidate_urls, resolve_sitemap

__all__ = [
    "SitemapFetcher",
    "SITEMAP_CANDIDATES",
    "candidate_urls",
    "resolve_sitemap",
    "resolve_page_urls",
]
