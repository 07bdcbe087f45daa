# site_audit/discovery/pages.py
"""
Turn a sitemap URL into the flat, ordered list of page URLs to audit.
"""
from __future__ import annotations

from typing import List, Protocol

from site_audit.exceptions import InvalidUrl, UnsupportedSitemapShape
from site_audit.logger import logger
from site_audit.parser.sitemap_parser import parse_sitemap
from site_audit.utils import normalize_url

__all__ = ["SitemapSource", "resolve_page_urls"]


class SitemapSource(Protocol):
    async def fetch(self, url: str) -> bytes: ...


def _normalize_locations(locations: List[str], sitemap_url: str) -> List[str]:
    urls: List[str] = []
    for loc in locations:
        try:
            urls.append(normalize_url(loc))
        except InvalidUrl:
            logger.warning("Skipping invalid <loc> %r in %s", loc, sitemap_url)
    return urls


async def resolve_page_urls(
    sitemap_url: str,
    source: SitemapSource,
    *,
    follow_all_children: bool = False,
    max_depth: int = 5,
    _depth: int = 0,
) -> List[str]:
    """
    Fetch *sitemap_url* and return every page it lists, normalized, in order.

    A sitemap index is followed into its first child only, unless
    *follow_all_children* is set, in which case every child is visited in
    document order and the results are concatenated. Duplicate page URLs are
    kept. Descent stops at *max_depth* nested indexes.

    Raises SitemapFetchError if a sitemap body cannot be downloaded.
    """
    url = normalize_url(sitemap_url)
    if _depth > max_depth:
        logger.warning("Sitemap nesting deeper than %d at %s, not descending", max_depth, url)
        return []

    document = parse_sitemap(await source.fetch(url))

    if document.kind == "urlset":
        pages = _normalize_locations(document.locations, url)
        logger.debug("%s lists %d pages", url, len(pages))
        return pages

    if document.kind == "sitemapindex":
        children = document.locations if follow_all_children else document.locations[:1]
        if len(document.locations) > len(children):
            logger.info(
                "Sitemap index %s has %d children, following the first only",
                url,
                len(document.locations),
            )
        collected: List[str] = []
        for child in _normalize_locations(children, url):
            collected.extend(
                await resolve_page_urls(
                    child,
                    source,
                    follow_all_children=follow_all_children,
                    max_depth=max_depth,
                    _depth=_depth + 1,
                )
            )
        return collected

    logger.error("%s", UnsupportedSitemapShape(url, document.root_tag or "?"))
    return []
