# site_audit/discovery/resolver.py
"""
Locate the sitemap of a site by probing well-known paths.
"""
from __future__ import annotations

from typing import Final, List, Protocol, Tuple
from urllib.parse import urlsplit

from site_audit.exceptions import SitemapNotFound
from site_audit.logger import logger
from site_audit.utils import normalize_url, url_origin

__all__ = ["SITEMAP_CANDIDATES", "SitemapProbe", "candidate_urls", "resolve_sitemap"]

#: Probe order matters: the first path that answers wins.
SITEMAP_CANDIDATES: Final[Tuple[str, ...]] = (
    "sitemap.xml",
    "sitemap_index.xml",
    "sitemap",
    "sitemap.php",
)


class SitemapProbe(Protocol):
    async def probe(self, url: str) -> bool: ...


def candidate_urls(url: str) -> List[str]:
    """Build the candidate sitemap URLs for the origin of *url*, in probe order."""
    origin = url_origin(url)
    return [f"{origin}/{path}" for path in SITEMAP_CANDIDATES]


async def resolve_sitemap(raw_url: str, prober: SitemapProbe) -> str:
    """
    Return the sitemap URL for *raw_url*.

    A URL whose path already ends with ``sitemap.xml`` is returned without
    touching the network. Otherwise candidates are probed one by one and the
    first existing one is returned.

    Raises InvalidUrl for unparsable input and SitemapNotFound when no
    candidate exists.
    """
    normalized = normalize_url(raw_url)
    if urlsplit(normalized).path.endswith("sitemap.xml"):
        logger.debug("Input already points to a sitemap: %s", normalized)
        return normalized

    for candidate in candidate_urls(normalized):
        if await prober.probe(candidate):
            logger.info("Sitemap found: %s", candidate)
            return candidate
        logger.debug("No sitemap at %s", candidate)

    raise SitemapNotFound(normalized)
