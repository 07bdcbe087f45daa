# site_audit/discovery/fetcher.py
"""
Fetcher module: HTTP access used during sitemap discovery.

Two operations are exposed: a lightweight existence probe (HEAD, no body)
and a full body download with retry/backoff on 5xx/429.
"""
from __future__ import annotations

import asyncio
import random
from typing import Optional, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_audit.config import AuditConfig
from site_audit.exceptions import SitemapFetchError
from site_audit.logger import logger


class SitemapFetcher:
    """aiohttp session wrapper for sitemap probing and download."""

    _RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

    def __init__(self, config: AuditConfig, session: Optional[ClientSession] = None) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> SitemapFetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.probe_timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    def _require_session(self) -> ClientSession:
        if not self.session:
            raise RuntimeError("Session not initialized")
        return self.session

    async def probe(self, url: str) -> bool:
        """
        Check that *url* exists without downloading it.

        Redirects are followed; only a final 2xx counts. A transport error is
        treated the same as a missing resource.
        """
        session = self._require_session()
        try:
            async with session.head(url, allow_redirects=True) as resp:
                logger.debug("HEAD %s -> %s", url, resp.status)
                return 200 <= resp.status < 300
        except (ClientError, asyncio.TimeoutError) as exc:
            logger.debug("HEAD %s failed: %s", url, exc)
            return False

    async def fetch(self, url: str) -> bytes:
        """
        Download the raw body of *url*.

        Raises SitemapFetchError once the retry budget is exhausted or on a
        non-retryable, non-2xx status.
        """
        session = self._require_session()
        attempts = 0
        while True:
            try:
                async with session.get(url) as resp:
                    if resp.status in self._RETRY_STATUS:
                        raise ClientError(f"retryable status {resp.status}")
                    if not 200 <= resp.status < 300:
                        raise SitemapFetchError(url, f"HTTP {resp.status}")
                    return await resp.read()
            except (ClientError, asyncio.TimeoutError) as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    logger.warning("Failed %s: %s", url, exc)
                    raise SitemapFetchError(url, str(exc) or type(exc).__name__) from exc
                # exponential backoff, cap at 60s
                backoff = min(60, 2**attempts + random.random())
                logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.config.retry_times, url, backoff)
                await asyncio.sleep(backoff)
