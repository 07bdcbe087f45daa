# File: tests/conftest.py
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from aiohttp import web

from site_audit.config import AuditConfig
from site_audit.engine import Pacer
from site_audit.logger import configure


def lighthouse_report(
    performance: Optional[float] = 0.9,
    accessibility: Optional[float] = 0.8,
    best_practices: Optional[float] = 0.7,
    seo: Optional[float] = 1.0,
) -> Dict[str, Any]:
    """Minimal Lighthouse-shaped report."""
    return {
        "categories": {
            "performance": {"score": performance},
            "accessibility": {"score": accessibility},
            "best-practices": {"score": best_practices},
            "seo": {"score": seo},
        },
        "audits": {
            "render-blocking-resources": {
                "title": "Eliminate render-blocking resources",
                "description": "Resources are blocking the first paint.",
                "score": 0.5,
                "details": {"type": "opportunity"},
            },
            "bf-cache": {"details": {"items": [{"failureReason": "Pages with cache-control:no-store"}]}},
        },
    }


class FakeRunner:
    """Audit runner that records calls; per-URL behaviour is configurable."""

    def __init__(self, failures: Optional[Dict[str, Exception]] = None, slow: Optional[set] = None) -> None:
        self.calls: List[str] = []
        self.failures = failures or {}
        self.slow = slow or set()

    async def run_audit(self, url: str) -> Dict[str, Any]:
        self.calls.append(url)
        if url in self.slow:
            await asyncio.sleep(5)
        if url in self.failures:
            raise self.failures[url]
        return lighthouse_report()


class RecordingPacer(Pacer):
    """Pacer that never sleeps but counts pauses."""

    def __init__(self) -> None:
        super().__init__(0)
        self.pauses = 0

    async def pause(self) -> None:
        self.pauses += 1


class FakeFetcher:
    """In-memory stand-in for SitemapFetcher."""

    def __init__(self, existing: Optional[set] = None, bodies: Optional[Dict[str, str]] = None) -> None:
        self.existing = existing or set()
        self.bodies = bodies or {}
        self.probed: List[str] = []
        self.fetched: List[str] = []

    async def __aenter__(self) -> FakeFetcher:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def probe(self, url: str) -> bool:
        self.probed.append(url)
        return url in self.existing

    async def fetch(self, url: str) -> bytes:
        self.fetched.append(url)
        return self.bodies[url].encode("utf-8")


def urlset(*locs: str) -> str:
    entries = "".join(f"<url><loc>{loc}</loc></url>" for loc in locs)
    return f'<?xml version="1.0" encoding="UTF-8"?><urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</urlset>'


def sitemapindex(*locs: str) -> str:
    entries = "".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locs)
    return f'<?xml version="1.0" encoding="UTF-8"?><sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</sitemapindex>'


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


@pytest.fixture()
def results_file(tmp_path: Path) -> Path:
    return tmp_path / "results" / "lighthouse_results.json"


@pytest.fixture()
def audit_config(results_file: Path) -> AuditConfig:
    """Config with no pauses, no retries and short timeouts."""
    return AuditConfig(
        output_file=results_file,
        pause_time=0,
        audit_timeout=1.0,
        probe_timeout=2.0,
        retry_times=0,
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """CliRunner swaps sys.stdout; point the project logger back at the real one afterwards."""
    yield
    configure(level="INFO")
