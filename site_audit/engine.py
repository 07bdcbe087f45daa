# File: site_audit/engine.py
"""site_audit.engine: Оркестрация аудита сайта.

``ScanOrchestrator`` проходит список URL строго по порядку: пропускает уже
сохранённые, запускает аудит с таймаутом, записывает результат (успех или
ошибку) и сразу сохраняет файл, затем делает паузу. ``Engine`` связывает
ввод оператора, поиск sitemap и оркестратор в один запуск.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from site_audit.audit.runner import (
    AuditRunner,
    LighthouseRunner,
    extract_scores,
    find_bf_cache_failures,
    find_opportunities,
)
from site_audit.config import DEFAULT_CATEGORIES, AuditConfig
from site_audit.discovery.fetcher import SitemapFetcher
from site_audit.discovery.pages import resolve_page_urls
from site_audit.discovery.resolver import resolve_sitemap
from site_audit.exceptions import InvalidUrl, SitemapFetchError, SitemapNotFound
from site_audit.interactive_cli import InputProvider, ScanMode
from site_audit.logger import logger
from site_audit.store import PageError, PageScores, ResultStore, ScanResult
from site_audit.utils import normalize_url

__all__ = ["Pacer", "ScanSummary", "ScanOrchestrator", "Engine", "TIMEOUT_MESSAGE"]

TIMEOUT_MESSAGE = "Lighthouse timed out"


class Pacer:
    """Пауза между аудитами, которую можно прервать из того же event loop."""

    def __init__(self, interval: float) -> None:
        self.interval = interval
        self._cancelled = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    async def pause(self) -> None:
        if self.interval <= 0 or self.cancelled:
            return
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            pass


@dataclass(slots=True)
class ScanSummary:
    """Итог одного прохода оркестратора."""

    audited: int = 0
    skipped: int = 0
    failed: int = 0
    remaining: int = 0

    @property
    def succeeded(self) -> int:
        return self.audited - self.failed


class ScanOrchestrator:
    """Последовательный аудит списка URL с сохранением после каждой страницы."""

    def __init__(
        self,
        audit_timeout: float = 120.0,
        max_audits: Optional[int] = None,
        categories: Sequence[str] = DEFAULT_CATEGORIES,
    ) -> None:
        self.audit_timeout = audit_timeout
        self.max_audits = max_audits
        self.categories = categories

    def _limit_reached(self, summary: ScanSummary) -> bool:
        return self.max_audits is not None and summary.audited >= self.max_audits

    async def _audit(self, url: str, runner: AuditRunner) -> ScanResult:
        try:
            report = await asyncio.wait_for(runner.run_audit(url), timeout=self.audit_timeout)
            scores = extract_scores(url, report, self.categories)
        except asyncio.TimeoutError:
            logger.error("Error running Lighthouse for %s: %s", url, TIMEOUT_MESSAGE)
            return PageError(url=url, error=TIMEOUT_MESSAGE)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            logger.error("Error running Lighthouse for %s: %s", url, message)
            return PageError(url=url, error=message)
        self._log_report(scores, report)
        return scores

    @staticmethod
    def _log_report(scores: PageScores, report) -> None:
        logger.info(
            "%s | performance=%s accessibility=%s best-practices=%s seo=%s",
            scores.url,
            _percent(scores.performance),
            _percent(scores.accessibility),
            _percent(scores.best_practices),
            _percent(scores.seo),
        )
        for item in find_opportunities(report):
            logger.debug("Opportunity %s: %s", item.title, item.description)
        for reason in find_bf_cache_failures(report):
            logger.debug("BFCache failure: %s", reason)

    async def run(
        self,
        urls: Sequence[str],
        store: ResultStore,
        runner: AuditRunner,
        pacer: Optional[Pacer] = None,
    ) -> ScanSummary:
        """Проходит *urls* по порядку и возвращает счётчики запуска."""
        pacer = pacer or Pacer(0)
        store.load()
        summary = ScanSummary()

        for index, url in enumerate(urls):
            if url in store:
                logger.info("Skipping already processed URL: %s", url)
                summary.skipped += 1
                continue
            if pacer.cancelled or self._limit_reached(summary):
                summary.remaining = len({u for u in urls[index:] if u not in store})
                break

            logger.info("Running Lighthouse for %s", url)
            result = await self._audit(url, runner)
            summary.audited += 1
            if not result.is_success:
                summary.failed += 1

            store.append(result)
            store.persist()
            logger.debug("Updated results saved to %s", store.path)

            if index < len(urls) - 1 and not self._limit_reached(summary):
                logger.info("Waiting for %.1f seconds before the next run...", pacer.interval)
                await pacer.pause()

        logger.info(
            "Done: %d audited (%d failed), %d skipped, %d left for the next run. Results in %s",
            summary.audited,
            summary.failed,
            summary.skipped,
            summary.remaining,
            store.path,
        )
        return summary


def _percent(score: Optional[float]) -> str:
    return "n/a" if score is None else f"{score * 100:.0f}%"


class Engine:
    """Фасад для CLI и тестов: ввод оператора → список URL → оркестратор."""

    def __init__(
        self,
        config: AuditConfig,
        runner: Optional[AuditRunner] = None,
        fetcher_factory: Optional[Callable[[AuditConfig], SitemapFetcher]] = None,
    ) -> None:
        self.config = config
        self.runner = runner or LighthouseRunner(config)
        self.fetcher_factory = fetcher_factory or SitemapFetcher

    async def discover(self, site_url: str) -> List[str]:
        """Находит sitemap для *site_url* и возвращает список страниц."""
        async with self.fetcher_factory(self.config) as fetcher:
            sitemap_url = await resolve_sitemap(site_url, fetcher)
            logger.info("Using sitemap: %s", sitemap_url)
            return await resolve_page_urls(
                sitemap_url,
                fetcher,
                follow_all_children=self.config.follow_all_sitemaps,
                max_depth=self.config.max_sitemap_depth,
            )

    async def run_session(self, provider: InputProvider, pacer: Optional[Pacer] = None) -> Optional[ScanSummary]:
        """
        Полный запуск. Ошибки, при которых аудит невозможен (неверный URL,
        sitemap не найден или не загружен, пустой список), логируются, и
        метод возвращает None.
        """
        try:
            site_url = normalize_url(provider.ask_site_url())
            mode = provider.ask_scan_mode()
            max_audits: Optional[int] = None

            if mode is ScanMode.SINGLE:
                urls = [normalize_url(provider.ask_single_url(site_url))]
            else:
                if mode is ScanMode.BATCH:
                    max_audits = provider.ask_batch_size()
                    logger.info("Batch mode: at most %d pages will be audited in this run", max_audits)
                urls = await self.discover(site_url)
        except (InvalidUrl, SitemapNotFound, SitemapFetchError) as exc:
            logger.error("An error occurred: %s", exc)
            return None

        if not urls:
            logger.error("No URLs found in the sitemap. Exiting.")
            return None
        logger.info("Found %d URLs to process", len(urls))

        orchestrator = ScanOrchestrator(
            audit_timeout=self.config.audit_timeout,
            max_audits=max_audits,
            categories=self.config.categories,
        )
        return await orchestrator.run(
            urls,
            ResultStore(self.config.output_file),
            self.runner,
            pacer or Pacer(self.config.pause_time),
        )

    def start_scan(self, provider: InputProvider) -> Optional[ScanSummary]:
        """Синхронная обёртка над run_session для CLI."""
        return asyncio.run(self.run_session(provider))
