# File: tests/test_engine.py
# Scan orchestration: skip/resume, per-page failures, pacing and full sessions.
from __future__ import annotations

import asyncio
import json

import pytest

from site_audit.engine import TIMEOUT_MESSAGE, Engine, Pacer, ScanOrchestrator
from site_audit.exceptions import AuditFailure
from site_audit.interactive_cli import ScriptedInputProvider
from site_audit.store import PageError, PageScores, ResultStore, persist_results

from conftest import FakeFetcher, FakeRunner, RecordingPacer, sitemapindex, urlset

A = "https://example.com/a"
B = "https://example.com/b"
C = "https://example.com/c"


def read_results(path):
    return json.loads(path.read_text(encoding="utf-8"))


# --------------------------------------------------------------------------- #
#                               ScanOrchestrator                              #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_skips_urls_already_in_store(results_file):
    persist_results(results_file, [PageError(url=A, error="old failure")])
    runner, pacer = FakeRunner(), RecordingPacer()

    summary = await ScanOrchestrator().run([A, B], ResultStore(results_file), runner, pacer)

    assert runner.calls == [B]
    assert pacer.pauses == 0  # B is the last URL, A was skipped
    assert (summary.audited, summary.skipped, summary.failed) == (1, 1, 0)
    data = read_results(results_file)
    assert [entry["url"] for entry in data] == [A, B]
    assert data[1] == {"url": B, "performance": 0.9, "accessibility": 0.8, "bestPractices": 0.7, "seo": 1.0}


@pytest.mark.asyncio()
async def test_persists_after_every_page(results_file):
    seen = []

    class SnapshotRunner(FakeRunner):
        async def run_audit(self, url):
            seen.append(read_results(results_file) if results_file.exists() else [])
            return await super().run_audit(url)

    await ScanOrchestrator().run([A, B, C], ResultStore(results_file), SnapshotRunner(), RecordingPacer())

    assert [len(snapshot) for snapshot in seen] == [0, 1, 2]
    assert len(read_results(results_file)) == 3


@pytest.mark.asyncio()
async def test_timeout_is_recorded_and_scan_continues(results_file):
    runner = FakeRunner(slow={A})

    summary = await ScanOrchestrator(audit_timeout=0.05).run([A, B], ResultStore(results_file), runner, RecordingPacer())

    assert runner.calls == [A, B]
    assert summary.failed == 1
    assert read_results(results_file)[0] == {"url": A, "error": TIMEOUT_MESSAGE}
    assert read_results(results_file)[1]["url"] == B


@pytest.mark.asyncio()
async def test_audit_error_message_is_recorded(results_file):
    runner = FakeRunner(failures={A: AuditFailure(A, "Chrome crashed"), B: RuntimeError()})
    pacer = RecordingPacer()

    summary = await ScanOrchestrator().run([A, B, C], ResultStore(results_file), runner, pacer)

    data = read_results(results_file)
    assert data[0] == {"url": A, "error": "Chrome crashed"}
    assert data[1] == {"url": B, "error": "RuntimeError"}
    assert data[2]["url"] == C
    assert summary.failed == 2 and summary.succeeded == 1
    assert pacer.pauses == 2


@pytest.mark.asyncio()
async def test_report_without_category_is_a_failure(results_file):
    class BrokenRunner(FakeRunner):
        async def run_audit(self, url):
            return {"categories": {"performance": {"score": 1}}}

    await ScanOrchestrator().run([A], ResultStore(results_file), BrokenRunner(), RecordingPacer())
    assert read_results(results_file)[0] == {"url": A, "error": "category 'accessibility' missing from audit report"}


@pytest.mark.asyncio()
async def test_subset_of_categories_is_a_success(results_file):
    class SubsetRunner(FakeRunner):
        async def run_audit(self, url):
            self.calls.append(url)
            return {"categories": {"performance": {"score": 0.5}, "seo": {"score": 1}}}

    orchestrator = ScanOrchestrator(categories=["performance", "seo"])
    summary = await orchestrator.run([A], ResultStore(results_file), SubsetRunner(), RecordingPacer())

    assert summary.failed == 0
    assert read_results(results_file) == [
        {"url": A, "performance": 0.5, "accessibility": None, "bestPractices": None, "seo": 1.0}
    ]


@pytest.mark.asyncio()
async def test_invalid_stored_entries_survive_a_run(results_file):
    old = {"url": "https://example.com/old", "performance": 1.2, "accessibility": 1, "bestPractices": 1, "seo": 1}
    results_file.parent.mkdir(parents=True)
    results_file.write_text(json.dumps([old, "garbage"]), encoding="utf-8")
    runner = FakeRunner()

    await ScanOrchestrator().run([old["url"], B], ResultStore(results_file), runner, RecordingPacer())

    assert runner.calls == [B]
    data = read_results(results_file)
    assert data[:2] == [old, "garbage"]
    assert data[2]["url"] == B


@pytest.mark.asyncio()
async def test_duplicate_urls_are_audited_once(results_file):
    runner = FakeRunner()
    summary = await ScanOrchestrator().run([A, A, B], ResultStore(results_file), runner, RecordingPacer())
    assert runner.calls == [A, B]
    assert summary.skipped == 1


@pytest.mark.asyncio()
async def test_batch_limit_and_resume(results_file):
    urls = [A, B, C]
    runner = FakeRunner()

    first = await ScanOrchestrator(max_audits=2).run(urls, ResultStore(results_file), runner, RecordingPacer())
    assert runner.calls == [A, B]
    assert (first.audited, first.remaining) == (2, 1)

    second = await ScanOrchestrator(max_audits=2).run(urls, ResultStore(results_file), runner, RecordingPacer())
    assert runner.calls == [A, B, C]
    assert (second.audited, second.skipped, second.remaining) == (1, 2, 0)


@pytest.mark.asyncio()
async def test_cancelled_pacer_stops_the_loop(results_file):
    pacer = Pacer(30)
    runner = FakeRunner()

    async def cancel_soon():
        await asyncio.sleep(0.05)
        pacer.cancel()

    canceller = asyncio.create_task(cancel_soon())
    summary = await asyncio.wait_for(
        ScanOrchestrator().run([A, B], ResultStore(results_file), runner, pacer), timeout=5
    )
    await canceller

    assert runner.calls == [A]
    assert summary.remaining == 1


@pytest.mark.asyncio()
async def test_pacer_waits_for_interval():
    loop = asyncio.get_running_loop()
    started = loop.time()
    await Pacer(0.1).pause()
    assert loop.time() - started >= 0.09


# --------------------------------------------------------------------------- #
#                                   Engine                                    #
# --------------------------------------------------------------------------- #


def make_engine(config, fetcher, runner):
    return Engine(config, runner=runner, fetcher_factory=lambda cfg: fetcher)


@pytest.mark.asyncio()
async def test_session_full_sitemap(audit_config):
    fetcher = FakeFetcher(
        existing={"https://example.com/sitemap_index.xml"},
        bodies={
            "https://example.com/sitemap_index.xml": sitemapindex("https://example.com/pages.xml"),
            "https://example.com/pages.xml": urlset(A, B),
        },
    )
    runner = FakeRunner()
    engine = make_engine(audit_config, fetcher, runner)

    summary = await engine.run_session(ScriptedInputProvider("www.Example.com"), RecordingPacer())

    assert runner.calls == [A, B]
    assert summary.audited == 2
    assert fetcher.probed[:2] == ["https://example.com/sitemap.xml", "https://example.com/sitemap_index.xml"]
    stored = [r.url for r in ResultStore(audit_config.output_file).load()]
    assert stored == [A, B]


@pytest.mark.asyncio()
async def test_session_batch_mode(audit_config):
    fetcher = FakeFetcher(bodies={"https://example.com/sitemap.xml": urlset(A, B, C)})
    runner = FakeRunner()
    engine = make_engine(audit_config, fetcher, runner)

    provider = ScriptedInputProvider("https://example.com/sitemap.xml", mode="2", batch_size="2")
    summary = await engine.run_session(provider, RecordingPacer())

    assert runner.calls == [A, B]
    assert summary.remaining == 1
    assert fetcher.probed == []


@pytest.mark.asyncio()
async def test_session_single_url(audit_config):
    fetcher = FakeFetcher()
    runner = FakeRunner()
    engine = make_engine(audit_config, fetcher, runner)

    await engine.run_session(ScriptedInputProvider("example.com", mode="3", single_url="www.example.com/b"))
    await engine.run_session(ScriptedInputProvider("example.com", mode="3"))

    assert runner.calls == [B, "https://example.com/"]
    assert fetcher.probed == [] and fetcher.fetched == []


@pytest.mark.asyncio()
async def test_session_passes_configured_categories(audit_config, results_file):
    class SeoOnlyRunner(FakeRunner):
        async def run_audit(self, url):
            self.calls.append(url)
            return {"categories": {"seo": {"score": 0.8}}}

    config = audit_config.model_copy(update={"categories": ["seo"]})
    engine = make_engine(config, FakeFetcher(), SeoOnlyRunner())

    summary = await engine.run_session(ScriptedInputProvider("example.com", mode="3"))

    assert summary.failed == 0
    assert read_results(results_file)[0]["seo"] == 0.8
    assert read_results(results_file)[0]["performance"] is None


@pytest.mark.asyncio()
async def test_session_aborts_on_invalid_url(audit_config):
    runner = FakeRunner()
    engine = make_engine(audit_config, FakeFetcher(), runner)
    assert await engine.run_session(ScriptedInputProvider("not a url")) is None
    assert runner.calls == []
    assert not audit_config.output_file.exists()


@pytest.mark.asyncio()
async def test_session_aborts_when_sitemap_missing(audit_config):
    runner = FakeRunner()
    engine = make_engine(audit_config, FakeFetcher(), runner)
    assert await engine.run_session(ScriptedInputProvider("example.com")) is None
    assert runner.calls == []


@pytest.mark.asyncio()
async def test_session_aborts_on_empty_sitemap(audit_config):
    fetcher = FakeFetcher(bodies={"https://example.com/sitemap.xml": "<rss/>"})
    runner = FakeRunner()
    engine = make_engine(audit_config, fetcher, runner)
    assert await engine.run_session(ScriptedInputProvider("https://example.com/sitemap.xml")) is None
    assert runner.calls == []


def test_start_scan_runs_event_loop(audit_config):
    fetcher = FakeFetcher(bodies={"https://example.com/sitemap.xml": urlset(A)})
    runner = FakeRunner()
    summary = make_engine(audit_config, fetcher, runner).start_scan(
        ScriptedInputProvider("https://example.com/sitemap.xml")
    )
    assert summary.audited == 1
    assert isinstance(ResultStore(audit_config.output_file).load().results[0], PageScores)
