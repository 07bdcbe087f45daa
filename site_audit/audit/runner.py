# site_audit/audit/runner.py
"""
Audit runners: the collaborators that evaluate a single page.

The orchestrator only relies on :class:`AuditRunner`; :class:`LighthouseRunner`
is the production implementation that drives the ``lighthouse`` CLI in a
subprocess and returns its JSON report (``categories`` + ``audits``).
"""
from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from site_audit.config import DEFAULT_CATEGORIES, AuditConfig
from site_audit.exceptions import AuditFailure
from site_audit.logger import logger
from site_audit.store import PageScores

__all__ = [
    "AuditRunner",
    "LighthouseRunner",
    "Opportunity",
    "extract_scores",
    "find_opportunities",
    "find_bf_cache_failures",
]

AuditReport = Mapping[str, Any]


class AuditRunner(Protocol):
    async def run_audit(self, url: str) -> AuditReport: ...


@dataclass(slots=True)
class Opportunity:
    """An improvement suggestion reported by Lighthouse."""

    id: str
    title: str
    description: str


def _category_score(url: str, categories: Mapping[str, Any], requested: Sequence[str], *keys: str) -> Optional[float]:
    if keys[0] not in requested:
        return None
    for key in keys:
        if key in categories:
            return categories[key]["score"]
    raise AuditFailure(url, f"category '{keys[0]}' missing from audit report")


def extract_scores(url: str, report: AuditReport, categories: Sequence[str] = DEFAULT_CATEGORIES) -> PageScores:
    """
    Build a success record from the category scores of *report*.

    Only *categories* (the ones Lighthouse was asked for) are read; the rest
    stay ``None``. A requested category absent from the report raises
    AuditFailure.
    """
    found = report["categories"]
    return PageScores(
        url=url,
        performance=_category_score(url, found, categories, "performance"),
        accessibility=_category_score(url, found, categories, "accessibility"),
        best_practices=_category_score(url, found, categories, "best-practices", "bestPractices"),
        seo=_category_score(url, found, categories, "seo"),
    )


def find_opportunities(report: AuditReport) -> List[Opportunity]:
    """Audits of type ``opportunity`` that did not get a perfect score."""
    found: List[Opportunity] = []
    for audit_id, audit in (report.get("audits") or {}).items():
        details = audit.get("details") or {}
        if audit.get("score") != 1 and details.get("type") == "opportunity":
            found.append(Opportunity(audit_id, audit.get("title", audit_id), audit.get("description", "")))
    return found


def find_bf_cache_failures(report: AuditReport) -> List[str]:
    """Reasons the page is not eligible for the back/forward cache."""
    audit = (report.get("audits") or {}).get("bf-cache") or {}
    items = (audit.get("details") or {}).get("items") or []
    return [str(item.get("failureReason", "")) for item in items if item.get("failureReason")]


class LighthouseRunner:
    """Runs the Lighthouse CLI for one URL and returns the parsed JSON report."""

    def __init__(self, config: AuditConfig) -> None:
        self.config = config

    def build_command(self, url: str) -> List[str]:
        return [
            self.config.lighthouse_path,
            url,
            "--output=json",
            "--output-path=stdout",
            "--quiet",
            f"--only-categories={','.join(self.config.categories)}",
            f"--chrome-flags={' '.join(self.config.chrome_flags)}",
        ]

    async def run_audit(self, url: str) -> Dict[str, Any]:
        cmd = self.build_command(url)
        logger.debug("Running %s", " ".join(cmd))
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise AuditFailure(url, f"Lighthouse executable not found: {self.config.lighthouse_path}") from exc

        try:
            stdout, stderr = await proc.communicate()
        finally:
            # cancelled by the per-page timeout: the browser must not outlive us
            if proc.returncode is None:
                try:
                    proc.kill()
                except ProcessLookupError:
                    pass
                await proc.wait()

        if proc.returncode != 0:
            tail = stderr.decode("utf-8", "ignore").strip().splitlines()[-1:] or [""]
            raise AuditFailure(url, f"Lighthouse exited with code {proc.returncode}: {tail[0]}".rstrip(": "))
        try:
            report = json.loads(stdout)
        except json.JSONDecodeError as exc:
            raise AuditFailure(url, f"Lighthouse returned invalid JSON: {exc}") from exc
        if not isinstance(report, dict) or "categories" not in report:
            raise AuditFailure(url, "Lighthouse report has no categories")
        if report.get("runtimeError"):
            raise AuditFailure(url, report["runtimeError"].get("message", "Lighthouse runtime error"))
        return report
