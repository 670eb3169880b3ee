from dataclasses import dataclass
from pathlib import Path

import httpx

from snapsync.catalog.dedup_cache import DedupCatalogCache
from snapsync.chat.client_base import BaseChatClient
from snapsync.config.settings import Settings
from snapsync.database.repositories.photos_repository import PhotosRepository
from snapsync.ingestion.breadcrumb import RateLimitBreadcrumb
from snapsync.ingestion.exceptions import TransientSourceError
from snapsync.ingestion.models import ScanCandidate
from snapsync.ingestion.outcomes import Failed, Published, RateLimited, Skipped
from snapsync.ingestion.proxy_client import ProxyClient
from snapsync.ingestion.publisher import Publisher
from snapsync.ingestion.scanner import Scanner
from snapsync.ingestion.stager import Stager
from snapsync.logging.logger import Log


@dataclass
class PassReport:
    """Counters for one scan pass."""

    candidates: int = 0
    published: int = 0
    skipped: int = 0
    failed: int = 0
    transient: int = 0
    rate_limited: bool = False

    def summary(self) -> str:
        return (
            f"{self.candidates} candidate(s): {self.published} published, "
            f"{self.skipped} skipped, {self.failed} failed, "
            f"{self.transient} deferred"
            + (", stopped on rate limit" if self.rate_limited else "")
        )


class PassRunner:
    """Run one scan pass: scan -> stage -> publish, strictly one item at a time."""

    def __init__(self, scanner: Scanner, stager: Stager, publisher: Publisher) -> None:
        self._scanner = scanner
        self._stager = stager
        self._publisher = publisher

    def run_pass(self) -> PassReport:
        """Process every candidate in the scan window.

        Per-item errors never end the pass. A rate-limited publish ends it
        immediately so the caller can back off and restart from scratch.
        """
        report = PassReport()
        for candidate in self._scanner.scan():
            report.candidates += 1
            try:
                self._process(candidate, report)
            except Exception as exc:
                report.failed += 1
                Log.exception(f"Unexpected error for {candidate.key}: {exc}", component="Pass")
            if report.rate_limited:
                break
        Log.info(report.summary(), component="Pass")
        return report

    def _process(self, candidate: ScanCandidate, report: PassReport) -> None:
        try:
            staged = self._stager.stage(candidate.image_url, candidate.staged_name)
        except TransientSourceError as exc:
            report.transient += 1
            Log.warning(f"{exc}", component="Download")
            return

        outcome = self._publisher.publish(staged, candidate.key)
        if isinstance(outcome, Published):
            report.published += 1
        elif isinstance(outcome, Skipped):
            report.skipped += 1
        elif isinstance(outcome, Failed):
            report.failed += 1
        elif isinstance(outcome, RateLimited):
            report.rate_limited = True


def build_pass_runner(
    settings: Settings,
    cache: DedupCatalogCache,
    http_client: httpx.Client,
    chat_client: BaseChatClient,
    photos_repo: PhotosRepository,
) -> PassRunner:
    """Build a PassRunner with all required collaborators."""
    scanner = Scanner(
        chat_client,
        cache,
        channel_id=settings.channel_id,
        start_date=settings.start_date,
        batch_size=settings.batch_size,
        max_pages=settings.max_scan_pages,
        namespace=settings.storage_namespace,
    )
    stager = Stager(Path(settings.temp_dir), http_client)
    publisher = Publisher(
        proxy_client=ProxyClient(http_client, settings.proxy_base_url),
        photos_repo=photos_repo,
        cache=cache,
        breadcrumb=RateLimitBreadcrumb(Path(settings.ratelimit_breadcrumb_path)),
        public_base_url=settings.public_base_url,
    )
    return PassRunner(scanner, stager, publisher)
