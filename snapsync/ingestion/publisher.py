from collections.abc import Callable
from datetime import datetime, timezone

import httpx

from snapsync.catalog import fingerprint
from snapsync.catalog.dedup_cache import DedupCatalogCache
from snapsync.database.models import PhotoRecord
from snapsync.database.repositories.photos_repository import PhotosRepository
from snapsync.ingestion.breadcrumb import RateLimitBreadcrumb
from snapsync.ingestion.exceptions import MetadataWriteError
from snapsync.ingestion.models import StagedFile
from snapsync.ingestion.outcomes import (
    Failed,
    Published,
    PublishOutcome,
    RateLimited,
    Skipped,
)
from snapsync.ingestion.proxy_client import ProxyClient, UploadResponse
from snapsync.logging.logger import Log


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_rate_limited(response: UploadResponse) -> bool:
    """True for HTTP 429 or an error body that reports exhaustion."""
    if response.status_code == 429:
        return True
    return not response.ok and "rate limit" in response.text.lower()


class Publisher:
    """Pushes staged files through the proxy and records them in the catalog."""

    def __init__(
        self,
        proxy_client: ProxyClient,
        photos_repo: PhotosRepository,
        cache: DedupCatalogCache,
        breadcrumb: RateLimitBreadcrumb,
        public_base_url: str,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._proxy = proxy_client
        self._photos_repo = photos_repo
        self._cache = cache
        self._breadcrumb = breadcrumb
        self._public_base_url = public_base_url
        self._clock = clock

    def publish(self, staged: StagedFile, key: str) -> PublishOutcome:
        """Publish one staged file under ``key``.

        The staged file is removed on every outcome except ``RateLimited``.
        """
        if self._cache.contains(key):
            Log.info(f"Skipped duplicate (catalog cache): {key}", component="Publisher")
            self._cleanup(staged, key)
            return Skipped(key)

        try:
            response = self._proxy.upload(key, staged.read_bytes())
        except (httpx.HTTPError, OSError) as exc:
            Log.error(f"Upload failed: {key} | {exc}", component="Publisher")
            self._cleanup(staged, key)
            return Failed(key, str(exc))

        if is_rate_limited(response):
            reason = f"HTTP {response.status_code} Rate Limit (proxy): {response.text[:200]}"
            self._breadcrumb.record(reason, key)
            Log.warning(f"Hit proxy rate limit while uploading {key}", component="RateLimit")
            return RateLimited(key, reason)

        if not response.ok:
            reason = f"HTTP {response.status_code}: {response.text[:500]}"
            Log.error(f"Upload failed: {key} | {reason}", component="Publisher")
            self._cleanup(staged, key)
            return Failed(key, reason)

        url = fingerprint.public_url(key, self._public_base_url)
        Log.info(f"Uploaded: {key}", component="Publisher")
        try:
            self._record(key, url)
        except MetadataWriteError as exc:
            # Stored but not catalogued; left for operators to reconcile.
            Log.error(str(exc), component="Metadata")
        self._cache.add(key)
        self._cleanup(staged, key)
        return Published(key, url)

    def _record(self, key: str, url: str) -> None:
        record = PhotoRecord(
            filename=key,
            image_url=url,
            uploader_gamertag=fingerprint.uploader_from_key(key),
            created_at=self._clock(),
        )
        try:
            self._photos_repo.insert(record)
        except Exception as exc:
            raise MetadataWriteError(f"Insert error for {key}: {exc}") from exc
        Log.info(f"Inserted: {key}", component="Metadata")

    def _cleanup(self, staged: StagedFile, key: str) -> None:
        try:
            staged.remove()
        except OSError as exc:
            Log.error(f"Could not remove staged file for {key}: {exc}", component="Cleanup")
