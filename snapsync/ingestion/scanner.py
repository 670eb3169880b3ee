from collections.abc import Iterator
from datetime import datetime

from snapsync.catalog import fingerprint
from snapsync.catalog.dedup_cache import DedupCatalogCache
from snapsync.chat.client_base import BaseChatClient
from snapsync.chat.models import ChatMessage
from snapsync.ingestion.models import ScanCandidate
from snapsync.logging.logger import Log


class Scanner:
    """Walks a bounded window of channel history and yields uncatalogued images.

    Each call to ``scan`` starts from the newest message again. The paging
    cursor lives only for the duration of one pass; skipping already published
    items after a restart is the catalog cache's job.
    """

    def __init__(
        self,
        chat_client: BaseChatClient,
        cache: DedupCatalogCache,
        *,
        channel_id: str,
        start_date: datetime,
        batch_size: int = 100,
        max_pages: int = 1,
        namespace: str = fingerprint.DEFAULT_NAMESPACE,
    ) -> None:
        self._chat_client = chat_client
        self._cache = cache
        self._channel_id = channel_id
        self._start_date = start_date
        self._batch_size = min(batch_size, 100)
        self._max_pages = max(max_pages, 1)
        self._namespace = namespace

    def scan(self) -> Iterator[ScanCandidate]:
        """Yield candidates oldest first. The window is read eagerly, candidates lazily."""
        candidates = self._collect()
        candidates.sort(key=_chronological)
        Log.info(f"{len(candidates)} new image(s) in scan window", component="Scanner")
        for candidate in candidates:
            # A key may have been published earlier in this pass.
            if self._cache.contains(candidate.key):
                continue
            yield candidate

    def _collect(self) -> list[ScanCandidate]:
        candidates: list[ScanCandidate] = []
        seen: set[str] = set()
        before: str | None = None

        for _ in range(self._max_pages):
            messages = self._chat_client.fetch_history(
                self._channel_id, limit=self._batch_size, before=before
            )
            if not messages:
                break

            reached_start = False
            for message in messages:
                if message.created_at < self._start_date:
                    reached_start = True
                    continue
                for candidate in self._candidates_for(message):
                    if candidate.key in seen or self._cache.contains(candidate.key):
                        continue
                    seen.add(candidate.key)
                    candidates.append(candidate)

            if reached_start or len(messages) < self._batch_size:
                break
            before = min(messages, key=_chronological_message).id

        return candidates

    def _candidates_for(self, message: ChatMessage) -> Iterator[ScanCandidate]:
        fallback = message.author.username if message.author else None
        for embed in message.embeds:
            image_url = embed.image_url
            if not image_url:
                continue
            author = (
                fingerprint.sanitize(fingerprint.derive_author(embed.description, fallback))
                or fingerprint.UNKNOWN_AUTHOR
            )
            ext = fingerprint.file_extension(image_url)
            yield ScanCandidate(
                message=message,
                embed=embed,
                author=author,
                key=fingerprint.derive_key(author, message.id, ext, self._namespace),
                staged_name=fingerprint.staged_name(author, message.id, ext),
                image_url=image_url,
            )


def _chronological_message(message: ChatMessage) -> tuple[datetime, int, str]:
    # Snowflake ids are numeric strings; compare by length first.
    return (message.created_at, len(message.id), message.id)


def _chronological(candidate: ScanCandidate) -> tuple[datetime, int, str]:
    return _chronological_message(candidate.message)
