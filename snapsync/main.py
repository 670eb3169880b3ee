import sys

import httpx

from snapsync.catalog.dedup_cache import DedupCatalogCache
from snapsync.chat.discord_client_adapter import DiscordClientAdapter
from snapsync.config.settings import FatalStartupError, Settings
from snapsync.database.connection import close_pool, init_pool
from snapsync.database.repositories.photos_repository import PhotosRepository
from snapsync.logging.logger import Log
from snapsync.worker.pass_runner import build_pass_runner
from snapsync.worker.scheduler import PassScheduler
from snapsync.worker.worker import Worker


def main() -> None:
    """Entry point: validate config -> init pool -> load catalog -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    try:
        settings.ensure_required()
    except FatalStartupError as exc:
        Log.error(str(exc), component="Startup")
        sys.exit(1)

    init_pool(settings)
    chat_client = DiscordClientAdapter(
        token=settings.discord_token,
        timeout_seconds=settings.http_timeout_seconds,
        base_url=settings.discord_api_base_url,
    )
    http_client = httpx.Client(timeout=settings.http_timeout_seconds)

    try:
        photos_repo = PhotosRepository()
        cache = DedupCatalogCache()
        Log.info("Fetching existing filenames from metadata store", component="Startup")
        cache.load(photos_repo, page_size=settings.catalog_page_size)

        pass_runner = build_pass_runner(settings, cache, http_client, chat_client, photos_repo)
        scheduler = PassScheduler(
            interval_seconds=settings.scan_interval_seconds,
            backoff_seconds=settings.rate_limit_backoff_seconds,
        )
        Worker(pass_runner, scheduler).run()
    finally:
        http_client.close()
        chat_client.close()
        close_pool()


if __name__ == "__main__":
    main()
