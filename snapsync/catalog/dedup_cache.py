from collections.abc import Iterable

from snapsync.database.repositories.photos_repository import PhotosRepository
from snapsync.logging.logger import Log


class DedupCatalogCache:
    """In-memory set of keys already published during this process.

    Hydrated once from the metadata store and grown after each confirmed
    publish. There is no eviction.

    If a page fails while loading, the load stops early and the cache stays
    incomplete. Later stages may then re-publish a known item but never drop a
    new one.
    """

    def __init__(self, keys: Iterable[str] = ()) -> None:
        self._keys: set[str] = set(keys)
        self.complete = True

    def load(self, repo: PhotosRepository, page_size: int = 1000) -> set[str]:
        """Page through every stored filename and add it to the cache."""
        page = 0
        while True:
            start = page * page_size
            try:
                filenames = repo.select_filenames(start, start + page_size - 1)
            except Exception as exc:
                Log.error(
                    f"Error fetching filenames at offset {start}, "
                    f"catalog cache is incomplete: {exc}",
                    component="Catalog",
                )
                self.complete = False
                break
            self._keys.update(filenames)
            if len(filenames) < page_size:
                break
            page += 1
        Log.info(f"Loaded {len(self._keys)} known filenames", component="Catalog")
        return set(self._keys)

    def contains(self, key: str) -> bool:
        return key in self._keys

    def add(self, key: str) -> None:
        self._keys.add(key)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)
