import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field

DEFAULT_MAX_ENTRIES = 1024


@dataclass(frozen=True)
class ProxyResponse:
    """Status, body and headers the proxy sends back to its caller."""

    status_code: int
    body: bytes
    media_type: str
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class _Entry:
    response: ProxyResponse
    expires_at: float


class ResponseCache:
    """Read-response cache keyed by exact request URL.

    An entry is served without upstream validation until its TTL runs out.
    At most ``max_entries`` are held; the least recently used entry goes
    first, and expired entries are swept on every ``put``.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        self._clock = clock
        self._max_entries = max(max_entries, 1)
        self._entries: OrderedDict[str, _Entry] = OrderedDict()

    def get(self, key: str) -> ProxyResponse | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return entry.response

    def put(self, key: str, response: ProxyResponse, ttl_seconds: float) -> None:
        now = self._clock()
        self._sweep(now)
        self._entries[key] = _Entry(response, now + ttl_seconds)
        self._entries.move_to_end(key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def _sweep(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)
