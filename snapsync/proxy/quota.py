import time
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

import httpx


@dataclass
class CredentialQuotaState:
    """Last observed upstream quota for one credential."""

    remaining: int
    limit: int
    reset: int
    fetched_at: float


def quota_from_headers(response: httpx.Response) -> tuple[int, int, int] | None:
    """Read ``(remaining, limit, reset)`` from X-RateLimit-* headers.

    Returns None when the upstream did not report a remaining count.
    """
    remaining = response.headers.get("X-RateLimit-Remaining")
    if remaining is None:
        return None
    try:
        return (
            int(remaining),
            int(response.headers.get("X-RateLimit-Limit", "5000")),
            int(response.headers.get("X-RateLimit-Reset", "0")),
        )
    except ValueError:
        return None


def obscure(token: str) -> str:
    return token[:8] + "..."


class QuotaTracker:
    """Per-credential quota readings and exhaustion deadlines.

    Shared by all concurrent requests without locking. A race can let one
    request try a credential just past exhaustion; the next upstream response
    corrects the state.
    """

    def __init__(
        self,
        fresh_seconds: float = 10.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._fresh_seconds = fresh_seconds
        self._clock = clock
        self._states: dict[str, CredentialQuotaState] = {}
        self._exhausted_until: dict[str, float] = {}

    def now(self) -> float:
        return self._clock()

    def record(self, token: str, remaining: int, limit: int, reset: int) -> CredentialQuotaState:
        """Store a reading. A zero remaining count exhausts the credential until ``reset``."""
        state = CredentialQuotaState(
            remaining=remaining, limit=limit, reset=reset, fetched_at=self._clock()
        )
        self._states[token] = state
        if remaining <= 0:
            self.mark_exhausted(token, reset)
        return state

    def observe(self, token: str, response: httpx.Response) -> CredentialQuotaState | None:
        quota = quota_from_headers(response)
        if quota is None:
            return None
        return self.record(token, *quota)

    def mark_exhausted(self, token: str, reset: float) -> None:
        self._exhausted_until[token] = reset

    def is_exhausted(self, token: str) -> bool:
        return self._exhausted_until.get(token, 0) > self._clock()

    def exhausted_until(self, token: str) -> float | None:
        return self._exhausted_until.get(token)

    def usable(self, tokens: Iterable[str]) -> Iterator[str]:
        """Credentials in configured order, minus those still exhausted."""
        for token in tokens:
            if not self.is_exhausted(token):
                yield token

    def state(self, token: str) -> CredentialQuotaState | None:
        return self._states.get(token)

    def fresh_state(self, token: str) -> CredentialQuotaState | None:
        """The stored reading, if it is younger than the freshness window."""
        state = self._states.get(token)
        if state is None or self._clock() - state.fetched_at >= self._fresh_seconds:
            return None
        return state
