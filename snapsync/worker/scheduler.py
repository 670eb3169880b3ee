import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass

STARTUP = "startup"
INTERVAL = "interval"
AFTER_BACKOFF = "after_backoff"


@dataclass(frozen=True)
class PassTick:
    """A request to run scan pass number ``number``."""

    number: int
    reason: str


class PassScheduler:
    """Ticker producing "run a pass" events.

    The first tick fires immediately. Every later tick is preceded by a sleep
    of either the re-scan interval or, if ``request_backoff`` was called since
    the previous tick, the rate-limit cool-down.
    """

    def __init__(
        self,
        interval_seconds: float,
        backoff_seconds: float,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._interval_seconds = interval_seconds
        self._backoff_seconds = backoff_seconds
        self._sleep = sleep
        self._backoff_pending = False

    def request_backoff(self) -> None:
        self._backoff_pending = True

    def ticks(self) -> Iterator[PassTick]:
        number = 1
        yield PassTick(number, STARTUP)
        while True:
            number += 1
            if self._backoff_pending:
                self._backoff_pending = False
                self._sleep(self._backoff_seconds)
                yield PassTick(number, AFTER_BACKOFF)
            else:
                self._sleep(self._interval_seconds)
                yield PassTick(number, INTERVAL)
