from dataclasses import dataclass


@dataclass(frozen=True)
class Published:
    key: str
    url: str


@dataclass(frozen=True)
class Skipped:
    """The key was already in the catalog."""

    key: str


@dataclass(frozen=True)
class RateLimited:
    """The proxy signalled quota exhaustion. The staged file is kept."""

    key: str
    reason: str


@dataclass(frozen=True)
class Failed:
    """Permanent per-item failure. The staged file is removed."""

    key: str
    reason: str


PublishOutcome = Published | Skipped | RateLimited | Failed
