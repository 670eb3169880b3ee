from dataclasses import dataclass
from pathlib import Path

from snapsync.chat.models import ChatEmbed, ChatMessage


@dataclass(frozen=True)
class StagedFile:
    """Image bytes written to scratch storage, waiting to be published."""

    path: Path
    size: int

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def remove(self) -> None:
        self.path.unlink(missing_ok=True)


@dataclass(frozen=True)
class ScanCandidate:
    """An image embed that is not yet in the catalog."""

    message: ChatMessage
    embed: ChatEmbed
    author: str
    key: str
    staged_name: str
    image_url: str
