from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ChatAuthor:
    id: str
    username: str


@dataclass(frozen=True)
class ChatEmbed:
    """Subset of an embed the pipeline cares about."""

    description: str | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class ChatMessage:
    """A channel message as returned by the chat platform."""

    id: str
    created_at: datetime
    author: ChatAuthor | None = None
    embeds: tuple[ChatEmbed, ...] = field(default_factory=tuple)
