from abc import ABC, abstractmethod

from snapsync.chat.models import ChatMessage


class BaseChatClient(ABC):
    """Contract for read-only chat platform clients."""

    @abstractmethod
    def fetch_history(
        self,
        channel_id: str,
        *,
        limit: int,
        before: str | None = None,
        after: str | None = None,
    ) -> list[ChatMessage]:
        """Return up to ``limit`` messages, newest first."""
