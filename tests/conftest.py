from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest

from snapsync.chat.client_base import BaseChatClient
from snapsync.chat.models import ChatAuthor, ChatEmbed, ChatMessage

BASE_TIME = datetime(2025, 8, 1, 12, 0, tzinfo=timezone.utc)


class FakeChatClient(BaseChatClient):
    """Serves pre-built pages of history and records every fetch."""

    def __init__(self, pages: list[list[ChatMessage]]) -> None:
        self.pages = list(pages)
        self.calls: list[dict[str, object]] = []

    def fetch_history(
        self,
        channel_id: str,
        *,
        limit: int,
        before: str | None = None,
        after: str | None = None,
    ) -> list[ChatMessage]:
        self.calls.append(
            {"channel_id": channel_id, "limit": limit, "before": before, "after": after}
        )
        if not self.pages:
            return []
        return self.pages.pop(0)


@pytest.fixture()
def make_message() -> Callable[..., ChatMessage]:
    """Build a message with a single image embed."""

    def _make(
        message_id: str = "42",
        description: str | None = "Uploaded by Rocco",
        image_url: str | None = "http://x/a.jpg",
        minutes: int = 0,
        username: str = "poster",
    ) -> ChatMessage:
        return ChatMessage(
            id=message_id,
            created_at=BASE_TIME + timedelta(minutes=minutes),
            author=ChatAuthor(id="7", username=username),
            embeds=(ChatEmbed(description=description, image_url=image_url),),
        )

    return _make


@pytest.fixture()
def chat_client_factory() -> Callable[[list[list[ChatMessage]]], FakeChatClient]:
    return FakeChatClient


@pytest.fixture()
def start_date() -> datetime:
    return BASE_TIME - timedelta(days=1)
