from datetime import datetime
from typing import Any

import httpx

from snapsync.chat.client_base import BaseChatClient
from snapsync.chat.exceptions import ChatClientError, ChatRateLimitedError
from snapsync.chat.models import ChatAuthor, ChatEmbed, ChatMessage


class DiscordClientAdapter(BaseChatClient):
    """Chat client built on the Discord REST API (bot token auth)."""

    def __init__(
        self,
        *,
        token: str,
        timeout_seconds: int,
        base_url: str = "https://discord.com/api/v10",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers={"Authorization": f"Bot {token}"},
            transport=transport,
        )

    def fetch_history(
        self,
        channel_id: str,
        *,
        limit: int,
        before: str | None = None,
        after: str | None = None,
    ) -> list[ChatMessage]:
        params: dict[str, str | int] = {"limit": limit}
        if before is not None:
            params["before"] = before
        if after is not None:
            params["after"] = after

        try:
            response = self._client.get(f"/channels/{channel_id}/messages", params=params)
        except httpx.HTTPError as exc:
            raise ChatClientError(f"Discord network error: {exc}") from exc

        if response.status_code == 429:
            retry_after = float(response.headers.get("Retry-After", "0") or 0)
            raise ChatRateLimitedError(
                f"Discord rate limited channel fetch for {retry_after}s",
                retry_after=retry_after,
            )
        if response.is_error:
            raise ChatClientError(
                f"Discord API error {response.status_code}: {response.text}"
            )

        payload = response.json()
        if not isinstance(payload, list):
            raise ChatClientError("Discord returned a non-list message payload")
        return [self._parse_message(item) for item in payload]

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _parse_message(item: dict[str, Any]) -> ChatMessage:
        author_data = item.get("author") or None
        author = (
            ChatAuthor(id=str(author_data.get("id", "")), username=author_data.get("username", ""))
            if author_data
            else None
        )
        embeds = tuple(
            ChatEmbed(
                description=embed.get("description"),
                image_url=(embed.get("image") or {}).get("url"),
            )
            for embed in item.get("embeds") or []
        )
        return ChatMessage(
            id=str(item["id"]),
            created_at=datetime.fromisoformat(item["timestamp"]),
            author=author,
            embeds=embeds,
        )
